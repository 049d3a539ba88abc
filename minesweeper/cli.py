import argparse
import logging
import os
import sys
from typing import Optional, Sequence, Tuple

from . import config
from .client import run_client
from .game.board import Board, BoardFormatError
from .server import run_server

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def port_number(text: str) -> int:
    try:
        port = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unable to parse number: {text!r}")
    if not 0 <= port <= config.MAX_PORT:
        raise argparse.ArgumentTypeError(f"port {port} out of range")
    return port


def board_size(text: str) -> Tuple[int, int]:
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected SIZE_X,SIZE_Y, got {text!r}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"unable to parse numbers in {text!r}")
    if width < 1 or height < 1:
        raise argparse.ArgumentTypeError(f"board size {width},{height} must be strictly positive")
    return width, height


def board_file(text: str) -> str:
    if not os.path.isfile(text):
        raise argparse.ArgumentTypeError(f'file not found: "{text}"')
    return text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minesweeper", description="Multiplayer Minesweeper over TCP")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    serve_p = subparsers.add_parser("serve", help="Run the shared board server")
    debug_g = serve_p.add_mutually_exclusive_group()
    debug_g.add_argument("--debug", dest="debug", action="store_true", help="Keep clients connected after a BOOM")
    debug_g.add_argument("--no-debug", dest="debug", action="store_false", help="Disconnect clients after a BOOM")
    serve_p.set_defaults(debug=config.DEBUG)
    serve_p.add_argument("--bind", type=str, default=config.DEFAULT_BIND, help="Bind address")
    serve_p.add_argument("--port", type=port_number, default=config.PORT, help="TCP port to listen on")
    board_g = serve_p.add_mutually_exclusive_group()
    board_g.add_argument("--size", type=board_size, metavar="SIZE_X,SIZE_Y", help="Random board of this size")
    board_g.add_argument("--file", type=board_file, metavar="FILE", help="Load the board from a file")
    serve_p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=config.LOG_LEVEL, help="Logging level")

    join_p = subparsers.add_parser("join", help="Join a server from the terminal")
    join_p.add_argument("--address", type=str, required=True, help="Server IP or name")
    join_p.add_argument("--port", type=port_number, default=config.PORT, help="TCP port to connect")
    join_p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING", help="Logging level")

    return parser


def load_board(size: Optional[Tuple[int, int]], path: Optional[str]) -> Board:
    if path is not None:
        logger.info("Loading board from %s", path)
        return Board.from_file(path)
    width, height = size or (config.DEFAULT_SIZE, config.DEFAULT_SIZE)
    logger.info("Generating a random %dx%d board", width, height)
    return Board.from_dimensions(width, height)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.mode == "serve":
        try:
            board = load_board(args.size, args.file)
        except (BoardFormatError, UnicodeDecodeError, OSError) as exc:
            logger.error("Cannot load board: %s", exc)
            sys.exit(1)
        try:
            run_server(board, port=args.port, bind=args.bind, debug=args.debug)
        except OSError as exc:
            logger.error("Server stopped: %s", exc)
            sys.exit(1)
    elif args.mode == "join":
        try:
            run_client(host=args.address, port=args.port)
        except OSError as exc:
            logger.error("Cannot connect to %s:%d: %s", args.address, args.port, exc)
            sys.exit(1)


if __name__ == "__main__":
    main()
