from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from . import config
from .game.board import Board
from .game.square import Position
from .net.net import MAX_LINE_BYTES, LineTooLongError, make_reader, open_server, recv_line, send_line
from .net.protocol import (
    BOOM_MESSAGE,
    BYE,
    BYE_MESSAGE,
    DEFLAG,
    DIG,
    FLAG,
    HELP,
    HELP_MESSAGE,
    LOOK,
    hello_message,
    parse_request,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reply:
    text: str
    close: bool = False


class MinesweeperServer:
    """Multiplayer minesweeper server.

    One thread accepts connections and every client is served by its own
    daemon thread. The board is the only state shared between clients and is
    thread-safe on its own; the player counter has a separate lock.
    """

    def __init__(
        self,
        board: Board,
        port: int = config.DEFAULT_PORT,
        bind: str = config.DEFAULT_BIND,
        debug: bool = False,
        poll_interval: float = 0.5,
    ) -> None:
        self.board = board
        self.debug = debug
        self.srv = open_server(bind, port)
        # accept() wakes up periodically so shutdown() is noticed
        self.srv.settimeout(poll_interval)
        self.stopped = threading.Event()
        self._clients = 0
        self._clients_lock = threading.Lock()
        self._connections: Set[socket.socket] = set()
        self._serve_thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self.srv.getsockname()[:2]
        return host, port

    @property
    def connected_clients(self) -> int:
        with self._clients_lock:
            return self._clients

    # ------------------------------------------------------------------ lifecycle

    def serve_forever(self) -> None:
        """Accept clients until shutdown() is called.

        Errors on a single connection never reach this loop; only a failure of
        the listening socket itself propagates.
        """
        logger.info("Listening on %s:%d (debug=%s)", *self.address, self.debug)
        try:
            while not self.stopped.is_set():
                try:
                    conn, addr = self.srv.accept()
                except socket.timeout:
                    continue
                except ConnectionAbortedError:
                    continue
                except OSError:
                    if self.stopped.is_set():
                        break
                    raise
                conn.settimeout(None)
                players = self._client_connected(conn)
                logger.info("Client %s:%d connected (%d playing)", addr[0], addr[1], players)
                threading.Thread(target=self._run_connection, args=(conn, addr), daemon=True).start()
        finally:
            self.srv.close()

    def start(self) -> threading.Thread:
        self._serve_thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._serve_thread.start()
        return self._serve_thread

    def shutdown(self) -> None:
        self.stopped.set()
        if self._serve_thread is not None and self._serve_thread is not threading.current_thread():
            self._serve_thread.join()
        else:
            self.srv.close()
        with self._clients_lock:
            connections = list(self._connections)
        for conn in connections:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

    def __enter__(self) -> MinesweeperServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # ------------------------------------------------------------------ connections

    def _client_connected(self, conn: socket.socket) -> int:
        with self._clients_lock:
            self._clients += 1
            self._connections.add(conn)
            return self._clients

    def _client_disconnected(self, conn: socket.socket) -> int:
        with self._clients_lock:
            self._clients = max(0, self._clients - 1)
            self._connections.discard(conn)
            return self._clients

    def _run_connection(self, conn: socket.socket, addr: Tuple[str, int]) -> None:
        try:
            self._handle_connection(conn)
        except OSError as exc:
            logger.warning("Connection with %s:%d failed: %s", addr[0], addr[1], exc)
        finally:
            players = self._client_disconnected(conn)
            try:
                conn.close()
            except OSError:
                pass
            logger.info("Client %s:%d disconnected (%d playing)", addr[0], addr[1], players)

    def _handle_connection(self, conn: socket.socket) -> None:
        with make_reader(conn) as reader:
            send_line(conn, hello_message(self.connected_clients, self.board.width, self.board.height))
            while True:
                try:
                    line = recv_line(reader, MAX_LINE_BYTES)
                except LineTooLongError:
                    reply = Reply(HELP_MESSAGE)
                else:
                    if line is None:
                        return
                    reply = self.handle_request(line)
                send_line(conn, reply.text)
                if reply.close:
                    return

    # ------------------------------------------------------------------ protocol

    def handle_request(self, line: str) -> Reply:
        """Apply one client line to the board and build the reply."""
        request = parse_request(line)
        if request is None:
            return Reply(HELP_MESSAGE)

        if request.command == LOOK:
            return Reply(self.board.render())
        if request.command == HELP:
            return Reply(HELP_MESSAGE)
        if request.command == BYE:
            return Reply(BYE_MESSAGE, close=True)

        x, y = request.x, request.y
        if not self.board.in_bounds(x, y):
            return Reply(self.board.render())
        position = Position(x, y)

        if request.command == DIG:
            if self.board.dig(position):
                logger.info("Bomb detonated at (%d, %d)", x, y)
                return Reply(BOOM_MESSAGE, close=not self.debug)
        elif request.command == FLAG:
            self.board.flag(position)
        elif request.command == DEFLAG:
            self.board.deflag(position)
        return Reply(self.board.render())


def run_server(board: Board, port: int = config.DEFAULT_PORT, bind: str = config.DEFAULT_BIND, debug: bool = False) -> None:
    server = MinesweeperServer(board, port=port, bind=bind, debug=debug)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server interrupted, shutting down")
    finally:
        server.shutdown()
