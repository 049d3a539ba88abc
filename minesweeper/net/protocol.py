from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# Messages exchanged over the wire, one UTF-8 line each (terminated by '\n')
# Client to server:
# - look              -> BOARD
# - help              -> HELP
# - bye               -> BYE, then the server closes the connection
# - dig X Y           -> BOARD, or BOOM when the square held a bomb
# - flag X Y          -> BOARD
# - deflag X Y        -> BOARD
# Anything else is answered with HELP.
# Server to client:
# - HELLO: welcome line sent once on connect
# - BOARD: one line per row, tokens separated by a single space:
#          '-' untouched, 'F' flagged, '1'..'8' dug next to bombs, ' ' dug and clear
# - BOOM / BYE / HELP: fixed literals below

BOOM_MESSAGE = "BOOM!"
BYE_MESSAGE = "Bye"
HELP_MESSAGE = (
    'Send a message to perform an action. Possible messages: "help" (get this message again) / '
    '"dig X Y" (dig at position (X, Y)) / "flag X Y" (flag position (X, Y)) / '
    '"deflag X Y" (remove the flag at position (X, Y)) / "look" (have a look at the board) / '
    '"bye" (exit the game)'
)

LOOK = "look"
HELP = "help"
BYE = "bye"
DIG = "dig"
FLAG = "flag"
DEFLAG = "deflag"

_REQUEST_RE = re.compile(r"(look)|(help)|(bye)|(dig|flag|deflag) (-?[0-9]+) (-?[0-9]+)")


@dataclass(frozen=True)
class Request:
    command: str
    x: Optional[int] = None
    y: Optional[int] = None


def parse_request(line: str) -> Optional[Request]:
    """Parse one client line, or return None if it is not part of the grammar."""
    match = _REQUEST_RE.fullmatch(line)
    if match is None:
        return None
    if match.group(4) is None:
        return Request(line)
    return Request(match.group(4), int(match.group(5)), int(match.group(6)))


def hello_message(players: int, width: int, height: int) -> str:
    return (
        f"Welcome to Minesweeper. Players: {players} including you. "
        f"Board: {width} columns by {height} rows. Type 'help' for help."
    )
