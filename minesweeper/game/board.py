from __future__ import annotations

import logging
import random
import re
import threading
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Sequence, Union

from .. import config
from .square import InvariantError, Position, Square, SquareState

logger = logging.getLogger(__name__)

# Serialized board description:
#   FILE  ::= BOARD LINE+
#   BOARD ::= X SPACE Y NEWLINE
#   LINE  ::= (VAL SPACE)* VAL NEWLINE
#   VAL   ::= 0 | 1
_HEADER_RE = re.compile(r"[0-9]+ [0-9]+")
_LINE_RE = re.compile(r"([01] )*[01]")

_NEIGHBOR_OFFSETS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
]


class BoardFormatError(ValueError):
    """The serialized description of a board does not match the grammar."""


class SquareView(NamedTuple):
    """Read-only copy of one square, taken under the board lock."""

    position: Position
    state: SquareState
    has_bomb: bool


class Board:
    """A fixed-size minesweeper board shared by every connected player.

    Squares are stored column-major: ``squares[x][y]`` is the square at
    column ``x`` and row ``y``, with the origin in the top left corner.

    Every public method holds ``lock``. The lock is re-entrant, so a caller
    that must check then act atomically can hold ``board.lock`` across several
    calls.
    """

    def __init__(self, squares: List[List[Square]], width: int, height: int) -> None:
        self._squares = squares
        self._width = width
        self._height = height
        self._lock = threading.RLock()
        self._check()

    # ------------------------------------------------------------------ factories

    @classmethod
    def from_squares(cls, squares: Sequence[Sequence[Square]]) -> Board:
        """Build a board from a prepared grid, for tests.

        ``squares`` is indexed ``[x][y]``: the outer dimension is the width.
        """
        if not squares or not squares[0]:
            raise InvariantError("a board needs at least one square")
        width = len(squares)
        height = len(squares[0])
        grid = [list(column) for column in squares]
        for column in grid:
            if len(column) != height:
                raise InvariantError("all columns of a board must have the same height")
            if any(square is None for square in column):
                raise InvariantError("a board cannot hold empty squares")
        return cls(grid, width, height)

    @classmethod
    def from_dimensions(
        cls,
        width: int,
        height: int,
        bomb_probability: float = config.BOMB_PROBABILITY,
        rng: Optional[random.Random] = None,
    ) -> Board:
        if width < 1 or height < 1:
            raise ValueError(f"the width {width} and the height {height} should both be strictly positive")
        rng = rng or random.Random()
        squares = [
            [Square(rng.random() < bomb_probability) for _ in range(height)]
            for _ in range(width)
        ]
        board = cls(squares, width, height)
        logger.debug("Generated a %dx%d board with %d bombs", width, height, board._bomb_count())
        return board

    @classmethod
    def from_serialized_form(cls, text: str) -> Board:
        lines = text.splitlines()
        if not lines:
            raise BoardFormatError("the board description is empty")

        header = lines[0]
        if not _HEADER_RE.fullmatch(header):
            raise BoardFormatError(f"the board header {header!r} should follow the pattern {_HEADER_RE.pattern!r}")
        width, height = (int(token) for token in header.split(" "))
        if width < 1 or height < 1:
            raise BoardFormatError(f"the width {width} and the height {height} should both be strictly positive")
        body = lines[1:]
        if len(body) != height:
            raise BoardFormatError(f"the board height {height} does not match the number of lines {len(body)}")

        squares: List[List[Square]] = [[] for _ in range(width)]
        for line in body:
            if not _LINE_RE.fullmatch(line):
                raise BoardFormatError(f"the board line {line!r} should follow the pattern {_LINE_RE.pattern!r}")
            tokens = line.split(" ")
            if len(tokens) != width:
                raise BoardFormatError(f"the board line {line!r} does not hold {width} values")
            for x, token in enumerate(tokens):
                squares[x].append(Square(token == "1"))
        return cls(squares, width, height)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Board:
        text = Path(path).read_text(encoding="utf-8")
        return cls.from_serialized_form(text)

    # ------------------------------------------------------------------ observers

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def squares(self) -> Iterator[SquareView]:
        with self._lock:
            views = [
                SquareView(Position(x, y), square.state, square.has_bomb)
                for x, column in enumerate(self._squares)
                for y, square in enumerate(column)
            ]
        return iter(views)

    def position_contains_bomb(self, position: Position) -> bool:
        with self._lock:
            return self._square_at(position).has_bomb

    def render(self) -> str:
        with self._lock:
            rows = []
            for y in range(self._height):
                rows.append(" ".join(self._token(self._squares[x][y]) for x in range(self._width)))
            return "\n".join(rows)

    def __str__(self) -> str:
        return self.render()

    # ------------------------------------------------------------------ mutators

    def flag(self, position: Position) -> None:
        with self._lock:
            self._square_at(position).flag()

    def deflag(self, position: Position) -> None:
        with self._lock:
            self._square_at(position).deflag()

    def dig_at(self, position: Position, contains_bomb: bool) -> None:
        """Dig ``position`` and reveal the all-clear region around it.

        ``contains_bomb`` says whether the square held a bomb right before this
        call; when it did, the cached counts of its neighbours drop by one.
        Digging a flagged or already dug square does nothing. Each square it
        changes checks its own invariants; the grid shape only at construction.
        """
        with self._lock:
            self._dig_at(position, contains_bomb)

    def dig(self, position: Position) -> bool:
        """Check for a bomb and dig in one step; return True on a detonation."""
        with self._lock:
            contains_bomb = self.position_contains_bomb(position)
            self.dig_at(position, contains_bomb)
        return contains_bomb

    # ------------------------------------------------------------------ internals

    def _dig_at(self, position: Position, contains_bomb: bool) -> None:
        square = self._square_at(position)
        if square.state != SquareState.UNTOUCHED:
            return

        neighbors = self._neighbors(position)
        neighbor_squares = [self._square_at(p) for p in neighbors]
        square.dig(neighbor_squares, by_propagation=False)
        if contains_bomb:
            for neighbor in neighbor_squares:
                neighbor.decrement_neighbor_bomb_count()
        if any(neighbor.has_bomb for neighbor in neighbor_squares):
            return

        # cascade through the all-clear region; a square is dug when popped
        pending = list(neighbors)
        revealed = 1
        while pending:
            current = pending.pop()
            square = self._square_at(current)
            if square.state != SquareState.UNTOUCHED:
                continue
            around = self._neighbors(current)
            around_squares = [self._square_at(p) for p in around]
            square.dig(around_squares, by_propagation=True)
            revealed += 1
            if not any(neighbor.has_bomb for neighbor in around_squares):
                pending.extend(p for p, s in zip(around, around_squares) if s.state == SquareState.UNTOUCHED)
        logger.debug("Dig at (%d, %d) revealed %d squares", position.x, position.y, revealed)

    def _neighbors(self, position: Position) -> List[Position]:
        result = []
        for dx, dy in _NEIGHBOR_OFFSETS:
            nx, ny = position.x + dx, position.y + dy
            if self.in_bounds(nx, ny):
                result.append(Position(nx, ny))
        return result

    def _square_at(self, position: Position) -> Square:
        if not self.in_bounds(position.x, position.y):
            raise IndexError(f"position ({position.x}, {position.y}) is outside a {self._width}x{self._height} board")
        return self._squares[position.x][position.y]

    def _bomb_count(self) -> int:
        return sum(1 for column in self._squares for square in column if square.has_bomb)

    @staticmethod
    def _token(square: Square) -> str:
        if square.state == SquareState.UNTOUCHED:
            return "-"
        if square.state == SquareState.FLAGGED:
            return "F"
        count = square.neighbor_bomb_count
        return str(count) if count else " "

    def check_rep(self) -> None:
        if self._width < 1 or self._height < 1:
            raise InvariantError(f"board dimensions {self._width}x{self._height} must be positive")
        if len(self._squares) != self._width:
            raise InvariantError("the number of columns does not match the width")
        for column in self._squares:
            if len(column) != self._height:
                raise InvariantError("a column does not match the height")
            for square in column:
                if square is None:
                    raise InvariantError("a board cannot hold empty squares")
                square.check_rep()

    def _check(self) -> None:
        if config.CHECK_REP:
            self.check_rep()
