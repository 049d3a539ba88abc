from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .. import config

MAX_NEIGHBORS = 8


class InvariantError(AssertionError):
    """Raised when a square or board is driven into an inconsistent state."""


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"position ({self.x}, {self.y}) has a negative coordinate")


class SquareState(str, Enum):
    UNTOUCHED = "UNTOUCHED"
    FLAGGED = "FLAGGED"
    DUG = "DUG"


class Square:
    """A single cell of the board.

    A square starts untouched and leaves that state only through ``flag`` or
    ``dig``. Once dug it never holds a bomb and caches how many of its direct
    neighbours held one at dig time.
    """

    def __init__(self, has_bomb: bool = False) -> None:
        self._state = SquareState.UNTOUCHED
        self._has_bomb = bool(has_bomb)
        self._neighbor_bomb_count: Optional[int] = None
        self._check()

    @property
    def state(self) -> SquareState:
        return self._state

    @property
    def has_bomb(self) -> bool:
        return self._has_bomb

    @property
    def neighbor_bomb_count(self) -> int:
        if self._state != SquareState.DUG:
            raise InvariantError("neighbor bomb count is only defined on a dug square")
        assert self._neighbor_bomb_count is not None
        return self._neighbor_bomb_count

    def flag(self) -> None:
        if self._state == SquareState.UNTOUCHED:
            self._state = SquareState.FLAGGED
        self._check()

    def deflag(self) -> None:
        if self._state == SquareState.FLAGGED:
            self._state = SquareState.UNTOUCHED
        self._check()

    def dig(self, direct_neighbors: Sequence[Square], by_propagation: bool) -> None:
        """Dig this square and count the bombs among ``direct_neighbors``.

        A direct dig clears the bomb unconditionally; reacting to the
        detonation is up to the caller. A propagated dig must never land on a
        bomb.
        """
        if self._state != SquareState.UNTOUCHED:
            raise InvariantError(f"cannot dig a square in state {self._state.value}")
        if len(direct_neighbors) > MAX_NEIGHBORS:
            raise InvariantError(f"a square has at most {MAX_NEIGHBORS} neighbors, got {len(direct_neighbors)}")

        if by_propagation:
            if self._has_bomb:
                raise InvariantError("a propagated dig reached a square holding a bomb")
        else:
            self._has_bomb = False

        self._state = SquareState.DUG
        self._neighbor_bomb_count = sum(1 for neighbor in direct_neighbors if neighbor.has_bomb)
        self._check()

    def decrement_neighbor_bomb_count(self) -> None:
        # only after a neighbouring bomb was detonated and removed
        if self._neighbor_bomb_count is not None and self._neighbor_bomb_count > 0:
            self._neighbor_bomb_count -= 1
        self._check()

    def check_rep(self) -> None:
        if self._state == SquareState.DUG:
            if self._neighbor_bomb_count is None:
                raise InvariantError("dug square without a neighbor bomb count")
            if not 0 <= self._neighbor_bomb_count <= MAX_NEIGHBORS:
                raise InvariantError(f"neighbor bomb count {self._neighbor_bomb_count} out of range")
            if self._has_bomb:
                raise InvariantError("dug square still holds a bomb")
        elif self._neighbor_bomb_count is not None:
            raise InvariantError(f"{self._state.value} square carries a neighbor bomb count")

    def _check(self) -> None:
        if config.CHECK_REP:
            self.check_rep()

    def __repr__(self) -> str:
        return (
            f"Square(state={self._state.value}, has_bomb={self._has_bomb}, "
            f"neighbor_bomb_count={self._neighbor_bomb_count})"
        )
