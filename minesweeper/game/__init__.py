from .board import Board, BoardFormatError, SquareView
from .square import InvariantError, Position, Square, SquareState

__all__ = [
    "Board",
    "BoardFormatError",
    "InvariantError",
    "Position",
    "Square",
    "SquareState",
    "SquareView",
]
