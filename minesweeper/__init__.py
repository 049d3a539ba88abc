"""Multiplayer minesweeper over a line-based TCP protocol."""

__version__ = "0.1.0"
