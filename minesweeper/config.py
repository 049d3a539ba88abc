"""Runtime defaults and environment-driven settings."""
from __future__ import annotations

import os
from typing import Final

DEFAULT_PORT: Final[int] = 4444
MAX_PORT: Final[int] = 65535
DEFAULT_BIND: Final[str] = "0.0.0.0"
DEFAULT_SIZE: Final[int] = 10
BOMB_PROBABILITY: Final[float] = 0.25


_FLAG_WORDS = {
    **dict.fromkeys(("1", "true", "yes", "on"), True),
    **dict.fromkeys(("0", "false", "no", "off"), False),
}


def env_flag(name: str, *, default: bool = False) -> bool:
    """Read an on/off switch such as ``MINESWEEPER_DEBUG``; unknown words keep ``default``."""
    return _FLAG_WORDS.get(os.getenv(name, "").strip().lower(), default)


def env_port(name: str, *, default: int = DEFAULT_PORT) -> int:
    """Return a port number from the environment, or ``default`` if unset or invalid."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        port = int(value.strip())
    except ValueError:
        return default
    if not 0 <= port <= MAX_PORT:
        return default
    return port


DEBUG: Final[bool] = env_flag("MINESWEEPER_DEBUG", default=False)
PORT: Final[int] = env_port("MINESWEEPER_PORT")
LOG_LEVEL: Final[str] = os.getenv("MINESWEEPER_LOG_LEVEL", "INFO").upper()
# run check_rep() on every square a mutation changes
CHECK_REP: Final[bool] = env_flag("MINESWEEPER_CHECK_REP", default=True)

__all__ = [
    "BOMB_PROBABILITY",
    "CHECK_REP",
    "DEBUG",
    "DEFAULT_BIND",
    "DEFAULT_PORT",
    "DEFAULT_SIZE",
    "LOG_LEVEL",
    "MAX_PORT",
    "PORT",
    "env_flag",
    "env_port",
]
