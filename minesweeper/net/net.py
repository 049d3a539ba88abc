from __future__ import annotations

import socket
from typing import BinaryIO, Optional

# longest request line the server buffers, newline included
MAX_LINE_BYTES = 4096


class LineTooLongError(ValueError):
    """A line went past the reader's limit; the rest of it was discarded."""


# Newline-terminated UTF-8 text over TCP


def send_line(sock: socket.socket, text: str) -> None:
    sock.sendall((text + "\n").encode("utf-8"))


def make_reader(sock: socket.socket) -> BinaryIO:
    return sock.makefile("rb")


def recv_line(reader: BinaryIO, limit: Optional[int] = None) -> Optional[str]:
    """Read one line, or return None once the peer has closed its side.

    Undecodable bytes are replaced rather than rejected. With ``limit`` set, a
    longer line is skipped up to its newline and ``LineTooLongError`` raised.
    """
    raw = reader.readline(-1 if limit is None else limit)
    if not raw:
        return None
    if limit is not None and len(raw) >= limit and not raw.endswith(b"\n"):
        chunk = raw
        while chunk and not chunk.endswith(b"\n"):
            chunk = reader.readline(limit)
        raise LineTooLongError(f"line longer than {limit} bytes")
    line = raw.decode("utf-8", errors="replace")
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def open_server(bind: str, port: int, backlog: int = 16) -> socket.socket:
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        srv.bind((bind, port))
        srv.listen(backlog)
    except OSError:
        srv.close()
        raise
    return srv


def open_client(host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
    return socket.create_connection((host, port), timeout=timeout)
