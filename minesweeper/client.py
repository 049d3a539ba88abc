from __future__ import annotations

import logging
import socket
import sys
import threading
from typing import Optional, TextIO

from .net.net import make_reader, open_client, recv_line, send_line

logger = logging.getLogger(__name__)


def run_client(host: str, port: int, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
    """Relay lines typed on ``stdin`` to the server and print whatever comes back."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    logger.info("Connecting to %s:%d", host, port)
    sock = open_client(host, port)
    closed = threading.Event()

    def loop() -> None:
        try:
            with make_reader(sock) as reader:
                while True:
                    line = recv_line(reader)
                    if line is None:
                        break
                    print(line, file=stdout, flush=True)
        except OSError as exc:
            logger.warning("Connection lost: %s", exc)
        finally:
            closed.set()
            logger.info("Disconnected from %s:%d", host, port)

    recv_thread = threading.Thread(target=loop, daemon=True)
    recv_thread.start()
    try:
        for line in stdin:
            if closed.is_set():
                break
            send_line(sock, line.rstrip("\r\n"))
        else:
            # no more input: let the server finish its replies
            try:
                sock.shutdown(socket.SHUT_WR)
            except OSError:
                pass
        recv_thread.join()
    except OSError as exc:
        logger.warning("Connection lost: %s", exc)
    finally:
        try:
            sock.close()
        except OSError:
            pass
