import os
import sys
from pathlib import Path

import pytest

# Ensure the repository root (containing the `minesweeper` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from minesweeper.server import MinesweeperServer
from tests.utils import LineClient

BOARDS_DIR = Path(CURRENT_DIR) / 'boards'


@pytest.fixture()
def boards_dir():
    return BOARDS_DIR


@pytest.fixture()
def start_server():
    servers = []

    def _start(board, debug=False):
        server = MinesweeperServer(board, port=0, bind='127.0.0.1', debug=debug, poll_interval=0.05)
        server.start()
        servers.append(server)
        return server

    yield _start
    for server in servers:
        server.shutdown()


@pytest.fixture()
def connect():
    clients = []

    def _connect(server):
        client = LineClient(server.address)
        clients.append(client)
        return client

    yield _connect
    for client in clients:
        try:
            client.close()
        except OSError:
            pass
