import socket

from minesweeper.game import Board, Square
from minesweeper.net.net import make_reader, recv_line, send_line


def make_board(rows):
    """Build a board from rows of 0/1 bomb markers, laid out like a board file."""
    height = len(rows)
    width = len(rows[0])
    columns = [[Square(bool(rows[y][x])) for y in range(height)] for x in range(width)]
    return Board.from_squares(columns)


class LineClient:
    def __init__(self, address, timeout=3.0):
        self.sock = socket.create_connection(address, timeout=timeout)
        self.reader = make_reader(self.sock)

    def send(self, text):
        send_line(self.sock, text)

    def read_line(self):
        return recv_line(self.reader)

    def read_lines(self, count):
        return [self.read_line() for _ in range(count)]

    def close(self):
        self.reader.close()
        self.sock.close()
