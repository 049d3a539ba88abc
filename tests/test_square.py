import pytest

from minesweeper.game import InvariantError, Position, Square, SquareState


def test_new_square_is_untouched():
    square = Square(True)
    assert square.state == SquareState.UNTOUCHED
    assert square.has_bomb
    with pytest.raises(InvariantError):
        square.neighbor_bomb_count


def test_flag_and_deflag():
    square = Square(False)
    square.flag()
    assert square.state == SquareState.FLAGGED
    # flagging twice keeps it flagged
    square.flag()
    assert square.state == SquareState.FLAGGED
    square.deflag()
    assert square.state == SquareState.UNTOUCHED
    square.deflag()
    assert square.state == SquareState.UNTOUCHED


def test_dig_counts_neighbor_bombs():
    square = Square(False)
    neighbors = [Square(True), Square(False), Square(True)]
    square.dig(neighbors, by_propagation=False)
    assert square.state == SquareState.DUG
    assert square.neighbor_bomb_count == 2


def test_direct_dig_removes_bomb():
    square = Square(True)
    square.dig([], by_propagation=False)
    assert not square.has_bomb
    assert square.neighbor_bomb_count == 0


def test_flag_and_deflag_ignore_dug_square():
    square = Square(False)
    square.dig([Square(True)], by_propagation=False)
    square.flag()
    assert square.state == SquareState.DUG
    square.deflag()
    assert square.state == SquareState.DUG


def test_propagated_dig_on_bomb_is_rejected():
    square = Square(True)
    with pytest.raises(InvariantError):
        square.dig([], by_propagation=True)


def test_dig_twice_is_rejected():
    square = Square(False)
    square.dig([], by_propagation=False)
    with pytest.raises(InvariantError):
        square.dig([], by_propagation=False)


def test_dig_flagged_square_is_rejected():
    square = Square(False)
    square.flag()
    with pytest.raises(InvariantError):
        square.dig([], by_propagation=False)


def test_dig_with_too_many_neighbors_is_rejected():
    square = Square(False)
    with pytest.raises(InvariantError):
        square.dig([Square(False) for _ in range(9)], by_propagation=False)
    assert square.state == SquareState.UNTOUCHED


def test_decrement_neighbor_bomb_count():
    square = Square(False)
    square.dig([Square(True), Square(True)], by_propagation=False)
    square.decrement_neighbor_bomb_count()
    assert square.neighbor_bomb_count == 1
    square.decrement_neighbor_bomb_count()
    square.decrement_neighbor_bomb_count()
    assert square.neighbor_bomb_count == 0


def test_decrement_on_untouched_square_is_noop():
    square = Square(True)
    square.decrement_neighbor_bomb_count()
    assert square.state == SquareState.UNTOUCHED
    assert square.has_bomb


def test_repr_mentions_state():
    assert "UNTOUCHED" in repr(Square(False))


def test_position_is_a_value():
    assert Position(1, 2) == Position(1, 2)
    assert len({Position(1, 2), Position(1, 2), Position(2, 1)}) == 2


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (-3, -3)])
def test_position_rejects_negative_coordinates(x, y):
    with pytest.raises(ValueError):
        Position(x, y)
