"""Unit tests for chess_rules/chess/position.py"""

from string import ascii_lowercase

import pytest

from chess_rules.chess.position import (
    BOARD_DIMENSIONS,
    INVALID_NOTATION,
    INVALID_POSITION,
    Position,
)


@pytest.mark.parametrize(
    "row, col, notation",
    [
        (row, col, f"{ascii_lowercase[col]}{8 - row}")
        for row in range(8)
        for col in range(8)
    ],
)
def test_creating_from_algebraic(row: int, col: int, notation: str) -> None:
    """Row 0 is the 8th rank, column 0 the a-file: 'a8' maps to (0, 0), 'h1' to (7, 7)"""
    position = Position.from_algebraic(notation)
    assert position == Position(row, col)
    assert position.to_algebraic() == notation


def test_every_valid_position_survives_notation() -> None:
    """Reading back the notation of a position gives the same position"""
    for row in range(BOARD_DIMENSIONS[0]):
        for col in range(BOARD_DIMENSIONS[1]):
            position = Position(row, col)
            assert Position.from_algebraic(str(position)) == position


def test_corners() -> None:
    assert Position.from_algebraic("a8") == Position(0, 0)
    assert Position.from_algebraic("h1") == Position(7, 7)
    assert Position.from_algebraic("e2") == Position(6, 4)


@pytest.mark.parametrize("notation", ["", "e", "e44", "i1", "a9", "a0", "11", "zz"])
def test_unreadable_notation_gives_sentinel(notation: str) -> None:
    assert Position.from_algebraic(notation) == INVALID_POSITION


def test_position_within_bounds() -> None:
    for row in range(BOARD_DIMENSIONS[0]):
        for col in range(BOARD_DIMENSIONS[1]):
            assert Position(row, col).is_valid()
            assert Position.in_bounds(row, col)


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (8, 0), (0, 8), (-1, -1)])
def test_position_out_of_bounds(row: int, col: int) -> None:
    assert not Position(row, col).is_valid()
    assert not Position.in_bounds(row, col)


def test_invalid_position_renders_as_sentinel_string() -> None:
    assert INVALID_POSITION.to_algebraic() == INVALID_NOTATION
    assert str(Position(9, 9)) == INVALID_NOTATION


def test_positions_are_values() -> None:
    """Equal coordinates: equal positions (and usable as dict keys)"""
    assert Position(3, 4) == Position(3, 4)
    assert len({Position(3, 4), Position(3, 4)}) == 1


def test_geometry_predicates() -> None:
    d4 = Position.from_algebraic("d4")
    assert d4.is_diagonal(Position.from_algebraic("g7"))
    assert d4.is_diagonal(Position.from_algebraic("a1"))
    assert not d4.is_diagonal(d4)
    assert not d4.is_diagonal(Position.from_algebraic("d7"))

    assert d4.is_same_row(Position.from_algebraic("h4"))
    assert d4.is_same_column(Position.from_algebraic("d8"))
    assert d4.is_straight(Position.from_algebraic("d1"))
    assert not d4.is_straight(d4)
    assert not d4.is_straight(Position.from_algebraic("e6"))
