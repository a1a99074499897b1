"""
A coordinate on the board.

(placed in its own module as multiple other modules need to import it)

Row 0 is the 8th rank (the top of the board as White sees it), row 7 is the 1st rank.
Columns run from the a-file (0) to the h-file (7).
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)

INVALID_NOTATION = "Invalid"


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    @staticmethod
    def in_bounds(row: int, col: int) -> bool:
        return (0 <= row < BOARD_DIMENSIONS[0]) and (0 <= col < BOARD_DIMENSIONS[1])

    def is_valid(self) -> bool:
        return Position.in_bounds(self.row, self.col)

    @classmethod
    def from_algebraic(cls, sq: str) -> Position:
        """
        Algebraic notation: 'a8' gets converted to (0, 0), 'h1' to (7, 7).

        Anything that cannot be read as a square comes back as the INVALID_POSITION sentinel.
        """
        if len(sq) != 2:
            return INVALID_POSITION
        file_char, rank_char = sq[0].lower(), sq[1]
        if not ("a" <= file_char <= "h") or not rank_char.isdigit():
            return INVALID_POSITION
        col = ord(file_char) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(rank_char)
        position = cls(row, col)
        return position if position.is_valid() else INVALID_POSITION

    def to_algebraic(self) -> str:
        if not self.is_valid():
            return INVALID_NOTATION
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[0] - self.row}"

    def __str__(self) -> str:
        return self.to_algebraic()

    def offset(self, d_row: int, d_col: int) -> Position:
        """The position shifted by (d_row, d_col). Might land outside the board."""
        return Position(self.row + d_row, self.col + d_col)

    # --- GEOMETRY ---
    def is_diagonal(self, other: Position) -> bool:
        d_row = abs(self.row - other.row)
        d_col = abs(self.col - other.col)
        return d_row == d_col and d_row != 0

    def is_same_row(self, other: Position) -> bool:
        return self.row == other.row

    def is_same_column(self, other: Position) -> bool:
        return self.col == other.col

    def is_straight(self, other: Position) -> bool:
        """Same row or same column, but not the same square"""
        return self != other and (self.is_same_row(other) or self.is_same_column(other))


# Sentinel for "not found" (e.g. a king that is missing from the board)
INVALID_POSITION = Position(-1, -1)
