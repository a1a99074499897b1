"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from chess_rules.chess.position import BOARD_DIMENSIONS, Position


class CastlingSide(Enum):
    """Values are the column step the king takes towards the rook."""

    KING_SIDE = 1
    QUEEN_SIDE = -1


# Column the rook starts from (the corner) for either side
ROOK_CORNER_COLUMN: dict[CastlingSide, int] = {
    CastlingSide.KING_SIDE: BOARD_DIMENSIONS[1] - 1,
    CastlingSide.QUEEN_SIDE: 0,
}


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.

    The king always travels two columns towards the rook, the rook lands on the square the king skipped over.
    """

    king_from: Position
    king_to: Position
    rook_from: Position
    rook_to: Position

    @classmethod
    def for_king(cls, king_from: Position, side: CastlingSide) -> Self:
        step = side.value
        king_to = king_from.offset(0, 2 * step)
        rook_from = Position(king_from.row, ROOK_CORNER_COLUMN[side])
        rook_to = king_from.offset(0, step)
        return cls(king_from, king_to, rook_from, rook_to)

    def squares_between(self) -> list[Position]:
        """All squares strictly between king and rook: these must be empty."""
        low, high = sorted((self.king_from.col, self.rook_from.col))
        return [Position(self.king_from.row, col) for col in range(low + 1, high)]

    def king_path(self) -> list[Position]:
        """Square the king stands on, the one it passes through and where it lands: none may be attacked."""
        return [self.king_from, self.rook_to, self.king_to]


def castling_side(king_from: Position, king_to: Position) -> Optional[CastlingSide]:
    """Which side the king castles to, if the move has the shape of castling (two columns along its own row)"""
    if king_from.row != king_to.row:
        return None
    difference_in_columns = king_to.col - king_from.col
    if difference_in_columns == 2:
        return CastlingSide.KING_SIDE
    if difference_in_columns == -2:
        return CastlingSide.QUEEN_SIDE
    return None
