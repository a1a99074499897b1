"""
A single cell of the board.

The square only keeps the handle of the piece standing on it. The piece itself is owned by the PieceStore.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from chess_rules.chess.pieces import PieceId
from chess_rules.chess.position import Position


class Shade(Enum):
    """Purely cosmetic: the color the square is painted in"""

    LIGHT = auto()
    DARK = auto()


def shade_of(position: Position) -> Shade:
    # a8 (row 0, col 0) is a light square
    return Shade.LIGHT if (position.row + position.col) % 2 == 0 else Shade.DARK


@dataclass
class Square:
    position: Position
    occupant: Optional[PieceId] = None

    @property
    def shade(self) -> Shade:
        return shade_of(self.position)

    def is_empty(self) -> bool:
        return self.occupant is None

    def set_piece(self, piece_id: PieceId) -> None:
        self.occupant = piece_id

    def clear(self) -> Optional[PieceId]:
        """Empty the square, handing back whatever stood on it"""
        piece_id = self.occupant
        self.occupant = None
        return piece_id
