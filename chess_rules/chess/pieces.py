"""Defines the types of chess pieces, and the store that owns every piece of a game"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import NewType

from chess_rules.chess.position import Position

PieceId = NewType("PieceId", int)


class PieceType(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


SYMBOL_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_SYMBOL: dict[PieceType, str] = {
    value: key for key, value in SYMBOL_TO_PIECE.items()
}


PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)


@dataclass(eq=False)
class Piece:
    """
    A single piece on (or formerly on) the board.

    NOTE: eq=False on purpose. Two white pawns are still two different pieces, so pieces compare by identity.
    """

    id: PieceId
    type: PieceType
    color: Color
    position: Position
    has_moved: bool = False

    @property
    def symbol(self) -> str:
        # upper case: White pieces, lower case: Black pieces
        symbol = PIECE_TO_SYMBOL[self.type]
        return symbol.upper() if self.color == Color.WHITE else symbol

    @property
    def name(self) -> str:
        return self.type.name.capitalize()

    @property
    def value(self) -> int:
        # NOTE: The King's worth is undefined (it never gets captured), so it counts as zero
        return PIECE_POINTS.get(self.type, 0)

    def __repr__(self) -> str:
        return f"Piece(id={self.id}, {self.color.name.lower()} {self.name.lower()} on {self.position})"


class PieceStore:
    """
    Sole owner of the pieces of one game.

    Board, squares and moves only ever keep a PieceId. Captured pieces and pawns that got promoted
    stay in the store, so the move history can still tell which piece it was.
    """

    def __init__(self) -> None:
        self._pieces: list[Piece] = []

    def create(self, piece_type: PieceType, color: Color, position: Position) -> Piece:
        piece = Piece(PieceId(len(self._pieces)), piece_type, color, position)
        self._pieces.append(piece)
        return piece

    def __getitem__(self, piece_id: PieceId) -> Piece:
        return self._pieces[piece_id]

    def __len__(self) -> int:
        return len(self._pieces)

    def discard_from(self, piece_id: PieceId) -> None:
        """Forget the given piece and every piece created after it (used when a promotion gets taken back)."""
        del self._pieces[piece_id:]
