"""
Type definitions used across layers
"""

from enum import StrEnum


class GameStatus(StrEnum):
    ACTIVE = "active"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class MoveRejectionReason(StrEnum):
    OUT_OF_BOUNDS = "out of bounds"
    EMPTY_SOURCE = "no piece on the starting square"
    WRONG_TURN = "not your turn"
    ILLEGAL_PIECE_MOVE = "the piece cannot move like that"
    LEAVES_KING_IN_CHECK = "leaves your king in check"
    GAME_OVER = "the game is over"


# --- Color and PieceType mirror the enums of the chess domain, but by name: these are the versions that get sent across boundaries.
# --- NOTE For now, just use the same names (Color and PieceType) as that reads clearly and let the imports show which versions are used in what part of the code


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
