"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chess_rules.core.exceptions import InvalidRequestError
from chess_rules.core.shared_types import Color, GameStatus, PieceType

PieceColor = str
PlayerName = str


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False

    file_character = value[0].lower()
    rank_character = value[1]
    return ("a" <= file_character <= "h") and ("1" <= rank_character <= "8")


def _validate_square(value: str) -> str:
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value.lower()


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    white_player: str = "White"
    black_player: str = "Black"


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class UndoMoveRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.PAWN, PieceType.KING):
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    players: dict[PieceColor, PlayerName]
    board: list[str]
    color_to_move: Color
    status: GameStatus
    move_history: list[str]
    scores: dict[PieceColor, int]
    in_check: dict[PieceColor, bool]
    winner: Optional[PlayerName] = None


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: str
    legal_moves: list[str]
