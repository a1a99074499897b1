"""
Orchestration of communication from a caller (CLI, API router, ...) to the chess domain (and the reverse direction).

Games live in memory for as long as the service does. Every game has its own lock: a move is validated,
applied and classified in one go, so two requests for the same game never interleave.
Different games do not share any state and can be played in parallel.
"""

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Optional
from uuid import UUID, uuid4

from chess_rules.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    UndoMoveRequest,
)
from chess_rules.chess.game import Game
from chess_rules.chess.pieces import PieceType as DomainPieceType
from chess_rules.chess.position import Position
from chess_rules.core.config import Settings
from chess_rules.core.exceptions import (
    GameNotFoundError,
    GameStateError,
    IllegalMoveError,
    TooManyGamesError,
)
from chess_rules.core.models import GameModel
from chess_rules.core.shared_types import MoveRejectionReason, PieceType

logger = logging.getLogger(__name__)


@dataclass
class GameSlot:
    """A game together with the lock that serializes access to it"""

    game: Game
    lock: Lock = field(default_factory=Lock)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings if settings is not None else Settings()
        self._games: dict[UUID, GameSlot] = {}
        self._registry_lock = Lock()

    # -- Request handling logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Set up a new game in the starting position."""
        game = Game.new_game(
            white=request.white_player,
            black=request.black_player,
            default_promotion=_to_domain_piece_type(self.settings.default_promotion),
        )

        with self._registry_lock:
            if len(self._games) >= self.settings.max_games:
                raise TooManyGamesError(
                    f"Cannot create a new game: already {len(self._games)} games in progress."
                )
            game_id = uuid4()
            self._games[game_id] = GameSlot(game)

        logger.info(
            "Created game %s: %s vs %s",
            game_id,
            request.white_player,
            request.black_player,
        )
        return self._create_game_response(game_id, game.to_model())

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        slot = self._fetch_game(request.game_id)
        with slot.lock:
            model = slot.game.to_model()
        return self._create_game_response(request.game_id, model)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Retrieve the squares the piece on the requested square can move to."""
        slot = self._fetch_game(request.game_id)
        from_square = Position.from_algebraic(request.square)
        with slot.lock:
            targets = slot.game.legal_moves(from_square)
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[target.to_algebraic() for target in targets],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. A refused move raises IllegalMoveError with the reason attached."""
        slot = self._fetch_game(request.game_id)
        from_square = Position.from_algebraic(request.from_square)
        to_square = Position.from_algebraic(request.to_square)
        promotion = (
            _to_domain_piece_type(request.promote_to) if request.promote_to else None
        )

        with slot.lock:
            game = slot.game
            if not game.make_move(from_square, to_square, promotion):
                rejection = game.last_rejection
                reason = MoveRejectionReason[rejection.name] if rejection else None
                raise IllegalMoveError(
                    f"Move not allowed: {request.from_square}{request.to_square} ({reason})",
                    reason=reason,
                )
            model = game.to_model()

        if game.is_over:
            logger.info("Game %s ended: %s", request.game_id, model.status)
        return self._create_game_response(request.game_id, model)

    def undo_move(self, request: UndoMoveRequest) -> GameResponse:
        """Take back the last half-move."""
        slot = self._fetch_game(request.game_id)
        with slot.lock:
            if not slot.game.undo_move():
                raise GameStateError(
                    f"Game {request.game_id} has no moves to take back."
                )
            model = slot.game.to_model()
        return self._create_game_response(request.game_id, model)

    def list_games(self) -> list[UUID]:
        """IDs of all games currently held by the service."""
        with self._registry_lock:
            return list(self._games.keys())

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Forget a game."""
        with self._registry_lock:
            removed = self._games.pop(request.game_id, None)
        if removed is None:
            raise GameNotFoundError(f"Game with {request.game_id=} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, model: GameModel) -> GameResponse:
        """Convert info in GameModel to a GameResponse (for game with given ID.)"""
        return GameResponse(
            game_id=game_id,
            players=model.players,
            board=model.board,
            color_to_move=model.color_to_move,
            status=model.status,
            move_history=model.moves_uci,
            scores=model.scores,
            in_check=model.in_check,
            winner=model.winner,
        )

    def _fetch_game(self, game_id: UUID) -> GameSlot:
        """Attempt to find the game and raise error if it fails."""
        with self._registry_lock:
            slot = self._games.get(game_id)
        if slot is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return slot


def _to_domain_piece_type(piece_type: PieceType) -> DomainPieceType:
    return DomainPieceType[piece_type.name]
