"""Unit tests for chess_rules/services/chess_service.py"""

import logging
from uuid import UUID, uuid4

import pytest

from chess_rules.core.config import Settings
from chess_rules.core.exceptions import (
    GameError,
    GameNotFoundError,
    GameStateError,
    IllegalMoveError,
    TooManyGamesError,
)
from chess_rules.core.shared_types import Color, GameStatus, MoveRejectionReason
from chess_rules.services.chess_service import (
    ChessService,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    UndoMoveRequest,
)

STARTING_BOARD = [
    "rnbqkbnr",
    "pppppppp",
    "........",
    "........",
    "........",
    "........",
    "PPPPPPPP",
    "RNBQKBNR",
]
PLAYER_WHITE = "Whitey McWhite"
PLAYER_BLACK = "Blackey McBlack"


@pytest.fixture
def service() -> ChessService:
    return ChessService(Settings(max_games=5))


@pytest.fixture
def game_id(service: ChessService) -> UUID:
    """ID of a freshly created game"""
    request = CreateGameRequest(white_player=PLAYER_WHITE, black_player=PLAYER_BLACK)
    return service.create_new_game(request).game_id


def play(service: ChessService, game_id: UUID, moves: str) -> GameResponse:
    """Play space separated coordinate moves ("e2e4 e7e5 ..."), returns the last response"""
    response = None
    for uci in moves.split():
        response = service.make_move(
            MoveRequest(game_id=game_id, from_square=uci[:2], to_square=uci[2:4])
        )
    assert response is not None
    return response


# --- SERVICE - CREATE NEW GAME ----
def test_create_a_new_game(service: ChessService) -> None:
    """Check that a new game is created, kept by the service, and the response has the appropriate information."""
    request = CreateGameRequest(white_player=PLAYER_WHITE, black_player=PLAYER_BLACK)
    response = service.create_new_game(request)

    # Check response structure
    assert isinstance(response, GameResponse)
    assert isinstance(response.game_id, UUID)

    # Check response data
    assert response.board == STARTING_BOARD
    assert response.players == {"white": PLAYER_WHITE, "black": PLAYER_BLACK}
    assert response.color_to_move == Color.WHITE
    assert response.status == GameStatus.ACTIVE
    assert response.move_history == []
    assert response.winner is None

    assert service.list_games() == [response.game_id]


def test_game_limit() -> None:
    service = ChessService(Settings(max_games=1))
    _ = service.create_new_game(CreateGameRequest())
    with pytest.raises(TooManyGamesError):
        _ = service.create_new_game(CreateGameRequest())


def test_service_leaves_logging_alone() -> None:
    package_logger = logging.getLogger("chess_rules")
    previous_level = package_logger.level
    _ = ChessService(Settings(log_level="ERROR"))
    assert package_logger.level == previous_level


# --- SERVICE - GET GAME ----
def test_get_existing_game_state(service: ChessService, game_id: UUID) -> None:
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.game_id == game_id
    assert response.board == STARTING_BOARD
    assert response.scores == {"white": 0, "black": 0}


def test_attempt_to_find_unknown_game(service: ChessService) -> None:
    """Ensure exception is raised when trying to look up a game with an unknown ID."""
    with pytest.raises(GameNotFoundError):
        _ = service.get_game_state(GetGameRequest(game_id=uuid4()))


# --- SERVICE - LEGAL MOVES ----
def test_getting_legal_moves(service: ChessService, game_id: UUID) -> None:
    """Given a proper LegalMovesRequest, does the service return the expected LegalMovesResponse?"""
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="g1"))

    assert isinstance(response, LegalMovesResponse)
    assert response.game_id == game_id
    assert response.square == "g1"
    assert set(response.legal_moves) == {"f3", "h3"}


def test_legal_moves_of_empty_square(service: ChessService, game_id: UUID) -> None:
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="e4"))
    assert response.legal_moves == []


# --- SERVICE - MAKE MOVE ---
def test_make_legal_move(service: ChessService, game_id: UUID) -> None:
    """Attempt a legal move during your turn. Should result in a GameResponse."""
    response = play(service, game_id, "e2e4")

    assert isinstance(response, GameResponse)
    assert response.game_id == game_id
    assert response.board[4] == "....P..."
    assert response.board[6] == "PPPP.PPP"
    assert response.color_to_move == Color.BLACK
    assert response.move_history == ["e2e4"]


@pytest.mark.parametrize(
    "from_square, to_square, reason",
    [
        ("e7", "e5", MoveRejectionReason.WRONG_TURN),
        ("e4", "e5", MoveRejectionReason.EMPTY_SOURCE),
        ("d1", "h5", MoveRejectionReason.ILLEGAL_PIECE_MOVE),
    ],
)
def test_attempt_illegal_move(
    service: ChessService,
    game_id: UUID,
    from_square: str,
    to_square: str,
    reason: MoveRejectionReason,
) -> None:
    """The refusal comes back as an exception that tells why."""
    request = MoveRequest(game_id=game_id, from_square=from_square, to_square=to_square)
    with pytest.raises(IllegalMoveError) as exc_info:
        _ = service.make_move(request)
    assert exc_info.value.reason == reason

    # nothing changed
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.board == STARTING_BOARD
    assert response.move_history == []


def test_promotion_request(service: ChessService) -> None:
    """Take the way up to the knight on g8 and become a knight"""
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "h2h4 g7g5 h4g5 f8g7 g5g6 a7a6 g6h7 a6a5")
    response = service.make_move(
        MoveRequest(game_id=game_id, from_square="h7", to_square="g8", promote_to="knight")
    )
    assert response.board[0] == "rnbqk.Nr"
    assert response.move_history[-1] == "h7g8n"


def test_move_after_checkmate(service: ChessService, game_id: UUID) -> None:
    response = play(service, game_id, "f2f3 e7e5 g2g4 d8h4")
    assert response.status == GameStatus.CHECKMATE
    assert response.winner == PLAYER_BLACK
    assert response.in_check == {"white": True, "black": False}

    with pytest.raises(IllegalMoveError) as exc_info:
        _ = play(service, game_id, "a2a3")
    assert exc_info.value.reason == MoveRejectionReason.GAME_OVER


def test_move_in_unknown_game(service: ChessService) -> None:
    with pytest.raises(GameError):
        _ = play(service, uuid4(), "e2e4")


# --- SERVICE - UNDO ---
def test_undo_move(service: ChessService, game_id: UUID) -> None:
    play(service, game_id, "e2e4 d7d5 e4d5")
    response = service.undo_move(UndoMoveRequest(game_id=game_id))
    assert response.move_history == ["e2e4", "d7d5"]
    assert response.color_to_move == Color.WHITE
    assert response.scores == {"white": 0, "black": 0}


def test_undo_without_moves(service: ChessService, game_id: UUID) -> None:
    with pytest.raises(GameStateError):
        _ = service.undo_move(UndoMoveRequest(game_id=game_id))


# --- SERVICE - DELETE GAME ---
def test_delete_game(service: ChessService, game_id: UUID) -> None:
    """A game should no longer be available after a properly processed request."""
    service.delete_game(DeleteGameRequest(game_id=game_id))

    assert service.list_games() == []
    with pytest.raises(GameNotFoundError):
        _ = service.get_game_state(GetGameRequest(game_id=game_id))


def test_delete_unknown_game(service: ChessService) -> None:
    with pytest.raises(GameNotFoundError):
        service.delete_game(DeleteGameRequest(game_id=uuid4()))


# --- SETTINGS ---
def test_configured_default_promotion() -> None:
    service = ChessService(Settings(default_promotion="rook"))
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "h2h4 g7g5 h4g5 f8g7 g5g6 a7a6 g6h7 a6a5")
    response = play(service, game_id, "h7g8")
    assert response.board[0] == "rnbqk.Rr"
