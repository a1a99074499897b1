"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game:
whose turn it is, validating and applying moves (castling, en passant and promotion included),
deciding check / checkmate / stalemate / draw, and keeping the move history.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Self

from chess_rules.chess.board import Board
from chess_rules.chess.castling import CastlingSquares, castling_side
from chess_rules.chess.moves import (
    Move,
    en_passant_victim,
    is_promotion_square,
    is_valid_move,
    possible_moves,
)
from chess_rules.chess.pieces import (
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceId,
    PieceStore,
    PieceType,
)
from chess_rules.chess.player import Player
from chess_rules.chess.position import Position
from chess_rules.core.models import GameModel

logger = logging.getLogger(__name__)

# 50 moves by each player without a capture or a pawn move
FIFTY_MOVE_RULE_HALF_MOVES = 100
# Simplified insufficient material check: (at most) two kings and a single other piece
INSUFFICIENT_MATERIAL_PIECE_COUNT = 3


class GameState(Enum):
    ACTIVE = auto()
    CHECK = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW = auto()


TERMINAL_STATES = frozenset({GameState.CHECKMATE, GameState.STALEMATE, GameState.DRAW})


class MoveRejection(Enum):
    """Why `make_move()` said no"""

    OUT_OF_BOUNDS = auto()
    EMPTY_SOURCE = auto()
    WRONG_TURN = auto()
    ILLEGAL_PIECE_MOVE = auto()
    LEAVES_KING_IN_CHECK = auto()
    GAME_OVER = auto()


# Called with the color of the promoting pawn and the square it reached; answers the piece type to promote into.
PromotionChooser = Callable[[Color, Position], PieceType]


@dataclass
class _UndoRecord:
    """What `undo_move()` needs that the Move itself does not tell"""

    move: Move
    half_move_clock: int
    moved_had_moved: bool
    captured_at: Optional[Position] = None
    captured_index: Optional[int] = None
    rook_had_moved: Optional[bool] = None
    promoted_piece: Optional[PieceId] = None
    promoted_index: Optional[int] = None


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    white_player: Player
    black_player: Player
    color_to_move: Color = Color.WHITE
    state: GameState = GameState.ACTIVE
    history: list[Move] = field(default_factory=list)
    half_move_clock: int = 0
    move_count: int = 0
    last_rejection: Optional[MoveRejection] = None
    promotion_chooser: Optional[PromotionChooser] = None
    default_promotion: PieceType = PieceType.QUEEN
    _undo_log: list[_UndoRecord] = field(default_factory=list, repr=False)

    @classmethod
    def new_game(
        cls,
        white: str = "White",
        black: str = "Black",
        promotion_chooser: Optional[PromotionChooser] = None,
        default_promotion: PieceType = PieceType.QUEEN,
    ) -> Self:
        """To start a new game from the standard starting position. White moves first."""
        game = cls(
            board=Board.starting_position(PieceStore()),
            white_player=Player(white, Color.WHITE),
            black_player=Player(black, Color.BLACK),
            promotion_chooser=promotion_chooser,
            default_promotion=default_promotion,
        )
        logger.debug("New game: %s (white) vs %s (black)", white, black)
        return game

    @classmethod
    def from_board(
        cls,
        board: Board,
        color_to_move: Color = Color.WHITE,
        white: str = "White",
        black: str = "Black",
        promotion_chooser: Optional[PromotionChooser] = None,
        default_promotion: PieceType = PieceType.QUEEN,
    ) -> Self:
        """Start playing from a custom position. The state is derived from the position right away."""
        game = cls(
            board=board,
            white_player=Player(white, Color.WHITE),
            black_player=Player(black, Color.BLACK),
            color_to_move=color_to_move,
            promotion_chooser=promotion_chooser,
            default_promotion=default_promotion,
        )
        game._update_game_state()
        return game

    def reset(self) -> None:
        """Back to the starting position with the same players"""
        self.board = Board.starting_position(PieceStore())
        self.white_player.reset()
        self.black_player.reset()
        self.color_to_move = Color.WHITE
        self.state = GameState.ACTIVE
        self.history = []
        self._undo_log = []
        self.half_move_clock = 0
        self.move_count = 0
        self.last_rejection = None

    # --- QUERIES ---
    @property
    def current_player(self) -> Player:
        return self.player(self.color_to_move)

    def player(self, color: Color) -> Player:
        return self.white_player if color == Color.WHITE else self.black_player

    @property
    def winner(self) -> Optional[Player]:
        """
        Only defined for checkmate.
        Given we know it is checkmate, the player who is to move just got mated and the opponent must be the winner
        """
        if self.state != GameState.CHECKMATE:
            return None
        return self.player(self.color_to_move.opponent)

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1] if self.history else None

    @property
    def move_history(self) -> list[Move]:
        return list(self.history)

    @property
    def is_over(self) -> bool:
        return self.state in TERMINAL_STATES

    def piece_at(self, position: Position) -> Optional[Piece]:
        return self.board.piece_at(position)

    def is_check(self, color: Color) -> bool:
        return self.board.is_king_in_check(color)

    def legal_moves(self, from_square: Position) -> list[Position]:
        """
        Destinations the piece on `from_square` can legally move to.

        Filters the piece's possible moves for those that leave its own king in check.
        Empty if there is no piece, or the game is over.
        """
        piece = self.board.piece_at(from_square)
        if piece is None or self.is_over:
            return []
        return [
            target
            for target in possible_moves(piece, self.board, self.last_move)
            if not self._leaves_king_in_check(piece, target)
        ]

    def has_legal_moves(self, color: Color) -> bool:
        """True as soon as one piece of that color has one move that does not leave its king in check"""
        for piece in self.board.pieces(color):
            for target in possible_moves(piece, self.board, self.last_move):
                if not self._leaves_king_in_check(piece, target):
                    return True
        return False

    # --- MAKING MOVES ---
    def validate_move(
        self, from_square: Position, to_square: Position
    ) -> Optional[MoveRejection]:
        """
        Check a candidate move without changing anything.
        -----

        1. The game must still be going on
        2. Both squares must be on the board
        3. There must be a piece on the starting square ...
        4. ... of the color whose turn it is
        5. The piece must be able to move like that
        6. The move may not leave your own king in check

        Returns None if the move is legal.
        """
        if self.is_over:
            return MoveRejection.GAME_OVER

        if not (from_square.is_valid() and to_square.is_valid()):
            return MoveRejection.OUT_OF_BOUNDS

        piece = self.board.piece_at(from_square)
        if piece is None:
            return MoveRejection.EMPTY_SOURCE

        if piece.color != self.color_to_move:
            return MoveRejection.WRONG_TURN

        if not is_valid_move(piece, to_square, self.board, self.last_move):
            return MoveRejection.ILLEGAL_PIECE_MOVE

        if self._leaves_king_in_check(piece, to_square):
            return MoveRejection.LEAVES_KING_IN_CHECK

        return None

    def make_move(
        self,
        from_square: Position,
        to_square: Position,
        promotion: Optional[PieceType] = None,
    ) -> bool:
        """
        Attempt to make a move
        -----

        All or nothing: either the move is legal and gets played completely, or nothing changes.
        On a refusal `last_rejection` tells why.

        `promotion` is the piece type a pawn reaching the back rank turns into. If not given, the
        `promotion_chooser` gets asked, and otherwise the default (a queen) is used.
        """
        rejection = self.validate_move(from_square, to_square)
        self.last_rejection = rejection
        if rejection is not None:
            logger.debug(
                "Rejected %s%s: %s",
                from_square,
                to_square,
                rejection.name.lower(),
            )
            return False

        move = self._commit_move(from_square, to_square, promotion)
        logger.debug("Played %s, state is now %s", move, self.state.name.lower())
        return True

    def undo_move(self) -> bool:
        """
        Take back the last half-move.
        ----

        Puts back the moving piece (and the rook when castling), the captured piece (also for en passant),
        turns a promoted piece back into the pawn, and restores flags, counters, scores and the turn.
        Returns False if there is nothing to undo.
        """
        if not self._undo_log:
            return False

        record = self._undo_log.pop()
        self.history.pop()
        move = record.move
        mover = self.board.piece(move.moved_piece)

        if record.promoted_piece is not None:
            self.board.remove_piece(move.to_square)
            self.board.store.discard_from(record.promoted_piece)
            self.board.place_piece(mover, move.to_square, record.promoted_index)

        self.board.move_piece(move.to_square, move.from_square)
        mover.has_moved = record.moved_had_moved

        if move.is_castling:
            side = castling_side(move.from_square, move.to_square)
            assert side is not None
            squares = CastlingSquares.for_king(move.from_square, side)
            rook = self.board.piece_at(squares.rook_to)
            self.board.move_piece(squares.rook_to, squares.rook_from)
            if rook is not None and record.rook_had_moved is not None:
                rook.has_moved = record.rook_had_moved

        if move.captured_piece is not None and record.captured_at is not None:
            captured = self.board.piece(move.captured_piece)
            self.board.place_piece(captured, record.captured_at, record.captured_index)
            self.player(mover.color).remove_captured_value(captured.value)

        self.half_move_clock = record.half_move_clock
        self.move_count -= 1
        self.color_to_move = mover.color
        self.last_rejection = None
        self._update_game_state()
        logger.debug("Took back %s", move)
        return True

    def to_model(self) -> GameModel:
        """Encode into a format the Service layer uses"""
        winner = self.winner
        return GameModel(
            board=self.board.to_text().splitlines(),
            color_to_move=self.color_to_move.name.lower(),
            status=self.state.name.lower(),
            players={
                player.color.name.lower(): player.name
                for player in (self.white_player, self.black_player)
            },
            moves_uci=[move.to_uci() for move in self.history],
            scores={
                player.color.name.lower(): player.score
                for player in (self.white_player, self.black_player)
            },
            in_check={
                player.color.name.lower(): player.in_check
                for player in (self.white_player, self.black_player)
            },
            winner=winner.name if winner else None,
        )

    # -- PRIVATE HELPERS ---
    def _capture_square(self, piece: Piece, to_square: Position) -> Position:
        """Where the captured piece stands: the target square, except for en passant"""
        victim = en_passant_victim(piece, to_square, self.board, self.last_move)
        if victim is not None and self.board.is_square_empty(to_square):
            return victim
        return to_square

    def _leaves_king_in_check(self, piece: Piece, to_square: Position) -> bool:
        """
        Return True if the move leaves (or puts) your own king in check

        plan:
        1. temporarily make the move on the board
        2. determine if king is in check on the new board
        3. the board puts everything back on leaving the `with` block
        """
        capture_at = self._capture_square(piece, to_square)
        with self.board.simulate_move(piece.position, to_square, capture_at):
            return self.board.is_king_in_check(piece.color)

    def _resolve_promotion(
        self, color: Color, square: Position, requested: Optional[PieceType]
    ) -> PieceType:
        """The piece to promote into: as requested, else as the chooser says, else the default. Never a pawn or king."""
        choice = requested
        if choice is None and self.promotion_chooser is not None:
            choice = self.promotion_chooser(color, square)
        if choice is None:
            choice = self.default_promotion
        if choice not in PROMOTION_OPTIONS:
            logger.debug("Cannot promote into a %s, using a queen", choice)
            choice = PieceType.QUEEN
        return choice

    def _commit_move(
        self,
        from_square: Position,
        to_square: Position,
        promotion: Optional[PieceType],
    ) -> Move:
        """
        Play a move that has already been validated
        -----

        1. Decide the promotion piece first: the chooser may fail, and nothing has changed yet at that point
        2. Find out what gets captured (and where: en passant takes beside the target square)
        3. Castling? move the rook over as well
        4. Move the piece, promote a pawn that reached the back rank
        5. Record the move, update the half-move clock, and hand the turn to the opponent
        6. Update check flags and the game state
        """
        board = self.board
        piece = board.piece_at(from_square)
        assert piece is not None

        is_promotion = is_promotion_square(piece, to_square)
        promotion_choice = (
            self._resolve_promotion(piece.color, to_square, promotion)
            if is_promotion
            else None
        )

        record = _UndoRecord(
            move=Move(from_square, to_square, piece.id),
            half_move_clock=self.half_move_clock,
            moved_had_moved=piece.has_moved,
        )

        side = (
            castling_side(from_square, to_square)
            if piece.type == PieceType.KING
            else None
        )
        capture_square = self._capture_square(piece, to_square)
        is_en_passant = capture_square != to_square
        captured = board.piece_at(capture_square) if side is None else None

        if side is not None:
            squares = CastlingSquares.for_king(from_square, side)
            rook = board.piece_at(squares.rook_from)
            assert rook is not None
            record.rook_had_moved = rook.has_moved
            board.move_piece(squares.rook_from, squares.rook_to)

        if captured is not None:
            record.captured_index = board.listing_index(captured)
            board.remove_piece(capture_square)
            record.captured_at = capture_square
            self.current_player.add_captured_value(captured.value)

        board.move_piece(from_square, to_square)

        if promotion_choice is not None:
            record.promoted_index = board.listing_index(piece)
            board.remove_piece(to_square)
            promoted = board.add_piece(promotion_choice, piece.color, to_square)
            promoted.has_moved = True
            record.promoted_piece = promoted.id

        move = Move(
            from_square=from_square,
            to_square=to_square,
            moved_piece=piece.id,
            captured_piece=captured.id if captured else None,
            is_castling=side is not None,
            is_en_passant=is_en_passant,
            is_promotion=is_promotion,
            promotion_choice=promotion_choice,
        )
        record.move = move
        self.history.append(move)
        self._undo_log.append(record)

        if captured is not None or piece.type == PieceType.PAWN:
            self.half_move_clock = 0
        else:
            self.half_move_clock += 1
        self.move_count += 1

        self.color_to_move = self.color_to_move.opponent
        self._update_game_state()
        return move

    # --- CHECKS FOR ENDING THE GAME ---
    def _update_game_state(self) -> None:
        """
        Recompute the check flags of both players, then classify the position for the player to move.

        Priority: checkmate > stalemate > draw > check > active
        """
        self.white_player.in_check = self.board.is_king_in_check(Color.WHITE)
        self.black_player.in_check = self.board.is_king_in_check(Color.BLACK)

        in_check = self.current_player.in_check
        can_move = self.has_legal_moves(self.color_to_move)

        if in_check and not can_move:
            self.state = GameState.CHECKMATE
        elif not can_move:
            self.state = GameState.STALEMATE
        elif self._is_draw():
            self.state = GameState.DRAW
        elif in_check:
            self.state = GameState.CHECK
        else:
            self.state = GameState.ACTIVE

        if self.is_over:
            logger.info("Game over: %s", self.state.name.lower())

    def _is_draw(self) -> bool:
        return self._is_fifty_move_draw() or self._is_insufficient_material()

    def _is_fifty_move_draw(self) -> bool:
        """If you reach 100 consecutive half-moves without capture or pawn move, you reached a draw"""
        return self.half_move_clock >= FIFTY_MOVE_RULE_HALF_MOVES

    def _is_insufficient_material(self) -> bool:
        """Intentionally coarse: three pieces or fewer left on the board"""
        return len(self.board.all_pieces()) <= INSUFFICIENT_MATERIAL_PIECE_COUNT
