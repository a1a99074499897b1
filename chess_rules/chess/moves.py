"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the rules for each piece type.
Three tables are defined below:

* LEGALITY_RULES: "may this piece move to that square?" (geometry + occupancy, including castling and en passant)
* MOVEMENT_RULES: "where can this piece go?" (the pseudo-legal destinations)
* ATTACK_RULES: "does this piece attack that square?" (used for check detection)

Whether a move leaves your own king in check is checked later by Game.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from chess_rules.chess.castling import CastlingSide, CastlingSquares, castling_side
from chess_rules.chess.pieces import (
    PIECE_TO_SYMBOL,
    Color,
    Piece,
    PieceId,
    PieceType,
)
from chess_rules.chess.position import BOARD_DIMENSIONS, Position


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, piece_id: PieceId) -> Piece: ...
    def piece_at(self, position: Position) -> Optional[Piece]: ...
    def is_square_empty(self, position: Position) -> bool: ...
    def is_path_clear(self, from_square: Position, to_square: Position) -> bool: ...
    def is_square_under_attack(self, position: Position, by_color: Color) -> bool: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """A committed half-move. Pieces are referred to by their handle in the PieceStore."""

    from_square: Position
    to_square: Position
    moved_piece: PieceId
    captured_piece: Optional[PieceId] = None
    is_castling: bool = False
    is_en_passant: bool = False
    is_promotion: bool = False
    promotion_choice: Optional[PieceType] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None

    def to_uci(self) -> str:
        """
        Coordinate notation, as used by the Universal Chess Interface

        examples:
        * "e2e4": the piece on e2 moved to e4
        * "e7e8q": (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        piece_char = (
            PIECE_TO_SYMBOL[self.promotion_choice] if self.promotion_choice else ""
        )
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


# --- PAWN GEOMETRY ---
def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), Black moves DOWN."""
    return -1 if color == Color.WHITE else 1


def pawn_starting_row(color: Color) -> int:
    return BOARD_DIMENSIONS[0] - 2 if color == Color.WHITE else 1


def promotion_row(color: Color) -> int:
    """The opposite back rank"""
    return 0 if color == Color.WHITE else BOARD_DIMENSIONS[0] - 1


def is_promotion_square(piece: Piece, target: Position) -> bool:
    return piece.type == PieceType.PAWN and target.row == promotion_row(piece.color)


def can_land_on(piece: Piece, target: Position, board: Board) -> bool:
    """A destination must be on the board and be either empty or hold an opposing piece."""
    if not target.is_valid():
        return False
    occupant = board.piece_at(target)
    return occupant is None or occupant.color != piece.color


# -- EN PASSANT ---
def en_passant_victim(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move]
) -> Optional[Position]:
    """
    The square of the pawn that would be taken en passant by moving `piece` to `target` (None if not en passant)

    En passant is possible if:
    * the last move was a two-square advance by an opposing pawn,
    * that pawn now stands next to ours, on the same row,
    * and the target square is the one directly behind it (seen from our direction of play).
    """
    if piece.type != PieceType.PAWN or last_move is None:
        return None

    last_moved = board.piece(last_move.moved_piece)
    if last_moved.type != PieceType.PAWN or last_moved.color == piece.color:
        return None

    if abs(last_move.to_square.row - last_move.from_square.row) != 2:
        return None

    pawn_square = last_move.to_square
    if board.piece_at(pawn_square) is not last_moved:
        return None
    if pawn_square.row != piece.position.row:
        return None
    if abs(pawn_square.col - piece.position.col) != 1:
        return None

    behind = pawn_square.offset(pawn_direction(piece.color), 0)
    return pawn_square if target == behind else None


# --- LEGALITY RULES ---
def is_valid_pawn_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally, or en passant
    """
    if not target.is_valid() or target == piece.position:
        return False

    direction = pawn_direction(piece.color)
    row_diff = target.row - piece.position.row
    col_diff = abs(target.col - piece.position.col)

    if row_diff == direction and col_diff == 0:
        return board.is_square_empty(target)

    if row_diff == 2 * direction and col_diff == 0:
        if piece.has_moved or piece.position.row != pawn_starting_row(piece.color):
            return False
        intermediate = piece.position.offset(direction, 0)
        return board.is_square_empty(intermediate) and board.is_square_empty(target)

    if row_diff == direction and col_diff == 1:
        occupant = board.piece_at(target)
        if occupant is not None:
            return occupant.color != piece.color
        return en_passant_victim(piece, target, board, last_move) is not None

    return False


def is_valid_knight_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """Knights always move such that |delta_row| + |delta_col| = 3 (and jump over anything in between)"""
    delta = (target.row - piece.position.row, target.col - piece.position.col)
    return delta in KNIGHT_DELTAS and can_land_on(piece, target, board)


def is_valid_bishop_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return (
        piece.position.is_diagonal(target)
        and can_land_on(piece, target, board)
        and board.is_path_clear(piece.position, target)
    )


def is_valid_rook_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """Rooks move either horizontally or vertically"""
    return (
        piece.position.is_straight(target)
        and can_land_on(piece, target, board)
        and board.is_path_clear(piece.position, target)
    )


def is_valid_queen_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """The Queen combines the rook moves and the bishop moves"""
    return is_valid_rook_move(piece, target, board) or is_valid_bishop_move(
        piece, target, board
    )


def is_valid_king_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a king move by two columns along its own row.
    """
    if not target.is_valid() or target == piece.position:
        return False

    row_diff = abs(target.row - piece.position.row)
    col_diff = abs(target.col - piece.position.col)
    if row_diff <= 1 and col_diff <= 1:
        return can_land_on(piece, target, board)

    side = castling_side(piece.position, target)
    if side is None:
        return False
    return can_castle(piece, side, board)


# -- CASTLING ---
def can_castle(king: Piece, side: CastlingSide, board: Board) -> bool:
    """
    **you are allowed to castle if**

    * Neither the king nor the rook on that side has moved before.
    * All squares between king and rook are empty.
    * The square the king stands on, the one it passes through and the one it lands on are not under attack.
      (so in particular, you cannot castle out of a check)
    """
    if king.type != PieceType.KING or king.has_moved:
        return False

    squares = CastlingSquares.for_king(king.position, side)
    if not squares.king_to.is_valid():
        return False

    rook = board.piece_at(squares.rook_from)
    if rook is None or rook.type != PieceType.ROOK or rook.color != king.color:
        return False
    if rook.has_moved:
        return False

    if not all(board.is_square_empty(square) for square in squares.squares_between()):
        return False

    opponent_color = king.color.opponent
    return not any(
        board.is_square_under_attack(square, opponent_color)
        for square in squares.king_path()
    )


# -- STRATEGY PATTERN: LEGALITY RULES ---
IsValidMoveFn = Callable[[Piece, Position, Board, Optional[Move]], bool]
LEGALITY_RULES: dict[PieceType, IsValidMoveFn] = {
    PieceType.PAWN: is_valid_pawn_move,
    PieceType.KNIGHT: is_valid_knight_move,
    PieceType.BISHOP: is_valid_bishop_move,
    PieceType.ROOK: is_valid_rook_move,
    PieceType.QUEEN: is_valid_queen_move,
    PieceType.KING: is_valid_king_move,
}


def is_valid_move(
    piece: Piece, target: Position, board: Board, last_move: Optional[Move] = None
) -> bool:
    return LEGALITY_RULES[piece.type](piece, target, board, last_move)


# --- MOVEMENT RULES ---
def raycasting_moves(piece: Piece, board: Board, directions: list[Vector]) -> list[Position]:
    """
    Raycasting algorithm
    -----

    We define move directions and move along them until we hit another piece or
    the edge of the board. The first occupied square is only included if it holds an opponent's piece.
    """
    moves: list[Position] = []
    for d_row, d_col in directions:
        target = piece.position.offset(d_row, d_col)
        while target.is_valid():
            occupant = board.piece_at(target)
            if occupant is not None:
                if occupant.color != piece.color:
                    moves.append(target)
                break
            moves.append(target)
            target = target.offset(d_row, d_col)
    return moves


def single_step_moves(piece: Piece, board: Board, deltas: list[Vector]) -> list[Position]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just take a single step along a direction"""
    return [
        target
        for target in (piece.position.offset(d_row, d_col) for d_row, d_col in deltas)
        if can_land_on(piece, target, board)
    ]


def possible_pawn_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    """Pushes by one and two, both diagonal takes (including en passant)"""
    direction = pawn_direction(piece.color)
    candidates = [
        piece.position.offset(direction, 0),
        piece.position.offset(2 * direction, 0),
        piece.position.offset(direction, -1),
        piece.position.offset(direction, 1),
    ]
    return [
        target
        for target in candidates
        if is_valid_pawn_move(piece, target, board, last_move)
    ]


def possible_knight_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    return single_step_moves(piece, board, KNIGHT_DELTAS)


def possible_bishop_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    return raycasting_moves(piece, board, DIAGONALS)


def possible_rook_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    return raycasting_moves(piece, board, STRAIGHTS)


def possible_queen_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    return raycasting_moves(piece, board, STRAIGHTS + DIAGONALS)


def possible_king_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    moves = single_step_moves(piece, board, KING_DELTAS)
    for side in CastlingSide:
        if can_castle(piece, side, board):
            moves.append(CastlingSquares.for_king(piece.position, side).king_to)
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
PossibleMovesFn = Callable[[Piece, Board, Optional[Move]], list[Position]]
MOVEMENT_RULES: dict[PieceType, PossibleMovesFn] = {
    PieceType.PAWN: possible_pawn_moves,
    PieceType.KNIGHT: possible_knight_moves,
    PieceType.BISHOP: possible_bishop_moves,
    PieceType.ROOK: possible_rook_moves,
    PieceType.QUEEN: possible_queen_moves,
    PieceType.KING: possible_king_moves,
}


def possible_moves(
    piece: Piece, board: Board, last_move: Optional[Move] = None
) -> list[Position]:
    """
    All destinations that pass the piece's own movement rules.

    NOTE: Not yet filtered for leaving your own king in check. Game takes care of that.
    """
    return MOVEMENT_RULES[piece.type](piece, board, last_move)


# --- CAPTURING RULES / ATTACKING RULES ---
# NOTE: Attacking is not the same as moving. A pawn attacks its forward diagonals even when they are empty,
# and a king never attacks anything by castling. What stands on the attacked square does not matter either.
def is_attacked_by_pawn(piece: Piece, target: Position, board: Board) -> bool:
    direction = pawn_direction(piece.color)
    return target.row - piece.position.row == direction and (
        abs(target.col - piece.position.col) == 1
    )


def is_attacked_by_knight(piece: Piece, target: Position, board: Board) -> bool:
    delta = (target.row - piece.position.row, target.col - piece.position.col)
    return delta in KNIGHT_DELTAS


def is_attacked_by_bishop(piece: Piece, target: Position, board: Board) -> bool:
    return piece.position.is_diagonal(target) and board.is_path_clear(
        piece.position, target
    )


def is_attacked_by_rook(piece: Piece, target: Position, board: Board) -> bool:
    return piece.position.is_straight(target) and board.is_path_clear(
        piece.position, target
    )


def is_attacked_by_queen(piece: Piece, target: Position, board: Board) -> bool:
    return is_attacked_by_rook(piece, target, board) or is_attacked_by_bishop(
        piece, target, board
    )


def is_attacked_by_king(piece: Piece, target: Position, board: Board) -> bool:
    delta = (target.row - piece.position.row, target.col - piece.position.col)
    return delta in KING_DELTAS


# --- STRATEGY PATTERN: ATTACKING RULES ---
AttacksFn = Callable[[Piece, Position, Board], bool]
ATTACK_RULES: dict[PieceType, AttacksFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def attacks(piece: Piece, target: Position, board: Board) -> bool:
    return target.is_valid() and ATTACK_RULES[piece.type](piece, target, board)
