"""The Game board is the spatial truth: which piece stands on which square, and the queries derived from that."""

from contextlib import contextmanager
from typing import Iterator, Optional, Self

from chess_rules.chess.moves import attacks
from chess_rules.chess.pieces import (
    SYMBOL_TO_PIECE,
    Color,
    Piece,
    PieceId,
    PieceStore,
    PieceType,
)
from chess_rules.chess.position import BOARD_DIMENSIONS, INVALID_POSITION, Position
from chess_rules.chess.square import Square

EMPTY_SQUARE_SYMBOL = "."

BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """
    8x8 grid of squares, plus one collection of pieces per color.

    Invariant: a piece on the board stands on exactly one square and is listed in exactly one color collection.
    Every mutation below keeps these views consistent.
    """

    def __init__(self, store: Optional[PieceStore] = None) -> None:
        self.store = store if store is not None else PieceStore()
        num_rows, num_cols = BOARD_DIMENSIONS
        self._squares: list[list[Square]] = [
            [Square(Position(row, col)) for col in range(num_cols)]
            for row in range(num_rows)
        ]
        self._pieces: dict[Color, list[PieceId]] = {Color.WHITE: [], Color.BLACK: []}

    @classmethod
    def starting_position(cls, store: Optional[PieceStore] = None) -> Self:
        """The standard opening setup: black on rows 0 and 1, white on rows 6 and 7."""
        board = cls(store)
        last_row = BOARD_DIMENSIONS[0] - 1
        for color, back_row, pawn_row in [
            (Color.WHITE, last_row, last_row - 1),
            (Color.BLACK, 0, 1),
        ]:
            for col, piece_type in enumerate(BACK_RANK):
                board.add_piece(PieceType.PAWN, color, Position(pawn_row, col))
                board.add_piece(piece_type, color, Position(back_row, col))
        return board

    @classmethod
    def from_diagram(cls, diagram: str, store: Optional[PieceStore] = None) -> Self:
        """
        Construct a board from a text diagram (the inverse of `to_text()`).

        One line per row, top row (the 8th rank) first. Upper case letters are white pieces,
        lower case letters black pieces, and '.' an empty square.

        ex)
        ....k...
        ........
        ........
        ........
        ........
        ........
        ........
        ....K..R
        """
        board = cls(store)
        rows = [line.strip() for line in diagram.strip().splitlines()]
        if len(rows) != BOARD_DIMENSIONS[0] or any(
            len(row) != BOARD_DIMENSIONS[1] for row in rows
        ):
            raise ValueError(
                f"A board diagram needs {BOARD_DIMENSIONS[0]} rows of {BOARD_DIMENSIONS[1]} characters.\n{diagram}"
            )
        for row_idx, row in enumerate(rows):
            for col_idx, character in enumerate(row):
                if character == EMPTY_SQUARE_SYMBOL:
                    continue
                color = Color.WHITE if character.isupper() else Color.BLACK
                piece_type = SYMBOL_TO_PIECE[character.lower()]
                board.add_piece(piece_type, color, Position(row_idx, col_idx))
        return board

    def to_text(self) -> str:
        """One line per row, top row first. '.' for empty squares."""
        return "\n".join(self._row_to_text(row) for row in range(BOARD_DIMENSIONS[0]))

    def _row_to_text(self, row: int) -> str:
        characters: list[str] = []
        for square in self._squares[row]:
            piece = self._occupant(square)
            characters.append(piece.symbol if piece else EMPTY_SQUARE_SYMBOL)
        return "".join(characters)

    # --- LOOKUPS ---
    def square(self, position: Position) -> Optional[Square]:
        if not position.is_valid():
            return None
        return self._squares[position.row][position.col]

    def piece(self, piece_id: PieceId) -> Piece:
        return self.store[piece_id]

    def piece_at(self, position: Position) -> Optional[Piece]:
        square = self.square(position)
        if square is None:
            return None
        return self._occupant(square)

    def _occupant(self, square: Square) -> Optional[Piece]:
        return self.store[square.occupant] if square.occupant is not None else None

    def is_square_empty(self, position: Position) -> bool:
        square = self.square(position)
        return square is not None and square.is_empty()

    def pieces(self, color: Color) -> list[Piece]:
        return [self.store[piece_id] for piece_id in self._pieces[color]]

    def all_pieces(self) -> list[Piece]:
        return self.pieces(Color.WHITE) + self.pieces(Color.BLACK)

    def listing_index(self, piece: Piece) -> int:
        """Where the piece is listed in its color's collection. Raises ValueError if it is not on the board."""
        return self._pieces[piece.color].index(piece.id)

    # --- MUTATIONS ---
    def add_piece(self, piece_type: PieceType, color: Color, position: Position) -> Piece:
        """Create a new piece in the store and put it on the board"""
        piece = self.store.create(piece_type, color, position)
        self.place_piece(piece, position)
        return piece

    def place_piece(
        self, piece: Optional[Piece], position: Position, index: Optional[int] = None
    ) -> None:
        """
        Register the piece on the square and in its color's collection.

        Does nothing for an invalid position or a missing piece: callers must validate beforehand.
        Whatever stood on the square before is taken off the board.
        `index` puts the piece back at that spot of the collection (see `listing_index()`), default is at the end.
        """
        if piece is None or not position.is_valid():
            return
        if piece.id in self._pieces[piece.color]:
            self.remove_piece(piece.position)
        self.remove_piece(position)
        self._attach(piece, position, index)

    def remove_piece(self, position: Position) -> Optional[Piece]:
        """
        Take the piece off the square and out of its color's collection.

        The piece stays in the store (so a Move can still refer to it). Returns None if the square was empty.
        """
        detached = self._detach(position)
        return detached[0] if detached else None

    def move_piece(self, from_square: Position, to_square: Position) -> bool:
        """
        Relocate a piece, removing whatever stands on the target square, and mark it as having moved.

        Returns False if either position is invalid or there is no piece to move.
        """
        if not (from_square.is_valid() and to_square.is_valid()):
            return False
        piece = self.piece_at(from_square)
        if piece is None:
            return False
        if from_square == to_square:
            piece.has_moved = True
            return True

        self.remove_piece(to_square)
        self._relocate(piece, from_square, to_square)
        piece.has_moved = True
        return True

    def _attach(self, piece: Piece, position: Position, index: Optional[int] = None) -> None:
        self._squares[position.row][position.col].set_piece(piece.id)
        piece.position = position
        collection = self._pieces[piece.color]
        collection.insert(len(collection) if index is None else index, piece.id)

    def _detach(self, position: Position) -> Optional[tuple[Piece, int]]:
        """Remove a piece, also reporting where it was listed in its color's collection"""
        square = self.square(position)
        if square is None or square.occupant is None:
            return None
        piece = self.store[square.occupant]
        square.clear()
        collection = self._pieces[piece.color]
        index = collection.index(piece.id)
        del collection[index]
        return piece, index

    def _relocate(self, piece: Piece, from_square: Position, to_square: Position) -> None:
        """Move the handle between squares. The color collection does not change."""
        self._squares[from_square.row][from_square.col].clear()
        self._squares[to_square.row][to_square.col].set_piece(piece.id)
        piece.position = to_square

    @contextmanager
    def simulate_move(
        self,
        from_square: Position,
        to_square: Position,
        capture_at: Optional[Position] = None,
    ) -> Iterator[None]:
        """
        Temporarily play a move, and put everything back afterwards.

        The captured piece is lifted from `capture_at` (defaults to the target square, differs for en passant).
        The board is restored when the block exits, also when it exits early or by an exception.

        with board.simulate_move(e2, e4):
            in_check = board.is_king_in_check(Color.WHITE)
        """
        mover = self.piece_at(from_square)
        if mover is None:
            raise ValueError(f"Cannot simulate a move from an empty square: {from_square}")
        capture_square = capture_at if capture_at is not None else to_square

        captured: Optional[tuple[Piece, int]] = None
        relocated = False
        try:
            if capture_square != from_square:
                captured = self._detach(capture_square)
            if to_square != from_square:
                self._relocate(mover, from_square, to_square)
                relocated = True
            yield
        finally:
            if relocated:
                self._relocate(mover, to_square, from_square)
            if captured:
                piece, index = captured
                self._attach(piece, capture_square, index)

    # --- DERIVED QUERIES ---
    def is_path_clear(self, from_square: Position, to_square: Position) -> bool:
        """
        Every square strictly between the two endpoints is empty.

        Only defined for straight and diagonal lines: anything else (a knight jump, or the same square) is False.
        """
        if not (from_square.is_valid() and to_square.is_valid()):
            return False
        if not (from_square.is_straight(to_square) or from_square.is_diagonal(to_square)):
            return False

        d_row = _sign(to_square.row - from_square.row)
        d_col = _sign(to_square.col - from_square.col)
        square = from_square.offset(d_row, d_col)
        while square != to_square:
            if not self.is_square_empty(square):
                return False
            square = square.offset(d_row, d_col)
        return True

    def is_square_under_attack(self, position: Position, by_color: Color) -> bool:
        return any(attacks(piece, position, self) for piece in self.pieces(by_color))

    def attackers_of(self, position: Position, by_color: Color) -> list[Position]:
        """Where the pieces of `by_color` that attack the given square are standing"""
        return [
            piece.position
            for piece in self.pieces(by_color)
            if attacks(piece, position, self)
        ]

    def find_king(self, color: Color) -> Position:
        """Returns the INVALID_POSITION sentinel if that color has no king on the board"""
        for piece in self.pieces(color):
            if piece.type == PieceType.KING:
                return piece.position
        return INVALID_POSITION

    def is_king_in_check(self, color: Color) -> bool:
        """A board without a king of that color is never in check"""
        king_position = self.find_king(color)
        if not king_position.is_valid():
            return False
        return self.is_square_under_attack(king_position, color.opponent)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)
