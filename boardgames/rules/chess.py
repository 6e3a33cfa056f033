"""Chess piece movement rules.

No check, castling, en passant or promotion: a king can be captured like any
other piece, and the game never ends on its own.
"""

from ..board import Board, Color, Piece, PieceType
from .base import GameVariant

BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class ChessVariant(GameVariant):
    """8x8 chess. White starts on rows 6-7 and moves toward row 0."""

    name = "chess"
    rows = 8
    cols = 8
    colors = (Color.WHITE, Color.BLACK)
    piece_types = frozenset({
        PieceType.KING, PieceType.QUEEN, PieceType.ROOK,
        PieceType.BISHOP, PieceType.KNIGHT, PieceType.PAWN,
    })

    PAWN_DIRECTION = {Color.WHITE: -1, Color.BLACK: 1}
    PAWN_START_ROW = {Color.WHITE: 6, Color.BLACK: 1}

    def _initialize_starting_position(self, board: Board) -> None:
        for col, piece_type in enumerate(BACK_RANK):
            board.set_piece(0, col, Piece(Color.BLACK, piece_type))
            board.set_piece(1, col, Piece(Color.BLACK, PieceType.PAWN))
            board.set_piece(6, col, Piece(Color.WHITE, PieceType.PAWN))
            board.set_piece(7, col, Piece(Color.WHITE, piece_type))

    def _is_valid_move_for_piece(
        self, board: Board, piece: Piece, from_row: int, from_col: int, to_row: int, to_col: int
    ) -> bool:
        """Check if move is valid for the specific piece type."""
        row_diff = abs(to_row - from_row)
        col_diff = abs(to_col - from_col)

        if piece.piece_type == PieceType.PAWN:
            return self._is_valid_pawn_move(board, from_row, from_col, to_row, to_col, piece.color)
        elif piece.piece_type == PieceType.ROOK:
            return (row_diff == 0 or col_diff == 0) and self._is_path_clear(
                board, from_row, from_col, to_row, to_col
            )
        elif piece.piece_type == PieceType.BISHOP:
            return row_diff == col_diff and self._is_path_clear(
                board, from_row, from_col, to_row, to_col
            )
        elif piece.piece_type == PieceType.QUEEN:
            return (row_diff == 0 or col_diff == 0 or row_diff == col_diff) and self._is_path_clear(
                board, from_row, from_col, to_row, to_col
            )
        elif piece.piece_type == PieceType.KNIGHT:
            return (row_diff, col_diff) in ((2, 1), (1, 2))
        elif piece.piece_type == PieceType.KING:
            return row_diff <= 1 and col_diff <= 1
        return False

    def _is_valid_pawn_move(
        self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int, color: Color
    ) -> bool:
        """Check if pawn move is valid.

        - One step forward onto an empty square
        - Two steps forward from the start row, both squares empty
        - One step diagonally forward only to capture
        """
        direction = self.PAWN_DIRECTION[color]
        row_diff = to_row - from_row
        target = board.get_piece(to_row, to_col)

        if from_col == to_col and target is None:
            if row_diff == direction:
                return True
            if (
                from_row == self.PAWN_START_ROW[color]
                and row_diff == 2 * direction
                and board.is_empty(from_row + direction, from_col)
            ):
                return True

        if abs(to_col - from_col) == 1 and row_diff == direction and target is not None:
            return True

        return False
