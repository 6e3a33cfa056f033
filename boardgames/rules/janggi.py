"""Janggi (Korean chess) piece movement rules.

Board is 10 rows by 9 columns. Han occupies rows 0-3, Cho rows 6-9; Cho moves
first. Capturing the enemy general ends the game. There is no check or
bikjang rule.
"""

from typing import FrozenSet, List, Optional, Tuple

from ..board import Board, Color, Move, Piece, PieceType
from .base import GameVariant

Point = Tuple[int, int]

# Palace X-diagonals, as (row, col) points:
# - HAN:  (0,3) - (1,4) - (2,5)  and  (0,5) - (1,4) - (2,3)
# - CHO:  (7,3) - (8,4) - (9,5)  and  (7,5) - (8,4) - (9,3)
PALACE_DIAGONALS: List[FrozenSet[Point]] = [
    frozenset({(0, 3), (1, 4), (2, 5)}),
    frozenset({(0, 5), (1, 4), (2, 3)}),
    frozenset({(7, 3), (8, 4), (9, 5)}),
    frozenset({(7, 5), (8, 4), (9, 3)}),
]

BACK_RANK = (
    PieceType.CHARIOT,
    PieceType.ELEPHANT,
    PieceType.HORSE,
    PieceType.GUARD,
    None,
    PieceType.GUARD,
    PieceType.ELEPHANT,
    PieceType.HORSE,
    PieceType.CHARIOT,
)


class JanggiVariant(GameVariant):
    """10x9 janggi."""

    name = "janggi"
    rows = 10
    cols = 9
    colors = (Color.CHO, Color.HAN)
    piece_types = frozenset({
        PieceType.GENERAL, PieceType.GUARD, PieceType.ELEPHANT, PieceType.HORSE,
        PieceType.CHARIOT, PieceType.CANNON, PieceType.SOLDIER,
    })

    PALACE_ROWS = {Color.HAN: (0, 2), Color.CHO: (7, 9)}
    PALACE_COLS = (3, 5)
    SOLDIER_DIRECTION = {Color.CHO: -1, Color.HAN: 1}

    def _initialize_starting_position(self, board: Board) -> None:
        """Set up the starting position (Han on top, Cho at the bottom)."""
        for color, back_row, general_row, cannon_row, soldier_row in (
            (Color.HAN, 0, 1, 2, 3),
            (Color.CHO, 9, 8, 7, 6),
        ):
            for col, piece_type in enumerate(BACK_RANK):
                if piece_type is not None:
                    board.set_piece(back_row, col, Piece(color, piece_type))
            board.set_piece(general_row, 4, Piece(color, PieceType.GENERAL))
            board.set_piece(cannon_row, 1, Piece(color, PieceType.CANNON))
            board.set_piece(cannon_row, 7, Piece(color, PieceType.CANNON))
            for col in (0, 2, 4, 6, 8):
                board.set_piece(soldier_row, col, Piece(color, PieceType.SOLDIER))

    # -- Palace geometry --

    def is_in_palace(self, row: int, col: int, color: Color) -> bool:
        """Check if a square is in the palace of the given color."""
        low, high = self.PALACE_ROWS[color]
        return low <= row <= high and self.PALACE_COLS[0] <= col <= self.PALACE_COLS[1]

    def palace_diagonal(self, from_row: int, from_col: int, to_row: int, to_col: int) -> Optional[FrozenSet[Point]]:
        """Return the palace diagonal line containing both points, if any."""
        for line in PALACE_DIAGONALS:
            if (from_row, from_col) in line and (to_row, to_col) in line:
                return line
        return None

    def is_palace_diagonal_move(self, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check if a move runs along a palace diagonal line.

        Both endpoints, and every point between them, must be on the same line.
        """
        row_diff = abs(to_row - from_row)
        if row_diff == 0 or row_diff != abs(to_col - from_col):
            return False
        line = self.palace_diagonal(from_row, from_col, to_row, to_col)
        if line is None:
            return False
        return all(
            tuple(square) in line
            for square in self._path_squares(from_row, from_col, to_row, to_col)
        )

    # -- Piece rules --

    def _is_valid_move_for_piece(
        self, board: Board, piece: Piece, from_row: int, from_col: int, to_row: int, to_col: int
    ) -> bool:
        """Check if move is valid for the specific piece type."""
        if piece.piece_type in (PieceType.GENERAL, PieceType.GUARD):
            return self._is_valid_palace_move(from_row, from_col, to_row, to_col, piece.color)
        elif piece.piece_type == PieceType.HORSE:
            return self._is_valid_horse_move(board, from_row, from_col, to_row, to_col)
        elif piece.piece_type == PieceType.ELEPHANT:
            return self._is_valid_elephant_move(board, from_row, from_col, to_row, to_col)
        elif piece.piece_type == PieceType.CHARIOT:
            return self._is_valid_chariot_move(board, from_row, from_col, to_row, to_col)
        elif piece.piece_type == PieceType.CANNON:
            return self._is_valid_cannon_move(board, from_row, from_col, to_row, to_col)
        elif piece.piece_type == PieceType.SOLDIER:
            return self._is_valid_soldier_move(from_row, from_col, to_row, to_col, piece.color)
        return False

    def _is_valid_palace_move(
        self, from_row: int, from_col: int, to_row: int, to_col: int, color: Color
    ) -> bool:
        """Check if a general or guard move is valid.

        - Must remain inside own palace
        - One step orthogonally is always valid
        - One step diagonally only along a palace diagonal line
        """
        if not self.is_in_palace(to_row, to_col, color):
            return False

        row_diff = abs(to_row - from_row)
        col_diff = abs(to_col - from_col)

        if row_diff + col_diff == 1:
            return True
        if row_diff == 1 and col_diff == 1:
            return self.palace_diagonal(from_row, from_col, to_row, to_col) is not None
        return False

    def _is_valid_horse_move(self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check if horse move is valid: one orthogonal step then one diagonal step.

        The orthogonal step (along the longer leg) must be empty.
        """
        row_diff = to_row - from_row
        col_diff = to_col - from_col

        if abs(row_diff) == 2 and abs(col_diff) == 1:
            return board.is_empty(from_row + self._step(row_diff), from_col)
        elif abs(row_diff) == 1 and abs(col_diff) == 2:
            return board.is_empty(from_row, from_col + self._step(col_diff))
        return False

    def _is_valid_elephant_move(self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check if elephant move is valid: one orthogonal step then two diagonal steps.

        The orthogonal step and the first diagonal step must both be empty.
        """
        row_diff = to_row - from_row
        col_diff = to_col - from_col
        row_sign = self._step(row_diff)
        col_sign = self._step(col_diff)

        if abs(row_diff) == 3 and abs(col_diff) == 2:
            orth = (from_row + row_sign, from_col)
            diag = (from_row + 2 * row_sign, from_col + col_sign)
        elif abs(row_diff) == 2 and abs(col_diff) == 3:
            orth = (from_row, from_col + col_sign)
            diag = (from_row + row_sign, from_col + 2 * col_sign)
        else:
            return False

        return board.is_empty(*orth) and board.is_empty(*diag)

    def _is_valid_chariot_move(self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check if chariot move is valid.

        - Orthogonally any number of squares (path must be clear)
        - Diagonally inside a palace along an X-diagonal line (path must be clear)
        """
        is_orthogonal = from_row == to_row or from_col == to_col
        if not is_orthogonal and not self.is_palace_diagonal_move(from_row, from_col, to_row, to_col):
            return False
        return self._is_path_clear(board, from_row, from_col, to_row, to_col)

    def _is_valid_cannon_move(self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check if cannon move is valid.

        - Must jump over exactly one piece (the screen), which is not a cannon
        - Cannot capture a cannon
        - Moves orthogonally, or diagonally along a palace X-diagonal line
        """
        is_orthogonal = from_row == to_row or from_col == to_col
        if not is_orthogonal and not self.is_palace_diagonal_move(from_row, from_col, to_row, to_col):
            return False

        target = board.get_piece(to_row, to_col)
        if target is not None and target.piece_type == PieceType.CANNON:
            return False

        screens = [
            board.get_piece(row, col)
            for row, col in self._path_squares(from_row, from_col, to_row, to_col)
            if not board.is_empty(row, col)
        ]
        if len(screens) != 1:
            return False
        return screens[0].piece_type != PieceType.CANNON

    def _is_valid_soldier_move(self, from_row: int, from_col: int, to_row: int, to_col: int, color: Color) -> bool:
        """Check if soldier move is valid.

        - One step forward or one step sideways, never backward
        - One step diagonally forward along a diagonal of the enemy palace
        """
        direction = self.SOLDIER_DIRECTION[color]
        row_diff = to_row - from_row
        col_diff = abs(to_col - from_col)

        if row_diff == direction and col_diff == 0:
            return True
        if row_diff == 0 and col_diff == 1:
            return True

        enemy = self.opponent(color)
        if row_diff == direction and col_diff == 1 and self.is_in_palace(from_row, from_col, enemy):
            return self.palace_diagonal(from_row, from_col, to_row, to_col) is not None
        return False

    def check_winner(self, board: Board, move: Move, mover: Color, captured: Optional[Piece]) -> Optional[Color]:
        """Capturing the enemy general wins."""
        if captured is not None and captured.piece_type == PieceType.GENERAL:
            return mover
        return None
