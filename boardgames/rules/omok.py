"""Omok (five in a row) placement rules."""

from typing import List, Optional

from ..board import Board, Color, Move, Piece, Square
from .base import GameVariant

WIN_LENGTH = 5

# Horizontal, vertical, and both diagonals
DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


class OmokVariant(GameVariant):
    """15x15 omok. Black places first; stones never move."""

    name = "omok"
    rows = 15
    cols = 15
    colors = (Color.BLACK, Color.WHITE)
    piece_types = frozenset({None})

    def is_legal_move(self, board: Board, from_square: Square, to_square: Square, mover: Optional[Color] = None) -> bool:
        """A placement is legal when the destination is on the board and empty.

        Stones are placed, not moved, so source and destination must match.
        """
        if tuple(from_square) != tuple(to_square):
            return False
        row, col = to_square
        return board.in_bounds(row, col) and board.is_empty(row, col)

    def all_legal_moves(self, board: Board, color: Color) -> List[Move]:
        return [Move.place(row, col) for row, col in board.squares() if board.is_empty(row, col)]

    def legal_targets(self, board: Board, from_square: Square, mover: Optional[Color] = None) -> List[Square]:
        return [square for square in board.squares() if board.is_empty(*square)]

    def count_line(self, board: Board, row: int, col: int, d_row: int, d_col: int) -> int:
        """Count contiguous same-color stones through (row, col) along one axis, both ways."""
        stone = board.get_piece(row, col)
        if stone is None:
            return 0
        count = 1
        for sign in (1, -1):
            r, c = row + sign * d_row, col + sign * d_col
            while board.get_piece(r, c) == stone:
                count += 1
                r += sign * d_row
                c += sign * d_col
        return count

    def check_winner(self, board: Board, move: Move, mover: Color, captured: Optional[Piece]) -> Optional[Color]:
        """Five or more in one axis through the placed stone wins."""
        for d_row, d_col in DIRECTIONS:
            if self.count_line(board, move.to_row, move.to_col, d_row, d_col) >= WIN_LENGTH:
                return mover
        return None
