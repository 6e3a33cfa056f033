"""Game variant descriptor and the shared parts of move legality."""

from typing import FrozenSet, List, Optional, Tuple

from ..board import Board, Color, Move, Piece, PieceType, Square


class GameVariant:
    """Describes one game: dimensions, colors, starting layout and rules.

    Subclasses implement ``_is_valid_move_for_piece`` (piece movement rules)
    and ``check_winner`` (terminal condition). Everything else, the universal
    preconditions and move enumeration, is shared.
    """

    name: str = ""
    rows: int = 0
    cols: int = 0
    colors: Tuple[Color, Color] = (Color.WHITE, Color.BLACK)
    piece_types: FrozenSet[Optional[PieceType]] = frozenset()

    @property
    def first_player(self) -> Color:
        return self.colors[0]

    def opponent(self, color: Color) -> Color:
        """Return the other color of this variant."""
        if color == self.colors[0]:
            return self.colors[1]
        if color == self.colors[1]:
            return self.colors[0]
        raise ValueError(f"{color.value} does not play {self.name}")

    def new_board(self) -> Board:
        """Board in the starting position."""
        board = Board(self.rows, self.cols)
        self._initialize_starting_position(board)
        return board

    def empty_board(self) -> Board:
        return Board(self.rows, self.cols)

    def check_board(self, board: Board) -> None:
        """Raise ValueError unless ``board`` could belong to this game."""
        if (board.rows, board.cols) != (self.rows, self.cols):
            raise ValueError(f"{self.name} board must be {self.rows}x{self.cols}")
        for (row, col), piece in board.pieces():
            if piece.color not in self.colors:
                raise ValueError(f"{piece.color.value} does not play {self.name} (at {row}, {col})")
            if piece.piece_type not in self.piece_types:
                kind = piece.piece_type.value if piece.piece_type else "stone"
                raise ValueError(f"{kind} is not a {self.name} piece (at {row}, {col})")

    def _initialize_starting_position(self, board: Board) -> None:
        """Place the starting pieces. Empty by default."""

    # -- Legality --

    def is_legal_move(self, board: Board, from_square: Square, to_square: Square, mover: Optional[Color] = None) -> bool:
        """Check if moving the piece on ``from_square`` to ``to_square`` is legal.

        Pure: never mutates ``board``.
        """
        from_row, from_col = from_square
        to_row, to_col = to_square

        if not board.in_bounds(to_row, to_col):
            return False
        if (from_row, from_col) == (to_row, to_col):
            return False

        piece = board.get_piece(from_row, from_col)
        if piece is None:
            return False
        if mover is not None and piece.color != mover:
            return False

        target = board.get_piece(to_row, to_col)
        if target is not None and target.color == piece.color:
            return False

        return self._is_valid_move_for_piece(board, piece, from_row, from_col, to_row, to_col)

    def _is_valid_move_for_piece(
        self, board: Board, piece: Piece, from_row: int, from_col: int, to_row: int, to_col: int
    ) -> bool:
        raise NotImplementedError

    def all_legal_moves(self, board: Board, color: Color) -> List[Move]:
        """Enumerate every legal move for ``color``.

        Ordering is row-major over source squares, then row-major over
        destination squares.
        """
        moves = []
        for from_square, _piece in board.pieces(color):
            for to_square in board.squares():
                if self.is_legal_move(board, from_square, to_square, color):
                    moves.append(Move(from_square.row, from_square.col, to_square.row, to_square.col))
        return moves

    def legal_targets(self, board: Board, from_square: Square, mover: Optional[Color] = None) -> List[Square]:
        """Destinations the piece on ``from_square`` may move to (for highlighting)."""
        return [
            to_square
            for to_square in board.squares()
            if self.is_legal_move(board, from_square, to_square, mover)
        ]

    # -- Terminal condition --

    def check_winner(self, board: Board, move: Move, mover: Color, captured: Optional[Piece]) -> Optional[Color]:
        """Return the winning color if ``move`` (already applied to ``board``) ended the game."""
        return None

    # -- Path helpers --

    @staticmethod
    def _step(delta: int) -> int:
        return (delta > 0) - (delta < 0)

    def _path_squares(self, from_row: int, from_col: int, to_row: int, to_col: int) -> List[Square]:
        """Squares strictly between two endpoints on a straight or diagonal line."""
        row_diff, col_diff = abs(to_row - from_row), abs(to_col - from_col)
        if row_diff and col_diff and row_diff != col_diff:
            raise ValueError("Endpoints are not on a common line")
        row_step = self._step(to_row - from_row)
        col_step = self._step(to_col - from_col)
        squares = []
        row, col = from_row + row_step, from_col + col_step
        while (row, col) != (to_row, to_col):
            squares.append(Square(row, col))
            row += row_step
            col += col_step
        return squares

    def _is_path_clear(self, board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
        """Check that every square strictly between the endpoints is empty."""
        return all(
            board.is_empty(row, col)
            for row, col in self._path_squares(from_row, from_col, to_row, to_col)
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.rows}x{self.cols})"
