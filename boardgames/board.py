"""Board representation shared by chess, janggi and omok."""

import copy
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple
from dataclasses import dataclass


class Color(Enum):
    """Player colors. Each game uses exactly two of them."""

    WHITE = "white"
    BLACK = "black"
    CHO = "cho"  # Janggi, moves first
    HAN = "han"


class PieceType(Enum):
    """Piece types for chess and janggi. Omok stones have no type."""

    # Chess
    KING = "king"
    QUEEN = "queen"
    ROOK = "rook"
    BISHOP = "bishop"
    KNIGHT = "knight"
    PAWN = "pawn"

    # Janggi
    GENERAL = "general"
    GUARD = "guard"
    ELEPHANT = "elephant"
    HORSE = "horse"
    CHARIOT = "chariot"
    CANNON = "cannon"
    SOLDIER = "soldier"


COLOR_CODES: Dict[str, Color] = {
    "w": Color.WHITE,
    "b": Color.BLACK,
    "c": Color.CHO,
    "h": Color.HAN,
}

CHESS_CODES: Dict[str, PieceType] = {
    "K": PieceType.KING,
    "Q": PieceType.QUEEN,
    "R": PieceType.ROOK,
    "B": PieceType.BISHOP,
    "N": PieceType.KNIGHT,
    "P": PieceType.PAWN,
}

JANGGI_CODES: Dict[str, PieceType] = {
    "G": PieceType.GENERAL,
    "A": PieceType.GUARD,
    "E": PieceType.ELEPHANT,
    "H": PieceType.HORSE,
    "R": PieceType.CHARIOT,
    "C": PieceType.CANNON,
    "S": PieceType.SOLDIER,
}


@dataclass(frozen=True)
class Piece:
    """A piece (or an omok stone when ``piece_type`` is None)."""

    color: Color
    piece_type: Optional[PieceType] = None

    @property
    def is_stone(self) -> bool:
        return self.piece_type is None

    def __str__(self) -> str:
        if self.piece_type is None:
            return f"{self.color.value}_stone"
        return f"{self.color.value}_{self.piece_type.value}"

    def to_code(self) -> str:
        """Compact code, e.g. "wK" (white king), "cS" (cho soldier), "b" (black stone)."""
        color_char = next(k for k, v in COLOR_CODES.items() if v == self.color)
        if self.piece_type is None:
            return color_char
        table = JANGGI_CODES if self.color in (Color.CHO, Color.HAN) else CHESS_CODES
        type_char = next(k for k, v in table.items() if v == self.piece_type)
        return f"{color_char}{type_char}"

    @classmethod
    def from_code(cls, code: str) -> "Piece":
        """Parse a compact piece code."""
        if not code or code[0] not in COLOR_CODES:
            raise ValueError(f"Unknown piece code: {code!r}")
        color = COLOR_CODES[code[0]]
        if len(code) == 1:
            return cls(color)
        table = JANGGI_CODES if color in (Color.CHO, Color.HAN) else CHESS_CODES
        if code[1] not in table:
            raise ValueError(f"Unknown piece code: {code!r}")
        return cls(color, table[code[1]])


class Square(NamedTuple):
    """A (row, col) board coordinate, 0-indexed."""

    row: int
    col: int


@dataclass
class Move:
    """Represents a move.

    Omok placements use the same square for source and destination.
    """

    from_row: int
    from_col: int
    to_row: int
    to_col: int
    captured_piece: Optional[Piece] = None

    @classmethod
    def place(cls, row: int, col: int) -> "Move":
        """Stone placement at (row, col)."""
        return cls(row, col, row, col)

    @property
    def from_square(self) -> Square:
        return Square(self.from_row, self.from_col)

    @property
    def to_square(self) -> Square:
        return Square(self.to_row, self.to_col)

    @property
    def is_placement(self) -> bool:
        return self.from_square == self.to_square

    def __str__(self) -> str:
        if self.is_placement:
            return f"@({self.to_row},{self.to_col})"
        return f"({self.from_row},{self.from_col})->({self.to_row},{self.to_col})"


class Board:
    """Fixed-size grid of optional pieces.

    Dimensions never change after construction; every cell holds at most one
    occupant.
    """

    def __init__(self, rows: int, cols: int, custom_setup: Optional[Dict[Tuple[int, int], str]] = None):
        """Initialize an empty board.

        Args:
            rows, cols: Board dimensions
            custom_setup: Optional mapping of (row, col) to piece codes (e.g. {(7, 4): "wK"})
        """
        self.rows = rows
        self.cols = cols
        self.grid: List[List[Optional[Piece]]] = [
            [None for _ in range(cols)] for _ in range(rows)
        ]
        if custom_setup:
            for (row, col), code in custom_setup.items():
                self.set_piece(row, col, Piece.from_code(code))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get_piece(self, row: int, col: int) -> Optional[Piece]:
        """Get piece at given coordinates (None when empty or off the board)."""
        if self.in_bounds(row, col):
            return self.grid[row][col]
        return None

    def set_piece(self, row: int, col: int, piece: Optional[Piece]) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"Square ({row}, {col}) is off a {self.rows}x{self.cols} board")
        self.grid[row][col] = piece

    def is_empty(self, row: int, col: int) -> bool:
        return self.get_piece(row, col) is None

    def squares(self) -> Iterator[Square]:
        """All squares in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield Square(row, col)

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Occupied squares in row-major order, optionally filtered by color."""
        for square in self.squares():
            piece = self.grid[square.row][square.col]
            if piece is not None and (color is None or piece.color == color):
                yield square, piece

    def find(self, color: Color, piece_type: PieceType) -> List[Square]:
        return [
            square
            for square, piece in self.pieces(color)
            if piece.piece_type == piece_type
        ]

    def copy(self) -> "Board":
        clone = Board(self.rows, self.cols)
        clone.grid = copy.deepcopy(self.grid)
        return clone

    def occupancy(self) -> List[List[Optional[str]]]:
        """Grid of piece codes, handy for comparisons and display."""
        return [
            [piece.to_code() if piece else None for piece in row]
            for row in self.grid
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.rows == other.rows and self.cols == other.cols and self.grid == other.grid

    def __repr__(self) -> str:
        return f"Board({self.rows}x{self.cols}, pieces={sum(1 for _ in self.pieces())})"
