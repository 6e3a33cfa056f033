"""Unit tests for Board, Piece and Move classes."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from boardgames import Board, Move, Color, PieceType, Piece, get_variant


class TestBoardInitialization:
    """Test board initialization."""

    def test_empty_board(self):
        """Test a new board has the requested size and no pieces."""
        board = Board(8, 8)

        assert board.rows == 8
        assert board.cols == 8
        assert list(board.pieces()) == []

    def test_custom_setup(self):
        """Test custom setup places pieces from codes."""
        board = Board(8, 8, custom_setup={(7, 4): "wK", (0, 4): "bK"})

        assert board.get_piece(7, 4) == Piece(Color.WHITE, PieceType.KING)
        assert board.get_piece(0, 4) == Piece(Color.BLACK, PieceType.KING)
        assert len(list(board.pieces())) == 2

    def test_chess_starting_position(self):
        """Test chess layout: white on rows 6-7, black on rows 0-1."""
        board = get_variant("chess").new_board()

        assert board.get_piece(7, 4) == Piece(Color.WHITE, PieceType.KING)
        assert board.get_piece(7, 3) == Piece(Color.WHITE, PieceType.QUEEN)
        assert board.get_piece(0, 4) == Piece(Color.BLACK, PieceType.KING)
        for col in range(8):
            assert board.get_piece(6, col) == Piece(Color.WHITE, PieceType.PAWN)
            assert board.get_piece(1, col) == Piece(Color.BLACK, PieceType.PAWN)
        assert len(list(board.pieces())) == 32

    def test_janggi_starting_position(self):
        """Test janggi layout: han on top, cho at the bottom."""
        board = get_variant("janggi").new_board()

        assert board.get_piece(0, 0) == Piece(Color.HAN, PieceType.CHARIOT)
        assert board.get_piece(1, 4) == Piece(Color.HAN, PieceType.GENERAL)
        assert board.get_piece(2, 1) == Piece(Color.HAN, PieceType.CANNON)
        assert board.get_piece(8, 4) == Piece(Color.CHO, PieceType.GENERAL)
        assert board.get_piece(7, 7) == Piece(Color.CHO, PieceType.CANNON)
        assert board.get_piece(9, 4) is None

        han_soldiers = board.find(Color.HAN, PieceType.SOLDIER)
        cho_soldiers = board.find(Color.CHO, PieceType.SOLDIER)
        assert [sq.col for sq in han_soldiers] == [0, 2, 4, 6, 8]
        assert all(sq.row == 3 for sq in han_soldiers)
        assert all(sq.row == 6 for sq in cho_soldiers)
        assert len(list(board.pieces())) == 32

    def test_omok_starts_empty(self):
        """Test omok board is an empty 15x15 grid."""
        board = get_variant("omok").new_board()

        assert (board.rows, board.cols) == (15, 15)
        assert list(board.pieces()) == []


class TestBoardAccess:
    """Test reading and writing cells."""

    def test_get_piece_off_board(self):
        """Test off-board squares read as empty."""
        board = Board(8, 8)

        assert board.get_piece(-1, 0) is None
        assert board.get_piece(8, 0) is None
        assert not board.in_bounds(0, 8)

    def test_set_piece_off_board_raises(self):
        """Test writing outside the grid is an error."""
        board = Board(8, 8)

        with pytest.raises(IndexError):
            board.set_piece(8, 8, Piece(Color.WHITE, PieceType.PAWN))

    def test_squares_row_major(self):
        """Test squares are enumerated row by row."""
        board = Board(2, 3)

        assert list(board.squares()) == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]

    def test_pieces_filtered_by_color(self):
        """Test pieces() can filter by color."""
        board = Board(8, 8, custom_setup={(0, 0): "bR", (7, 7): "wR", (7, 0): "wR"})

        white = [square for square, _ in board.pieces(Color.WHITE)]
        assert white == [(7, 0), (7, 7)]

    def test_copy_is_independent(self):
        """Test copying a board does not share the grid."""
        board = Board(8, 8, custom_setup={(6, 4): "wP"})
        clone = board.copy()
        clone.set_piece(6, 4, None)

        assert board.get_piece(6, 4) is not None
        assert board != clone

    def test_occupancy(self):
        """Test occupancy grid of codes."""
        board = Board(2, 2, custom_setup={(0, 1): "b", (1, 0): "w"})

        assert board.occupancy() == [[None, "b"], ["w", None]]


class TestPieceCodes:
    """Test compact piece codes."""

    def test_chess_codes(self):
        """Test chess code round trip."""
        piece = Piece.from_code("bN")

        assert piece == Piece(Color.BLACK, PieceType.KNIGHT)
        assert piece.to_code() == "bN"

    def test_janggi_codes(self):
        """Test janggi codes use janggi piece letters."""
        assert Piece.from_code("cS") == Piece(Color.CHO, PieceType.SOLDIER)
        assert Piece.from_code("hG") == Piece(Color.HAN, PieceType.GENERAL)
        assert Piece(Color.HAN, PieceType.CANNON).to_code() == "hC"

    def test_stone_code(self):
        """Test omok stones are the bare color letter."""
        stone = Piece.from_code("b")

        assert stone.is_stone
        assert stone.to_code() == "b"

    def test_unknown_code(self):
        """Test unknown codes are rejected."""
        with pytest.raises(ValueError):
            Piece.from_code("xK")
        with pytest.raises(ValueError):
            Piece.from_code("wG")


class TestMoveClass:
    """Test Move class functionality."""

    def test_move_creation(self):
        """Test creating a move."""
        move = Move(6, 4, 4, 4)

        assert move.from_square == (6, 4)
        assert move.to_square == (4, 4)
        assert move.captured_piece is None
        assert not move.is_placement

    def test_placement(self):
        """Test placements share source and destination."""
        move = Move.place(7, 7)

        assert move.is_placement
        assert str(move) == "@(7,7)"

    def test_move_str(self):
        """Test string representation."""
        assert str(Move(6, 4, 4, 4)) == "(6,4)->(4,4)"
