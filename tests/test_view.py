"""Unit tests for the render projection."""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from boardgames import Board, CapturedLedger, Color, Move, Piece, PieceType, build_view, get_variant
from boardgames.view import piece_glyph


class TestGlyphs:
    """Test piece glyphs."""

    def test_chess_glyphs(self):
        """Test chess pieces use the chess symbols."""
        assert piece_glyph(Piece(Color.WHITE, PieceType.KING)) == "♔"
        assert piece_glyph(Piece(Color.BLACK, PieceType.PAWN)) == "♟"

    def test_janggi_glyphs_depend_on_side(self):
        """Test general and soldier glyphs differ between cho and han."""
        assert piece_glyph(Piece(Color.CHO, PieceType.GENERAL)) == "楚"
        assert piece_glyph(Piece(Color.HAN, PieceType.GENERAL)) == "漢"
        assert piece_glyph(Piece(Color.CHO, PieceType.SOLDIER)) == "卒"
        assert piece_glyph(Piece(Color.HAN, PieceType.CHARIOT)) == "車"

    def test_stones_and_empty(self):
        """Test stones and empty cells."""
        assert piece_glyph(Piece(Color.BLACK)) == "●"
        assert piece_glyph(None) is None


class TestBuildView:
    """Test the view model."""

    def test_view_fields(self):
        """Test the view reflects board, turn, captures and last move."""
        omok = get_variant("omok")
        board = Board(15, 15, custom_setup={(7, 7): "b"})
        view = build_view(omok, board, Color.WHITE, "in_progress", last_move=Move.place(7, 7), time_left=12)

        assert view["cells"][7][7] == {"code": "b", "glyph": "●", "color": "black"}
        assert view["cells"][0][0] is None
        assert view["current_player"] == "white"
        assert view["last_move"] == {"from": [7, 7], "to": [7, 7]}
        assert view["timer"] == 12
        assert view["captured"] == {"black": [], "white": []}

    def test_view_is_pure(self):
        """Test building a view leaves its inputs untouched."""
        chess = get_variant("chess")
        board = chess.new_board()
        ledger = CapturedLedger()
        ledger.record(Color.WHITE, Piece(Color.BLACK, PieceType.QUEEN))
        before = board.occupancy()

        view = build_view(chess, board, Color.BLACK, "in_progress", ledger=ledger, winner=None)

        assert board.occupancy() == before
        assert ledger.pieces(Color.WHITE) == [Piece(Color.BLACK, PieceType.QUEEN)]
        assert view["captured"]["white"] == ["♛"]
        assert view["winner"] is None
