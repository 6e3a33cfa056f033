"""Unit tests for wire messages and board serialization."""

import pytest
import sys
import os

from pydantic import ValidationError as PydanticValidationError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from boardgames import Color, Move, Piece, PieceType, get_variant
from boardgames.protocol import (
    CreateRoomRequest,
    GameMoveMessage,
    JoinRoomRequest,
    board_from_wire,
    board_to_wire,
    validate_player_name,
    validate_room_code,
)


class TestBoardSerialization:
    """Test board snapshots on the wire."""

    @pytest.mark.parametrize("game", ["chess", "janggi"])
    def test_starting_position_round_trip(self, game):
        """Test a starting position survives serialization."""
        board = get_variant(game).new_board()

        assert board_from_wire(board_to_wire(board)).occupancy() == board.occupancy()

    def test_stones_round_trip(self):
        """Test omok stones keep their color and have no type."""
        board = get_variant("omok").new_board()
        board.set_piece(7, 7, Piece(Color.BLACK))
        wire = board_to_wire(board)

        assert wire[7][7] == {"type": None, "color": "black"}
        assert board_from_wire(wire) == board

    def test_piece_format(self):
        """Test pieces serialize as type and color names."""
        wire = board_to_wire(get_variant("janggi").new_board())

        assert wire[1][4] == {"type": "general", "color": "han"}
        assert wire[9][4] is None

    def test_ragged_snapshot_rejected(self):
        """Test rows of different lengths are rejected."""
        with pytest.raises(ValueError):
            board_from_wire([[None, None], [None]])
        with pytest.raises(ValueError):
            board_from_wire([])


class TestValidation:
    """Test name and room code validation."""

    def test_name_too_short(self):
        """Test names need at least two characters after stripping."""
        with pytest.raises(ValueError):
            validate_player_name(" a ")
        assert validate_player_name("  Kim ") == "Kim"

    @pytest.mark.parametrize("code", ["1234", "123456", "abcde", "12 45", ""])
    def test_bad_room_codes(self, code):
        """Test room codes must be exactly five digits."""
        with pytest.raises(ValueError):
            validate_room_code(code)

    def test_good_room_code(self):
        """Test a five digit code passes."""
        assert validate_room_code("48213") == "48213"

    def test_request_models_validate(self):
        """Test request models run the same checks."""
        with pytest.raises(PydanticValidationError):
            CreateRoomRequest(hostName="x")
        with pytest.raises(PydanticValidationError):
            JoinRoomRequest(roomCode="999", guestName="Lee")

        request = JoinRoomRequest(roomCode="12345", guestName="Lee", playerId="p2")
        assert request.room_code == "12345"
        assert request.guest_name == "Lee"


class TestGameMoveMessage:
    """Test the game_move message."""

    def test_wire_names(self):
        """Test the message dumps with camelCase names."""
        move = Move(4, 4, 4, 1, Piece(Color.BLACK, PieceType.KNIGHT))
        wire = GameMoveMessage.from_move(move, Color.BLACK, "12345").to_wire()

        assert wire == {
            "type": "game_move",
            "fromRow": 4,
            "fromCol": 4,
            "toRow": 4,
            "toCol": 1,
            "capturedPiece": {"type": "knight", "color": "black"},
            "nextPlayer": "black",
            "roomCode": "12345",
        }

    def test_parse_from_wire(self):
        """Test a received message rebuilds the move."""
        message = GameMoveMessage(**{
            "type": "game_move",
            "fromRow": 6, "fromCol": 4, "toRow": 4, "toCol": 4,
            "capturedPiece": None,
            "nextPlayer": "black",
            "roomCode": "12345",
        })

        assert message.to_move() == Move(6, 4, 4, 4)
        assert message.next_color == Color.BLACK

    def test_unknown_next_player(self):
        """Test nextPlayer must be a known color."""
        with pytest.raises(PydanticValidationError):
            GameMoveMessage(fromRow=0, fromCol=0, toRow=0, toCol=0, nextPlayer="green")
