"""Wire messages exchanged between clients and the relay.

Field names on the wire are camelCase (``fromRow``, ``roomCode``...); the
models accept either spelling and dump with aliases.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .board import Board, Color, Move, Piece, PieceType

ROOM_CODE_PATTERN = re.compile(r"^\d{5}$")
MIN_NAME_LENGTH = 2

WirePiece = Dict[str, Optional[str]]
WireBoard = List[List[Optional[WirePiece]]]


def piece_to_wire(piece: Optional[Piece]) -> Optional[WirePiece]:
    """Convert piece to {"type", "color"} (type is None for stones)."""
    if piece is None:
        return None
    return {
        "type": piece.piece_type.value if piece.piece_type else None,
        "color": piece.color.value,
    }


def piece_from_wire(data: Optional[Dict[str, Any]]) -> Optional[Piece]:
    if data is None:
        return None
    if not data.get("color"):
        raise ValueError("Piece is missing its color")
    piece_type = data.get("type")
    return Piece(Color(data["color"]), PieceType(piece_type) if piece_type else None)


def board_to_wire(board: Board) -> WireBoard:
    """Serialize the full grid, row by row."""
    return [[piece_to_wire(piece) for piece in row] for row in board.grid]


def board_from_wire(cells: WireBoard) -> Board:
    """Rebuild a board from its serialized grid."""
    if not cells or not cells[0]:
        raise ValueError("Board snapshot is empty")
    board = Board(len(cells), len(cells[0]))
    for row, row_cells in enumerate(cells):
        if len(row_cells) != board.cols:
            raise ValueError("Board snapshot rows have different lengths")
        for col, cell in enumerate(row_cells):
            board.set_piece(row, col, piece_from_wire(cell))
    return board


def validate_room_code(value: str) -> str:
    value = (value or "").strip()
    if not ROOM_CODE_PATTERN.match(value):
        raise ValueError("Room code must be exactly 5 digits")
    return value


def validate_player_name(value: str) -> str:
    value = (value or "").strip()
    if len(value) < MIN_NAME_LENGTH:
        raise ValueError(f"Name must be at least {MIN_NAME_LENGTH} characters")
    return value


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# --- REQUEST MODELS ---
class CreateRoomRequest(WireModel):
    host_name: str = Field(alias="hostName")
    player_id: Optional[str] = Field(default=None, alias="playerId")
    game: str = "chess"

    @field_validator("host_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return validate_player_name(value)


class JoinRoomRequest(WireModel):
    room_code: str = Field(alias="roomCode")
    guest_name: str = Field(alias="guestName")
    player_id: Optional[str] = Field(default=None, alias="playerId")

    @field_validator("room_code")
    @classmethod
    def check_code(cls, value: str) -> str:
        return validate_room_code(value)

    @field_validator("guest_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return validate_player_name(value)


class RoomRequest(WireModel):
    """start_game / reset_game / leave_room / get_room."""

    room_code: str = Field(alias="roomCode")
    player_id: Optional[str] = Field(default=None, alias="playerId")

    @field_validator("room_code")
    @classmethod
    def check_code(cls, value: str) -> str:
        return validate_room_code(value)


class TimerSyncMessage(WireModel):
    type: str = "timer_sync"
    room_code: str = Field(alias="roomCode")
    time_left: int = Field(alias="timeLeft")


class GameMoveMessage(WireModel):
    """A move forwarded to the opponent."""

    type: str = "game_move"
    from_row: int = Field(alias="fromRow")
    from_col: int = Field(alias="fromCol")
    to_row: int = Field(alias="toRow")
    to_col: int = Field(alias="toCol")
    captured_piece: Optional[Dict[str, Optional[str]]] = Field(default=None, alias="capturedPiece")
    next_player: str = Field(alias="nextPlayer")
    room_code: Optional[str] = Field(default=None, alias="roomCode")

    @field_validator("next_player")
    @classmethod
    def validate_next_player(cls, value: str) -> str:
        Color(value)
        return value

    @classmethod
    def from_move(cls, move: Move, next_player: Color, room_code: Optional[str] = None) -> "GameMoveMessage":
        return cls(
            from_row=move.from_row,
            from_col=move.from_col,
            to_row=move.to_row,
            to_col=move.to_col,
            captured_piece=piece_to_wire(move.captured_piece),
            next_player=next_player.value,
            room_code=room_code,
        )

    def to_move(self) -> Move:
        return Move(
            self.from_row,
            self.from_col,
            self.to_row,
            self.to_col,
            piece_from_wire(self.captured_piece),
        )

    @property
    def next_color(self) -> Color:
        return Color(self.next_player)


class LegalMovesRequest(BaseModel):
    """Stateless highlighting query."""

    game: str
    board: WireBoard
    row: int
    col: int
    mover: Optional[str] = None


# --- RESPONSE MODELS ---
class LegalMovesResponse(BaseModel):
    game: str
    row: int
    col: int
    targets: List[List[int]]
