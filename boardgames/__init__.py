"""Two-player board games (chess, janggi, omok) with online rooms."""

from .board import Board, Move, Color, PieceType, Piece, Square
from .config import Settings
from .engine import CapturedLedger, MoveResult, apply_move, pick_random_move
from .errors import (
    GameError, ValidationError, ProtocolError,
    RoomNotFoundError, RoomFullError, NotAuthorizedError, NotYourTurnError,
    IllegalMoveError, TransportError, SessionVanishedError,
)
from .rules import (
    GameVariant, ChessVariant, JanggiVariant, OmokVariant,
    get_variant, available_games,
)
from .multiplayer import ConnectionManager, RoomManager, Room, RoomStatus
from .relay import MoveRelay, LocalRelay
from .session import GameSession, SessionState, TurnTimer
from .view import build_view

__all__ = [
    # Board and rules
    'Board', 'Move', 'Color', 'PieceType', 'Piece', 'Square',
    'GameVariant', 'ChessVariant', 'JanggiVariant', 'OmokVariant',
    'get_variant', 'available_games',
    # Move execution
    'CapturedLedger', 'MoveResult', 'apply_move', 'pick_random_move',
    # Sessions
    'GameSession', 'SessionState', 'TurnTimer',
    'MoveRelay', 'LocalRelay',
    # Multiplayer
    'ConnectionManager', 'RoomManager', 'Room', 'RoomStatus',
    # Errors and settings
    'GameError', 'ValidationError', 'ProtocolError',
    'RoomNotFoundError', 'RoomFullError', 'NotAuthorizedError', 'NotYourTurnError',
    'IllegalMoveError', 'TransportError', 'SessionVanishedError',
    'Settings',
    'build_view',
]
