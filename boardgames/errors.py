"""Exception hierarchy shared by the rule engine, sessions and the relay.

Every error carries a machine-readable ``code`` and a human-readable
``message`` so the API layer can turn it into a response payload without
inspecting the exception type.
"""

from typing import Any, Dict


class GameError(Exception):
    """Base exception for all game errors."""

    code: str = "GAME_ERROR"

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to an error payload."""
        return {"type": "error", "code": self.code, "message": self.message}


class ValidationError(GameError):
    """User input was rejected before any state changed."""

    code = "VALIDATION_ERROR"


class ProtocolError(GameError):
    """A room action is not allowed in the current room state."""

    code = "PROTOCOL_ERROR"


class RoomNotFoundError(ProtocolError):
    """Room not found."""

    code = "ROOM_NOT_FOUND"


class RoomFullError(ProtocolError):
    """Room is full."""

    code = "ROOM_FULL"


class NotAuthorizedError(ProtocolError):
    """Not authorized to perform this action."""

    code = "NOT_AUTHORIZED"


class NotYourTurnError(ProtocolError):
    """Move attempted out of turn."""

    code = "NOT_YOUR_TURN"


class IllegalMoveError(GameError):
    """Move is not legal on the current board."""

    code = "ILLEGAL_MOVE"


class TransportError(GameError):
    """Sending a message to the relay failed."""

    code = "TRANSPORT_ERROR"


class SessionVanishedError(RoomNotFoundError):
    """The room backing this session no longer exists."""

    code = "SESSION_VANISHED"
