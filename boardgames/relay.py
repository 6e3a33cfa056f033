"""Transport seam between a game session and the room relay.

A session only needs to send an action and receive the reply, and to
collect whatever the relay has queued for it. ``LocalRelay`` does both
in-process against a ``ConnectionManager``; a network client would
implement the same two coroutines over HTTP polling or a WebSocket.
"""

from typing import Any, Dict, List, Protocol

from .errors import (
    GameError,
    IllegalMoveError,
    NotAuthorizedError,
    NotYourTurnError,
    ProtocolError,
    RoomFullError,
    RoomNotFoundError,
    SessionVanishedError,
    TransportError,
    ValidationError,
)
from .multiplayer import ConnectionManager

ERRORS_BY_CODE = {
    error.code: error
    for error in (
        ValidationError,
        ProtocolError,
        RoomNotFoundError,
        RoomFullError,
        NotAuthorizedError,
        NotYourTurnError,
        IllegalMoveError,
        TransportError,
        SessionVanishedError,
    )
}


def raise_for_error(reply: Dict[str, Any]) -> Dict[str, Any]:
    """Turn an ``error`` payload back into the matching exception."""
    if reply.get("type") == "error":
        error_class = ERRORS_BY_CODE.get(reply.get("code"), GameError)
        raise error_class(reply.get("message", ""))
    return reply


class MoveRelay(Protocol):
    async def request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Send one action; return the reply or raise a GameError."""
        ...

    async def poll(self) -> List[Dict[str, Any]]:
        """Drain messages queued for this player."""
        ...


class LocalRelay:
    """In-process relay bound to one player of a ConnectionManager."""

    def __init__(self, manager: ConnectionManager, player_id: str):
        self.manager = manager
        self.player_id = player_id

    async def request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        reply = await self.manager.dispatch(self.player_id, {**data, "playerId": self.player_id})
        return raise_for_error(reply)

    async def poll(self) -> List[Dict[str, Any]]:
        return self.manager.room_manager.poll_messages(self.player_id)
