"""Room coordination and message relay for online play.

Rooms are keyed by a 5-digit code. The relay stores each room's board
snapshot and forwards one player's messages to the other, either over the
peer's WebSocket or through a per-player poll queue.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from time import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from fastapi import WebSocket
from pydantic import ValidationError as PydanticValidationError

from .board import Board, Color, Move
from .config import Settings
from .engine import CapturedLedger, MoveResult, apply_move
from .errors import (
    GameError,
    IllegalMoveError,
    NotAuthorizedError,
    NotYourTurnError,
    ProtocolError,
    RoomFullError,
    RoomNotFoundError,
    SessionVanishedError,
    ValidationError,
)
from .protocol import (
    CreateRoomRequest,
    GameMoveMessage,
    JoinRoomRequest,
    RoomRequest,
    TimerSyncMessage,
    board_to_wire,
)
from .rules import GameVariant, get_variant
from .view import build_view

logger = logging.getLogger(__name__)

ROOM_CODE_MIN = 10000
ROOM_CODE_MAX = 99999


class RoomStatus(Enum):
    """Room status states."""
    WAITING = "waiting"        # Waiting for a guest
    READY = "ready"            # Guest joined, waiting for the host to start
    PLAYING = "playing"        # Game in progress
    FINISHED = "finished"      # Game ended with a winner


@dataclass
class Room:
    """A two-player game room."""
    code: str
    game: str
    host_id: str
    host_name: str
    board: Board
    current_player: Color
    guest_id: Optional[str] = None
    guest_name: Optional[str] = None
    captured: CapturedLedger = field(default_factory=CapturedLedger)
    game_started: bool = False
    in_progress: bool = False
    winner: Optional[Color] = None
    last_move: Optional[Move] = None
    created_at: float = field(default_factory=time)
    last_activity: float = field(default_factory=time)

    @property
    def variant(self) -> GameVariant:
        return get_variant(self.game)

    @property
    def status(self) -> RoomStatus:
        if self.guest_id is None:
            return RoomStatus.WAITING
        if self.in_progress:
            return RoomStatus.PLAYING
        if self.winner is not None:
            return RoomStatus.FINISHED
        return RoomStatus.READY

    def is_full(self) -> bool:
        """Check if room has two players."""
        return self.guest_id is not None

    def is_participant(self, player_id: str) -> bool:
        return player_id in (self.host_id, self.guest_id)

    def color_of(self, player_id: str) -> Color:
        """Host plays the variant's first color, the guest the second."""
        if player_id == self.host_id:
            return self.variant.colors[0]
        if player_id == self.guest_id:
            return self.variant.colors[1]
        raise NotAuthorizedError("You are not a player in this room")

    def opponent_id(self, player_id: str) -> Optional[str]:
        """Get the opponent of a player."""
        if player_id == self.host_id:
            return self.guest_id
        if player_id == self.guest_id:
            return self.host_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Room snapshot, as sent to clients."""
        return {
            "roomCode": self.code,
            "game": self.game,
            "status": self.status.value,
            "hostId": self.host_id,
            "hostName": self.host_name,
            "guestId": self.guest_id,
            "guestName": self.guest_name,
            "currentPlayer": self.current_player.value,
            "board": board_to_wire(self.board),
            "captured": self.captured.to_dict(),
            "gameStarted": self.game_started,
            "inProgress": self.in_progress,
            "winner": self.winner.value if self.winner else None,
            "lastMove": (
                [self.last_move.from_row, self.last_move.from_col, self.last_move.to_row, self.last_move.to_col]
                if self.last_move else None
            ),
            "lastActivity": self.last_activity,
        }

    def view(self) -> Dict[str, Any]:
        """Render model of the stored snapshot."""
        return build_view(
            self.variant,
            self.board,
            self.current_player,
            self.status.value,
            ledger=self.captured,
            last_move=self.last_move,
            winner=self.winner,
            players={"host": self.host_name, "guest": self.guest_name},
        )


class RoomManager:
    """Store of active rooms and per-player message queues.

    Constructed explicitly and handed to whatever needs it; tests build
    their own.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time,
    ):
        self.settings = settings or Settings()
        self.rooms: Dict[str, Room] = {}
        self.player_to_room: Dict[str, str] = {}  # player_id -> room code
        self.message_queues: Dict[str, List[Dict[str, Any]]] = {}
        self.swept_codes: Set[str] = set()  # codes removed by the idle sweep
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = asyncio.Lock()

    def generate_room_code(self) -> str:
        """Uniform 5-digit code, resampled until it collides with no active room."""
        if len(self.rooms) >= ROOM_CODE_MAX - ROOM_CODE_MIN + 1:
            raise ProtocolError("No room codes left; try again later")
        while True:
            code = str(self._rng.randint(ROOM_CODE_MIN, ROOM_CODE_MAX))
            if code not in self.rooms:
                return code

    def _touch(self, room: Room) -> None:
        room.last_activity = self._clock()

    async def create_room(self, host_id: str, host_name: str, game: str = "chess") -> Room:
        """Create a new room hosted by ``host_id``."""
        variant = get_variant(game)
        async with self._lock:
            code = self.generate_room_code()
            self.swept_codes.discard(code)
            now = self._clock()
            room = Room(
                code=code,
                game=variant.name,
                host_id=host_id,
                host_name=host_name,
                board=variant.new_board(),
                current_player=variant.first_player,
                created_at=now,
                last_activity=now,
            )
            self.rooms[code] = room
            self.player_to_room[host_id] = code

        logger.info("Room %s created for %s by %s", code, variant.name, host_name)
        return room

    async def join_room(self, code: str, guest_id: str, guest_name: str) -> Room:
        """Fill the guest slot. The first join wins; later joins see a full room."""
        async with self._lock:
            room = self.get_room(code)
            if room.is_full():
                raise RoomFullError(f"Room {code} is full")
            if guest_id == room.host_id:
                raise ProtocolError("You are already the host of this room")

            room.guest_id = guest_id
            room.guest_name = guest_name
            self.player_to_room[guest_id] = code
            self._touch(room)

        logger.info("%s joined room %s", guest_name, code)
        return room

    async def start_game(self, code: str, player_id: str) -> Room:
        """Host-only: start the game once a guest is present."""
        async with self._lock:
            room = self.get_room(code)
            if player_id != room.host_id:
                raise NotAuthorizedError("Only the host can start the game")
            if not room.is_full():
                raise ProtocolError("Waiting for an opponent to join")
            room.game_started = True
            room.in_progress = True
            self._touch(room)

        logger.info("Room %s started", code)
        return room

    async def record_move(self, code: str, player_id: str, message: GameMoveMessage) -> MoveResult:
        """Validate a move against the stored snapshot and apply it."""
        async with self._lock:
            room = self.get_room(code)
            mover = room.color_of(player_id)
            if not room.in_progress:
                raise ProtocolError("Game is not in progress")
            if mover != room.current_player:
                raise NotYourTurnError("Not your turn")

            move = message.to_move()
            variant = room.variant
            if not variant.is_legal_move(room.board, move.from_square, move.to_square, mover):
                raise IllegalMoveError(f"Illegal move {move}")

            result = apply_move(variant, room.board, move, mover, room.captured)
            room.board = result.board
            room.last_move = result.move
            room.current_player = variant.opponent(mover)
            if result.ended:
                room.in_progress = False
                room.winner = result.winner
            self._touch(room)

        logger.info("Room %s: %s played %s", code, mover.value, result.move)
        return result

    async def reset_game(self, code: str, player_id: str) -> Room:
        """Host-only: fresh board; the loser of the last game moves first."""
        async with self._lock:
            room = self.get_room(code)
            if player_id != room.host_id:
                raise NotAuthorizedError("Only the host can reset the game")
            variant = room.variant
            room.current_player = (
                variant.opponent(room.winner) if room.winner else variant.first_player
            )
            room.board = variant.new_board()
            room.captured.reset()
            room.winner = None
            room.last_move = None
            room.game_started = False
            room.in_progress = False
            self._touch(room)

        logger.info("Room %s reset, %s to move first", code, room.current_player.value)
        return room

    async def leave_room(self, player_id: str) -> Optional[Room]:
        """Remove a player from their room.

        A leaving host closes the room; a leaving guest frees the guest slot.
        Returns the room the player was in, if any.
        """
        async with self._lock:
            code = self.player_to_room.pop(player_id, None)
            if code is None:
                return None
            room = self.rooms.get(code)
            if room is None:
                return None

            if player_id == room.host_id:
                self._delete_room(room)
                logger.info("Room %s closed by host", code)
            else:
                room.guest_id = None
                room.guest_name = None
                room.game_started = False
                room.in_progress = False
                self._touch(room)
                logger.info("Guest left room %s", code)
            return room

    def _delete_room(self, room: Room) -> None:
        self.rooms.pop(room.code, None)
        for player_id in (room.host_id, room.guest_id):
            if player_id and self.player_to_room.get(player_id) == room.code:
                del self.player_to_room[player_id]
            if player_id:
                self.message_queues.pop(player_id, None)

    def find_room(self, code: str) -> Optional[Room]:
        return self.rooms.get(code)

    def get_room(self, code: str) -> Room:
        """Get a room by code or raise RoomNotFoundError."""
        room = self.rooms.get(code)
        if room is None:
            if code in self.swept_codes:
                raise SessionVanishedError(f"Room {code} was closed after inactivity")
            raise RoomNotFoundError(f"Room {code} not found")
        return room

    def get_player_room(self, player_id: str) -> Optional[Room]:
        """Get the room a player is in."""
        code = self.player_to_room.get(player_id)
        if code:
            return self.rooms.get(code)
        return None

    # -- Message queues --

    def enqueue(self, player_id: str, message: Dict[str, Any]) -> None:
        self.message_queues.setdefault(player_id, []).append(message)

    def send_to_opponent(self, code: str, sender_id: str, message: Dict[str, Any]) -> Optional[str]:
        """Queue ``message`` for the sender's opponent. Returns the opponent id."""
        room = self.get_room(code)
        opponent = room.opponent_id(sender_id)
        if opponent is not None:
            self.enqueue(opponent, message)
        return opponent

    def poll_messages(self, player_id: str) -> List[Dict[str, Any]]:
        """Return and remove every queued message for ``player_id``."""
        return self.message_queues.pop(player_id, [])

    # -- Idle sweep --

    async def sweep_idle(self, now: Optional[float] = None) -> List[str]:
        """Delete rooms with no activity for ``room_idle_seconds``."""
        now = self._clock() if now is None else now
        async with self._lock:
            stale = [
                room
                for room in self.rooms.values()
                if now - room.last_activity > self.settings.room_idle_seconds
            ]
            for room in stale:
                self._delete_room(room)
                self.swept_codes.add(room.code)

        if stale:
            logger.info("Swept %d idle room(s): %s", len(stale), ", ".join(r.code for r in stale))
        return [room.code for room in stale]

    async def run_sweeper(self) -> None:
        """Sweep idle rooms forever, every ``sweep_interval_seconds``."""
        while True:
            await asyncio.sleep(self.settings.sweep_interval_seconds)
            await self.sweep_idle()


Handler = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class ConnectionManager:
    """Dispatches client messages and routes notifications to peers."""

    def __init__(self, room_manager: Optional[RoomManager] = None, settings: Optional[Settings] = None):
        self.settings = settings or (room_manager.settings if room_manager else Settings())
        self.room_manager = room_manager or RoomManager(self.settings)
        self.active_connections: Dict[str, WebSocket] = {}  # player_id -> websocket
        self._lock = asyncio.Lock()

        self.handlers: Dict[str, Handler] = {
            "player_connect": self._handle_player_connect,
            "create_room": self._handle_create_room,
            "join_room": self._handle_join_room,
            "start_game": self._handle_start_game,
            "game_move": self._handle_game_move,
            "timer_sync": self._handle_timer_sync,
            "reset_game": self._handle_reset_game,
            "leave_room": self._handle_leave_room,
            "get_room": self._handle_get_room,
            "ping": self._handle_ping,
        }

    async def connect(self, websocket: WebSocket, player_id: str) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self.active_connections[player_id] = websocket

    async def disconnect(self, player_id: str) -> None:
        """Drop a connection. The room survives so the player can reconnect."""
        async with self._lock:
            self.active_connections.pop(player_id, None)

        room = self.room_manager.get_player_room(player_id)
        if room:
            opponent = room.opponent_id(player_id)
            if opponent:
                await self.notify(opponent, {
                    "type": "player_disconnected",
                    "message": "Your opponent's connection was lost",
                })
        logger.info("Player %s disconnected", player_id)

    async def send_personal(self, player_id: str, message: Dict[str, Any]) -> bool:
        """Send a message to a specific player's WebSocket."""
        websocket = self.active_connections.get(player_id)
        if websocket:
            try:
                await websocket.send_json(message)
                return True
            except Exception:
                logger.warning("Send to %s failed; falling back to poll queue", player_id, exc_info=True)
        return False

    async def notify(self, player_id: str, message: Dict[str, Any]) -> None:
        """Deliver over WebSocket when connected, otherwise queue for polling."""
        if not await self.send_personal(player_id, message):
            self.room_manager.enqueue(player_id, message)

    async def dispatch(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Run one client message and return the reply for the sender."""
        msg_type = data.get("type")
        handler = self.handlers.get(msg_type)
        if handler is None:
            return ProtocolError(f"Unknown message type: {msg_type}").to_dict()

        try:
            return await handler(player_id, data)
        except PydanticValidationError as e:
            error = ValidationError(e.errors()[0].get("msg", "Invalid message"))
            logger.warning("Rejected %s from %s: %s", msg_type, player_id, error.message)
            return error.to_dict()
        except GameError as e:
            logger.warning("Rejected %s from %s: %s", msg_type, player_id, e.message)
            return e.to_dict()
        except ValueError as e:
            error = ValidationError(str(e))
            logger.warning("Rejected %s from %s: %s", msg_type, player_id, error.message)
            return error.to_dict()

    async def handle_message(self, player_id: str, data: Dict[str, Any]) -> None:
        """Handle an incoming WebSocket message."""
        reply = await self.dispatch(player_id, data)
        await self.send_personal(player_id, reply)

    # -- Handlers --

    async def _handle_player_connect(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"type": "connected", "playerId": player_id}

    async def _handle_create_room(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = CreateRoomRequest(**data)
        previous = self.room_manager.get_player_room(player_id)
        if previous is not None:
            await self._leave(player_id)
        try:
            room = await self.room_manager.create_room(player_id, request.host_name, request.game)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return {
            "type": "room_created",
            "roomCode": room.code,
            "hostName": room.host_name,
            "game": room.game,
            "color": room.color_of(player_id).value,
        }

    async def _handle_join_room(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = JoinRoomRequest(**data)
        room = await self.room_manager.join_room(request.room_code, player_id, request.guest_name)

        await self.notify(room.host_id, {
            "type": "player_joined",
            "guestName": room.guest_name,
        })
        return {
            "type": "room_joined",
            "roomCode": room.code,
            "hostName": room.host_name,
            "guestName": room.guest_name,
            "game": room.game,
            "color": room.color_of(player_id).value,
        }

    async def _handle_start_game(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = RoomRequest(**data)
        room = await self.room_manager.start_game(request.room_code, player_id)
        message = {
            "type": "game_start",
            "roomCode": room.code,
            "currentPlayer": room.current_player.value,
        }
        await self.notify(room.guest_id, message)
        return message

    async def _handle_game_move(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        message = GameMoveMessage(**data)
        if message.room_code is None:
            raise ValidationError("roomCode is required")
        result = await self.room_manager.record_move(message.room_code, player_id, message)
        room = self.room_manager.get_room(message.room_code)

        forward = GameMoveMessage.from_move(result.move, room.current_player, room.code).to_wire()
        forward["gameEnded"] = result.ended
        forward["winner"] = result.winner.value if result.winner else None
        opponent = room.opponent_id(player_id)
        if opponent:
            await self.notify(opponent, forward)
        return {**forward, "type": "move_accepted"}

    async def _handle_timer_sync(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        message = TimerSyncMessage(**data)
        room = self.room_manager.get_room(message.room_code)
        if not room.is_participant(player_id):
            raise NotAuthorizedError("You are not a player in this room")
        if not room.in_progress:
            return {"type": "timer_ignored"}
        opponent = room.opponent_id(player_id)
        if opponent:
            await self.notify(opponent, {"type": "timer_sync", "timeLeft": message.time_left})
        return {"type": "timer_synced"}

    async def _handle_reset_game(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = RoomRequest(**data)
        room = await self.room_manager.reset_game(request.room_code, player_id)
        message = {"type": "game_reset", "room": room.to_dict()}
        if room.guest_id:
            await self.notify(room.guest_id, message)
        return message

    async def _handle_leave_room(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        await self._leave(player_id)
        return {"type": "room_left"}

    async def _leave(self, player_id: str) -> None:
        room = await self.room_manager.leave_room(player_id)
        if room is None:
            return
        if player_id == room.host_id:
            if room.guest_id:
                # Queues were discarded with the room, so push directly if possible
                await self.send_personal(room.guest_id, {
                    "type": "room_closed",
                    "roomCode": room.code,
                })
        else:
            await self.notify(room.host_id, {
                "type": "player_left",
                "room": room.to_dict(),
            })

    async def _handle_get_room(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = RoomRequest(**data)
        room = self.room_manager.get_room(request.room_code)
        return {"type": "room_state", "room": room.to_dict()}

    async def _handle_ping(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"type": "pong", "timestamp": time()}
