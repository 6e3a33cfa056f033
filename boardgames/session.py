"""Client-side turn/session state machine.

One ``GameSession`` drives one game for one local player: room lifecycle,
whose turn it is, the move-pending lock, and the per-turn countdown. The
same class serves all three games; the variant decides the rules.
"""

import asyncio
import logging
import random
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .board import Board, Color, Move, Square
from .config import Settings
from .engine import CapturedLedger, MoveResult, apply_move, pick_random_move
from .errors import (
    GameError,
    NotAuthorizedError,
    ProtocolError,
    RoomNotFoundError,
    TransportError,
    ValidationError,
)
from .protocol import (
    GameMoveMessage,
    board_from_wire,
    validate_player_name,
    validate_room_code,
)
from .relay import MoveRelay
from .rules import GameVariant, get_variant
from .view import build_view

logger = logging.getLogger(__name__)


class SessionState(Enum):
    LOBBY = "lobby"
    WAITING_FOR_OPPONENT = "waiting_for_opponent"
    WAITING_FOR_HOST_TO_START = "waiting_for_host_to_start"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


# Room status (as the relay reports it) -> session state
ROOM_STATUS_STATES = {
    "waiting": SessionState.WAITING_FOR_OPPONENT,
    "ready": SessionState.WAITING_FOR_HOST_TO_START,
    "playing": SessionState.IN_PROGRESS,
    "finished": SessionState.ENDED,
}


class TurnTimer:
    """Per-turn countdown running as an asyncio task.

    ``start`` (re)starts from ``limit``; ``cancel`` stops it. When the count
    reaches zero ``on_timeout`` is awaited once. ``on_tick``, if given, is
    awaited after every other decrement.
    """

    def __init__(
        self,
        limit: int,
        tick_seconds: float,
        on_timeout: Callable[[], Awaitable[Any]],
        on_tick: Optional[Callable[[], Awaitable[Any]]] = None,
    ):
        self.limit = limit
        self.tick_seconds = tick_seconds
        self.on_timeout = on_timeout
        self.on_tick = on_tick
        self.time_left = limit
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.cancel()
        self.time_left = self.limit
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while self.time_left > 0:
            await asyncio.sleep(self.tick_seconds)
            self.time_left -= 1
            if self.on_tick is not None and self.time_left > 0:
                try:
                    await self.on_tick()
                except GameError as e:
                    logger.warning("Timer tick handling failed: %s", e.message)
        # Detach first so the callback may restart the timer
        self._task = None
        try:
            await self.on_timeout()
        except GameError as e:
            logger.warning("Timeout handling failed: %s", e.message)


class GameSession:
    """Turn and room state for one local player.

    With no relay the session is a hot-seat game: the local player moves
    for both colors. With a relay, the host plays the variant's first
    color and the guest the second.
    """

    def __init__(
        self,
        variant: Union[str, GameVariant],
        relay: Optional[MoveRelay] = None,
        player_id: Optional[str] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.variant = get_variant(variant) if isinstance(variant, str) else variant
        self.relay = relay
        self.player_id = player_id or getattr(relay, "player_id", None) or uuid.uuid4().hex
        self.settings = settings or Settings()
        self.rng = rng or random.Random()

        self.state = SessionState.LOBBY
        self.board: Board = self.variant.new_board()
        self.ledger = CapturedLedger()
        self.current_player: Color = self.variant.first_player
        self.winner: Optional[Color] = None
        self.last_move: Optional[Move] = None

        self.room_code: Optional[str] = None
        self.is_host = False
        self.my_color: Optional[Color] = None
        self.host_name: Optional[str] = None
        self.guest_name: Optional[str] = None

        self.move_pending = False
        self.notices: List[str] = []
        self.timer = TurnTimer(
            self.settings.turn_time_limit,
            self.settings.turn_tick_seconds,
            self.handle_timeout,
            on_tick=self.send_timer_sync,
        )

    @property
    def online(self) -> bool:
        return self.relay is not None

    @property
    def is_my_turn(self) -> bool:
        return not self.online or self.current_player == self.my_color

    # -- Room lifecycle --

    async def host_game(self, name: str) -> None:
        """Host a new game. Offline, play starts at once."""
        name = self._check_name(name)
        if self.state != SessionState.LOBBY:
            raise ProtocolError("Already in a game")

        if not self.online:
            self._new_game(self.variant.first_player)
            self.host_name = name
            self.is_host = True
            self._begin()
            return

        reply = await self.relay.request({
            "type": "create_room",
            "hostName": name,
            "game": self.variant.name,
        })
        self._new_game(self.variant.first_player)
        self.room_code = reply["roomCode"]
        self.host_name = reply.get("hostName", name)
        self.my_color = Color(reply["color"])
        self.is_host = True
        self.state = SessionState.WAITING_FOR_OPPONENT
        logger.info("Hosting %s room %s", self.variant.name, self.room_code)

    async def join_game(self, code: str, name: str) -> None:
        """Join a hosted room as the guest."""
        name = self._check_name(name)
        try:
            code = validate_room_code(code)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not self.online:
            raise ProtocolError("Joining a room needs a relay")
        if self.state != SessionState.LOBBY:
            raise ProtocolError("Already in a game")

        reply = await self.relay.request({"type": "join_room", "roomCode": code, "guestName": name})
        self._new_game(self.variant.first_player)
        self.room_code = reply["roomCode"]
        self.host_name = reply.get("hostName")
        self.guest_name = reply.get("guestName", name)
        self.my_color = Color(reply["color"])
        self.is_host = False
        self.state = SessionState.WAITING_FOR_HOST_TO_START
        logger.info("Joined room %s", self.room_code)

    async def start_game(self) -> None:
        """Host-only: start play once the guest has joined."""
        if self.state != SessionState.WAITING_FOR_HOST_TO_START:
            raise ProtocolError("Game cannot be started now")
        if not self.online:
            self._begin()
            return
        if not self.is_host:
            raise NotAuthorizedError("Only the host can start the game")

        reply = await self.relay.request({"type": "start_game", "roomCode": self.room_code})
        await self.handle_message(reply)

    async def reset(self) -> None:
        """New game in the same room; the loser of the last game moves first."""
        if not self.online:
            first = self.variant.opponent(self.winner) if self.winner else self.variant.first_player
            self.timer.cancel()
            self._new_game(first)
            self.state = SessionState.WAITING_FOR_HOST_TO_START
            return
        if not self.is_host:
            raise NotAuthorizedError("Only the host can reset the game")

        reply = await self.relay.request({"type": "reset_game", "roomCode": self.room_code})
        await self.handle_message(reply)

    async def back_to_menu(self) -> None:
        """Leave whatever game is going on and return to the lobby."""
        self.timer.cancel()
        if self.online and self.room_code:
            try:
                await self.relay.request({"type": "leave_room", "roomCode": self.room_code})
            except GameError as e:
                logger.warning("Leaving room %s failed: %s", self.room_code, e.message)
        self._to_lobby()

    async def sync(self) -> bool:
        """Apply queued relay messages, then confirm the room still exists.

        Returns False when the session was sent back to the lobby.
        """
        if not self.online or self.room_code is None:
            return False
        try:
            for message in await self.relay.poll():
                await self.handle_message(message)
            if self.room_code is None:
                return False
            await self.relay.request({"type": "get_room", "roomCode": self.room_code})
        except RoomNotFoundError as e:
            logger.info("Room %s vanished; back to lobby", self.room_code)
            self.notices.append(e.message)
            self.timer.cancel()
            self._to_lobby()
            return False
        return True

    # -- Moves --

    def legal_targets(self, square: Square) -> List[Square]:
        """Destinations to highlight for the piece on ``square``."""
        if self.state != SessionState.IN_PROGRESS or not self.is_my_turn:
            return []
        return self.variant.legal_targets(self.board, square, self.current_player)

    async def submit_move(self, from_square: Square, to_square: Optional[Square] = None) -> bool:
        """Play a move for the local player.

        For placement games ``to_square`` may be omitted. Returns False,
        changing nothing, when the move is not allowed right now.
        """
        to_square = to_square if to_square is not None else from_square
        if self.state != SessionState.IN_PROGRESS or self.move_pending:
            return False
        if not self.is_my_turn:
            return False

        mover = self.current_player
        if not self.variant.is_legal_move(self.board, from_square, to_square, mover):
            return False
        if from_square == to_square:
            move = Move.place(*to_square)
        else:
            move = Move(from_square[0], from_square[1], to_square[0], to_square[1])
        return await self._play(move, mover)

    async def handle_timeout(self) -> bool:
        """Play a random legal move for the side whose clock ran out."""
        if self.state != SessionState.IN_PROGRESS or self.move_pending:
            return False
        if not self.is_my_turn:
            # The opponent's client owns this timeout
            return False

        move = pick_random_move(self.variant, self.board, self.current_player, self.rng)
        if move is None:
            logger.info("Timeout with no legal move for %s", self.current_player.value)
            self.timer.cancel()
            return False
        logger.info("Timeout: random move %s for %s", move, self.current_player.value)
        return await self._play(move, self.current_player)

    async def send_timer_sync(self) -> None:
        """Share the mover's remaining time with the opponent."""
        if self.online and self.room_code and self.state == SessionState.IN_PROGRESS and self.is_my_turn:
            await self.relay.request({
                "type": "timer_sync",
                "roomCode": self.room_code,
                "timeLeft": self.timer.time_left,
            })

    async def _play(self, move: Move, mover: Color) -> bool:
        saved = (self.board, self.ledger.copy(), self.current_player, self.last_move, self.winner, self.state)
        result = apply_move(self.variant, self.board, move, mover, self.ledger)
        self._apply_result(result)
        if not self.online:
            return True

        self.move_pending = True
        message = GameMoveMessage.from_move(result.move, self.current_player, self.room_code)
        try:
            await self.relay.request(message.to_wire())
        except GameError as e:
            self.board, self.ledger, self.current_player, self.last_move, self.winner, self.state = saved
            self.move_pending = False
            if self.state == SessionState.IN_PROGRESS:
                self.timer.start()
            if isinstance(e, TransportError):
                logger.warning("Move %s not delivered: %s", result.move, e.message)
                return False
            raise
        return True

    def _apply_result(self, result: MoveResult) -> None:
        self.board = result.board
        self.last_move = result.move
        self.current_player = self.variant.opponent(result.mover)
        if result.ended:
            self.winner = result.winner
            self.state = SessionState.ENDED
            self.timer.cancel()
        else:
            self.timer.start()

    # -- Inbound messages --

    async def handle_message(self, message: Dict[str, Any]) -> None:
        """Apply one message from the relay."""
        msg_type = message.get("type")

        if msg_type == "game_move":
            self.move_pending = False
            try:
                move_message = GameMoveMessage(**message)
                mover = self.variant.opponent(move_message.next_color)
                result = apply_move(self.variant, self.board, move_message.to_move(), mover, self.ledger)
            except ValueError as e:
                # pydantic's ValidationError is a ValueError too
                logger.warning("Dropping malformed game_move: %s", e)
                self.notices.append("Received an invalid move from the relay")
                return
            self._apply_result(result)

        elif msg_type == "game_start":
            self.move_pending = False
            self.current_player = Color(message.get("currentPlayer", self.current_player.value))
            self._begin()

        elif msg_type in ("room_state", "game_reset", "player_left"):
            self._load_room(message["room"])
            if msg_type == "player_left":
                self.notices.append("Your opponent left the room")

        elif msg_type == "player_joined":
            self.guest_name = message.get("guestName")
            if self.state == SessionState.WAITING_FOR_OPPONENT:
                self.state = SessionState.WAITING_FOR_HOST_TO_START

        elif msg_type == "player_disconnected":
            self.notices.append(message.get("message", "Your opponent disconnected"))

        elif msg_type == "room_closed":
            self.notices.append("The host closed the room")
            self.timer.cancel()
            self._to_lobby()

        elif msg_type == "timer_sync":
            self.timer.time_left = int(message["timeLeft"])

        elif msg_type == "error":
            self.notices.append(message.get("message", "Error"))

        else:
            logger.debug("Ignoring %s message", msg_type)

    def _load_room(self, room: Dict[str, Any]) -> None:
        """Replace local state with a room snapshot."""
        self.move_pending = False
        self.room_code = room["roomCode"]
        self.board = board_from_wire(room["board"])
        self.ledger = CapturedLedger.from_dict(room.get("captured"))
        self.current_player = Color(room["currentPlayer"])
        self.winner = Color(room["winner"]) if room.get("winner") else None
        last = room.get("lastMove")
        self.last_move = Move(*last) if last else None
        self.host_name = room.get("hostName")
        self.guest_name = room.get("guestName")
        self.is_host = room.get("hostId") == self.player_id
        self.my_color = self.variant.colors[0] if self.is_host else self.variant.colors[1]
        self.state = ROOM_STATUS_STATES[room["status"]]
        if self.state == SessionState.IN_PROGRESS:
            self.timer.start()
        else:
            self.timer.cancel()

    # -- Helpers --

    def view(self) -> Dict[str, Any]:
        return build_view(
            self.variant,
            self.board,
            self.current_player,
            self.state.value,
            ledger=self.ledger,
            last_move=self.last_move,
            winner=self.winner,
            time_left=self.timer.time_left,
            players={"host": self.host_name, "guest": self.guest_name},
        )

    def _check_name(self, name: str) -> str:
        try:
            return validate_player_name(name)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def _new_game(self, first_player: Color) -> None:
        self.board = self.variant.new_board()
        self.ledger = CapturedLedger()
        self.current_player = first_player
        self.winner = None
        self.last_move = None
        self.move_pending = False

    def _begin(self) -> None:
        self.state = SessionState.IN_PROGRESS
        self.timer.start()

    def _to_lobby(self) -> None:
        self._new_game(self.variant.first_player)
        self.state = SessionState.LOBBY
        self.room_code = None
        self.is_host = False
        self.my_color = None
        self.host_name = None
        self.guest_name = None
