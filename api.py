"""FastAPI backend for the board game relay."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from boardgames.board import Color
from boardgames.config import Settings
from boardgames.errors import RoomNotFoundError, SessionVanishedError
from boardgames.multiplayer import ConnectionManager, RoomManager
from boardgames.protocol import LegalMovesRequest, LegalMovesResponse, board_from_wire
from boardgames.rules import available_games, get_variant

logger = logging.getLogger(__name__)

# Error codes answered with 404 instead of 400
NOT_FOUND_CODES = {RoomNotFoundError.code, SessionVanishedError.code}


def get_manager(request: Request) -> ConnectionManager:
    return request.app.state.manager


def raise_for_error(reply: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an ``error`` reply into an HTTPException."""
    if reply.get("type") == "error":
        status_code = 404 if reply["code"] in NOT_FOUND_CODES else 400
        raise HTTPException(
            status_code=status_code,
            detail={"code": reply["code"], "message": reply["message"]},
        )
    return reply


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        manager = ConnectionManager(RoomManager(settings))
        app.state.manager = manager
        sweeper = asyncio.create_task(manager.room_manager.run_sweeper())
        logger.info("Relay started (idle rooms swept after %ss)", settings.room_idle_seconds)
        yield
        # Cleanup: stop the idle sweeper on shutdown
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass

    app = FastAPI(title="Board Game Relay", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        manager = get_manager(request)
        return {"status": "ok", "rooms": len(manager.room_manager.rooms)}

    @app.get("/api/games")
    async def list_games():
        """List the playable games."""
        return {"games": available_games()}

    @app.post("/api/action")
    async def action(data: Dict[str, Any], request: Request):
        """Run one relay action (same messages as the WebSocket)."""
        player_id = data.get("playerId")
        if not player_id:
            raise HTTPException(
                status_code=400,
                detail={"code": "VALIDATION_ERROR", "message": "playerId is required"},
            )
        reply = await get_manager(request).dispatch(player_id, data)
        return raise_for_error(reply)

    @app.get("/api/messages/{player_id}")
    async def poll_messages(player_id: str, request: Request):
        """Drain the messages queued for a player."""
        manager = get_manager(request)
        return {"messages": manager.room_manager.poll_messages(player_id)}

    @app.get("/api/rooms/{code}")
    async def get_room_info(code: str, request: Request):
        """Get information about a specific room."""
        room = get_manager(request).room_manager.find_room(code)
        if room is None:
            raise HTTPException(
                status_code=404,
                detail={"code": RoomNotFoundError.code, "message": f"Room {code} not found"},
            )
        return {"room": room.to_dict(), "view": room.view()}

    @app.post("/api/legal-moves", response_model=LegalMovesResponse)
    async def legal_moves(body: LegalMovesRequest):
        """Legal destinations for the piece on one square of a supplied board."""
        try:
            variant = get_variant(body.game)
            board = board_from_wire(body.board)
            mover = Color(body.mover) if body.mover else None
            variant.check_board(board)
            if mover is not None and mover not in variant.colors:
                raise ValueError(f"{mover.value} does not play {variant.name}")
        except ValueError as e:
            raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})

        targets = variant.legal_targets(board, (body.row, body.col), mover)
        return LegalMovesResponse(
            game=variant.name,
            row=body.row,
            col=body.col,
            targets=[[row, col] for row, col in targets],
        )

    @app.post("/api/generate-player-id")
    async def generate_player_id():
        """Generate a unique player ID for the relay."""
        return {"player_id": str(uuid.uuid4())}

    @app.websocket("/ws/{player_id}")
    async def websocket_endpoint(websocket: WebSocket, player_id: str):
        """WebSocket endpoint; one JSON message in, one reply out."""
        manager: ConnectionManager = websocket.app.state.manager
        await manager.connect(websocket, player_id)

        try:
            while True:
                data = await websocket.receive_json()
                await manager.handle_message(player_id, data)
        except WebSocketDisconnect:
            await manager.disconnect(player_id)
        except Exception:
            logger.exception("WebSocket error for player %s", player_id)
            await manager.disconnect(player_id)

    return app


app = create_app()
