"""Tests for the HTTP and WebSocket API."""

import pytest
import sys
import os

from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api import create_app
from boardgames import Settings, get_variant
from boardgames.protocol import board_to_wire


@pytest.fixture
def client():
    with TestClient(create_app(Settings())) as test_client:
        yield test_client


def create_and_join(client):
    created = client.post("/api/action", json={"type": "create_room", "hostName": "Kim", "playerId": "host"})
    code = created.json()["roomCode"]
    client.post("/api/action", json={"type": "join_room", "roomCode": code, "guestName": "Lee", "playerId": "guest"})
    return code


class TestHealth:
    """Test service endpoints."""

    def test_health(self, client):
        """Test health reports the room count."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "rooms": 0}

    def test_games(self, client):
        """Test the game list."""
        assert client.get("/api/games").json() == {"games": ["chess", "janggi", "omok"]}


class TestActions:
    """Test the polling action endpoint."""

    def test_room_flow(self, client):
        """Test create, join, start and move over HTTP."""
        code = create_and_join(client)

        messages = client.get("/api/messages/host").json()["messages"]
        assert messages == [{"type": "player_joined", "guestName": "Lee"}]
        assert client.get("/api/messages/host").json()["messages"] == []

        started = client.post("/api/action", json={"type": "start_game", "roomCode": code, "playerId": "host"})
        assert started.json()["type"] == "game_start"

        moved = client.post("/api/action", json={
            "type": "game_move", "roomCode": code, "playerId": "host",
            "fromRow": 6, "fromCol": 4, "toRow": 4, "toCol": 4, "nextPlayer": "black",
        })
        assert moved.status_code == 200

        guest_messages = client.get("/api/messages/guest").json()["messages"]
        assert [m["type"] for m in guest_messages] == ["game_start", "game_move"]

        room = client.get(f"/api/rooms/{code}").json()["room"]
        assert room["currentPlayer"] == "black"
        assert room["status"] == "playing"
        assert room["board"][4][4] == {"type": "pawn", "color": "white"}
        assert client.get("/health").json()["rooms"] == 1

        view = client.get(f"/api/rooms/{code}").json()["view"]
        assert view["last_move"] == {"from": [6, 4], "to": [4, 4]}
        assert view["cells"][4][4]["glyph"] == "♙"

    def test_unknown_room_is_404(self, client):
        """Test joining a missing room answers 404."""
        response = client.post("/api/action", json={
            "type": "join_room", "roomCode": "12345", "guestName": "Lee", "playerId": "guest",
        })

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ROOM_NOT_FOUND"

    def test_protocol_error_is_400(self, client):
        """Test a guest starting the game answers 400."""
        code = create_and_join(client)
        response = client.post("/api/action", json={"type": "start_game", "roomCode": code, "playerId": "guest"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "NOT_AUTHORIZED"

    def test_player_id_required(self, client):
        """Test actions need a player id."""
        response = client.post("/api/action", json={"type": "ping"})

        assert response.status_code == 400

    def test_missing_room_snapshot(self, client):
        """Test reading a missing room answers 404."""
        assert client.get("/api/rooms/99999").status_code == 404


class TestLegalMoves:
    """Test the highlighting endpoint."""

    def test_pawn_targets(self, client):
        """Test legal destinations for a pawn on the starting board."""
        board = board_to_wire(get_variant("chess").new_board())
        response = client.post("/api/legal-moves", json={
            "game": "chess", "board": board, "row": 6, "col": 4, "mover": "white",
        })

        assert response.status_code == 200
        assert response.json()["targets"] == [[4, 4], [5, 4]]

    def test_wrong_board_size(self, client):
        """Test the board must match the game."""
        board = board_to_wire(get_variant("chess").new_board())
        response = client.post("/api/legal-moves", json={"game": "janggi", "board": board, "row": 0, "col": 0})

        assert response.status_code == 400

    def test_foreign_piece_color(self, client):
        """Test a piece colored for another game is rejected."""
        board = board_to_wire(get_variant("chess").new_board())
        board[6][4] = {"type": "pawn", "color": "cho"}
        response = client.post("/api/legal-moves", json={"game": "chess", "board": board, "row": 6, "col": 4})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    def test_foreign_piece_type(self, client):
        """Test a janggi board holding a chess piece is rejected."""
        board = board_to_wire(get_variant("janggi").new_board())
        board[6][0] = {"type": "queen", "color": "cho"}
        response = client.post("/api/legal-moves", json={"game": "janggi", "board": board, "row": 6, "col": 0})

        assert response.status_code == 400

    def test_piece_without_color(self, client):
        """Test a cell missing its color is rejected."""
        board = board_to_wire(get_variant("chess").new_board())
        board[6][4] = {"type": "pawn"}
        response = client.post("/api/legal-moves", json={"game": "chess", "board": board, "row": 6, "col": 4})

        assert response.status_code == 400

    def test_mover_from_another_game(self, client):
        """Test the mover must play the requested game."""
        board = board_to_wire(get_variant("janggi").new_board())
        response = client.post("/api/legal-moves", json={
            "game": "janggi", "board": board, "row": 6, "col": 0, "mover": "white",
        })

        assert response.status_code == 400

    def test_unknown_game(self, client):
        """Test unknown games are rejected."""
        board = board_to_wire(get_variant("chess").new_board())
        response = client.post("/api/legal-moves", json={"game": "go", "board": board, "row": 0, "col": 0})

        assert response.status_code == 400


class TestWebSocket:
    """Test the WebSocket endpoint."""

    def test_websocket_room_flow(self, client):
        """Test replies and pushes over WebSockets."""
        with client.websocket_connect("/ws/host") as host:
            host.send_json({"type": "create_room", "hostName": "Kim"})
            created = host.receive_json()
            assert created["type"] == "room_created"

            with client.websocket_connect("/ws/guest") as guest:
                guest.send_json({"type": "join_room", "roomCode": created["roomCode"], "guestName": "Lee"})
                assert guest.receive_json()["type"] == "room_joined"
                assert host.receive_json() == {"type": "player_joined", "guestName": "Lee"}

                host.send_json({"type": "start_game", "roomCode": created["roomCode"]})
                assert host.receive_json()["type"] == "game_start"
                assert guest.receive_json()["type"] == "game_start"

            assert host.receive_json()["type"] == "player_disconnected"

    def test_websocket_error_payload(self, client):
        """Test errors come back as error messages."""
        with client.websocket_connect("/ws/someone") as ws:
            ws.send_json({"type": "join_room", "roomCode": "12345", "guestName": "Lee"})
            reply = ws.receive_json()

        assert reply["type"] == "error"
        assert reply["code"] == "ROOM_NOT_FOUND"
