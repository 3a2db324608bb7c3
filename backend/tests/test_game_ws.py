"""End-to-end games over the WebSocket route."""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from services.session_manager import SessionManager

OPPONENT_LEFT = {"type": "info", "message": "Opponent disconnected. Game ended."}


@pytest.fixture()
def game_app() -> FastAPI:
    return create_app(manager=SessionManager(), settings=Settings())


@pytest.fixture()
def client(game_app: FastAPI) -> Iterator[TestClient]:
    with TestClient(game_app) as test_client:
        yield test_client


def _open_game(x, o) -> str:
    x.send_json({"action": "create"})
    created = x.receive_json()
    assert created["type"] == "game_created"
    assert created["mark"] == "X"
    session_id = created["sessionId"]

    o.send_json({"action": "join", "sessionId": session_id})
    joined = o.receive_json()
    assert joined == {
        "type": "game_joined",
        "mark": "O",
        "sessionId": session_id,
        "current_turn": "X",
        "board": [None] * 9,
    }
    assert x.receive_json() == {
        "type": "opponent_joined",
        "mark": "X",
        "current_turn": "X",
        "board": [None] * 9,
    }
    return session_id


def test_full_game_over_websocket(client: TestClient) -> None:
    with client.websocket_connect("/ws") as x, client.websocket_connect("/ws") as o:
        session_id = _open_game(x, o)

        for player, cell in [(x, 0), (o, 3), (x, 1), (o, 4)]:
            player.send_json({"action": "move", "sessionId": session_id, "cell": cell})
            made_x = x.receive_json()
            made_o = o.receive_json()
            assert made_x == made_o
            assert made_x["type"] == "move_made"

        assert made_x["next_turn"] == "X"
        x.send_json({"action": "move", "sessionId": session_id, "cell": 2})
        expected = {"type": "game_over", "winner": "X", "board": ["X", "X", "X", "O", "O", None, None, None, None]}
        assert x.receive_json() == expected
        assert o.receive_json() == expected

        # Finished games stay readable until the grace period runs out.
        response = client.get(f"/api/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["phase"] == "ended"
        assert response.json()["winner"] == "X"


def test_root_path_also_serves_the_game(client: TestClient) -> None:
    with client.websocket_connect("/") as ws:
        ws.send_json({"action": "create"})
        assert ws.receive_json()["type"] == "game_created"


def test_move_out_of_turn_over_websocket(client: TestClient) -> None:
    with client.websocket_connect("/ws") as x, client.websocket_connect("/ws") as o:
        session_id = _open_game(x, o)

        o.send_json({"action": "move", "sessionId": session_id, "cell": 0})
        assert o.receive_json() == {"type": "error", "message": "Not your turn"}

        x.send_json({"action": "move", "sessionId": session_id, "cell": 0})
        made = x.receive_json()
        assert made["board"] == ["X"] + [None] * 8
        assert o.receive_json() == made


def test_malformed_frames_keep_connection_open(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_text("this is not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

        ws.send_json({"action": "teleport"})
        assert ws.receive_json() == {"type": "error", "message": "Unknown action"}

        ws.send_bytes(b'{"action": "create"}')
        assert ws.receive_json()["type"] == "game_created"


def test_disconnect_mid_game_ends_session(client: TestClient, game_app: FastAPI) -> None:
    manager: SessionManager = game_app.state.session_manager
    with client.websocket_connect("/ws") as o:
        with client.websocket_connect("/ws") as x:
            session_id = _open_game(x, o)
            x.send_json({"action": "move", "sessionId": session_id, "cell": 4})
            x.receive_json()
            o.receive_json()

        assert o.receive_json() == OPPONENT_LEFT
        assert manager.lookup(session_id) is None

        o.send_json({"action": "move", "sessionId": session_id, "cell": 0})
        assert o.receive_json() == {"type": "error", "message": "Game not found"}

        with client.websocket_connect("/ws") as newcomer:
            newcomer.send_json({"action": "join", "sessionId": session_id})
            assert newcomer.receive_json() == {"type": "error", "message": "Game not found"}


def test_join_errors_over_websocket(client: TestClient) -> None:
    with client.websocket_connect("/ws") as x, client.websocket_connect("/ws") as o:
        session_id = _open_game(x, o)

        with client.websocket_connect("/ws") as late:
            late.send_json({"action": "join", "sessionId": session_id})
            assert late.receive_json() == {"type": "error", "message": "Game is full"}

            late.send_json({"action": "join", "sessionId": "nope"})
            assert late.receive_json() == {"type": "error", "message": "Game not found"}


def test_waiting_creator_leaving_removes_session(client: TestClient, game_app: FastAPI) -> None:
    manager: SessionManager = game_app.state.session_manager
    with client.websocket_connect("/ws") as x:
        x.send_json({"action": "create"})
        session_id = x.receive_json()["sessionId"]
        assert manager.lookup(session_id) is not None

    assert manager.lookup(session_id) is None
    assert len(manager.store) == 0
