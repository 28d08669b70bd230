"""Tests for the HTTP API."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

import api


@pytest.fixture
def client(monkeypatch):
    """Fresh client with an empty game table and a generous rate limit."""
    monkeypatch.setattr(api, "RATE_LIMIT_MAX_REQUESTS", 10000)
    monkeypatch.setattr(api, "AI_THINK_DELAY", 0.0)
    api.games.clear()
    api.rate_limit_data.clear()
    yield TestClient(api.app)
    api.games.clear()
    api.rate_limit_data.clear()


def start(client, variant, game_id="g1", **extra):
    response = client.post("/api/new-game", json={"game_id": game_id, "variant": variant, **extra})
    assert response.status_code == 200
    return response.json()


class TestNewGame:
    """Game creation and board reads."""

    def test_create_xiangqi(self, client):
        data = start(client, "XIANGQI")

        assert data["turn"] == "RED"
        board = client.get("/api/board/g1").json()
        assert (board["width"], board["height"]) == (9, 10)
        assert len(board["board"]) == 10
        assert board["board"][9][4]["kind"] == "GENERAL"
        assert board["game_over"] is False
        assert board["can_undo"] is False

    def test_unknown_variant(self, client):
        response = client.post("/api/new-game", json={"game_id": "g1", "variant": "CHECKERS"})

        assert response.status_code == 422

    def test_unknown_game(self, client):
        assert client.get("/api/board/missing").status_code == 404
        assert client.post("/api/ai-move/missing").status_code == 404

    def test_banqi_hides_pieces(self, client):
        start(client, "BANQI", seed=11)
        board = client.get("/api/board/g1").json()

        cells = [cell for row in board["board"] for cell in row]
        assert len(cells) == 32
        assert all(cell["hidden"] and "kind" not in cell for cell in cells)

    def test_rules_summary(self, client):
        data = client.get("/api/rules/GOMOKU").json()

        assert data["width"] == 15
        assert data["first_to_move"] == "BLACK"
        assert data["rules"]


class TestMoves:
    """Move, legal and undo endpoints."""

    def test_legal_destinations(self, client):
        start(client, "XIANGQI")

        data = client.get("/api/legal/g1", params={"x": 4, "y": 6}).json()

        assert data["destinations"] == [[4, 5]]

    def test_legal_on_empty_cell(self, client):
        start(client, "XIANGQI")

        assert client.get("/api/legal/g1", params={"x": 4, "y": 5}).status_code == 400

    def test_move(self, client):
        start(client, "XIANGQI")

        response = client.post("/api/move", json={"game_id": "g1", "from_x": 4, "from_y": 6, "to_x": 4, "to_y": 5})

        assert response.status_code == 200
        board = client.get("/api/board/g1").json()
        assert board["board"][6][4] is None
        assert board["board"][5][4]["kind"] == "SOLDIER"
        assert board["turn"] == "BLACK"
        assert len(board["history"]) == 1

    def test_illegal_move(self, client):
        start(client, "XIANGQI")

        response = client.post("/api/move", json={"game_id": "g1", "from_x": 1, "from_y": 7, "to_x": 1, "to_y": 1})

        assert response.status_code == 400

    def test_undo(self, client):
        start(client, "CHESS")
        client.post("/api/move", json={"game_id": "g1", "from_x": 4, "from_y": 6, "to_x": 4, "to_y": 4})

        assert client.post("/api/undo/g1").status_code == 200
        board = client.get("/api/board/g1").json()
        assert board["board"][6][4]["kind"] == "PAWN"
        assert board["turn"] == "WHITE"
        assert client.post("/api/undo/g1").status_code == 400


class TestPlacementAndFlip:
    """Stone placement and Banqi flips."""

    def test_place_stone(self, client):
        start(client, "GO")

        assert client.post("/api/place", json={"game_id": "g1", "x": 3, "y": 3}).status_code == 200
        assert client.post("/api/place", json={"game_id": "g1", "x": 3, "y": 3}).status_code == 400
        board = client.get("/api/board/g1").json()
        assert board["board"][3][3]["side"] == "BLACK"

    def test_place_in_piece_game(self, client):
        start(client, "XIANGQI")

        assert client.post("/api/place", json={"game_id": "g1", "x": 4, "y": 5}).status_code == 400

    def test_flip(self, client):
        start(client, "BANQI", seed=3)

        data = client.post("/api/flip", json={"game_id": "g1", "x": 0, "y": 0}).json()

        assert data["piece"]["hidden"] is False
        assert "kind" in data["piece"]
        assert client.post("/api/flip", json={"game_id": "g1", "x": 0, "y": 0}).status_code == 400


class TestAiAndClock:
    """AI moves and timeouts."""

    def test_ai_move(self, client):
        start(client, "CHESS", seed=1)

        data = client.post("/api/ai-move/g1").json()

        assert data["status"] == "ok"
        assert data["last_action"].startswith("WHITE")
        assert data["moves_considered"] == 20
        assert client.get("/api/board/g1").json()["turn"] == "BLACK"

    def test_ai_places_stone(self, client):
        start(client, "GOMOKU", seed=1)

        data = client.post("/api/ai-move/g1").json()

        assert "STONE" in data["last_action"]

    def test_timeout_ends_game(self, client):
        start(client, "XIANGQI")

        data = client.post("/api/timeout/g1").json()

        assert data["winner"] == "BLACK"
        response = client.post("/api/move", json={"game_id": "g1", "from_x": 4, "from_y": 6, "to_x": 4, "to_y": 5})
        assert response.status_code == 409
        assert client.post("/api/ai-move/g1").status_code == 409
        assert client.post("/api/timeout/g1").status_code == 409


class TestRateLimit:
    """Per-client request throttling."""

    def test_too_many_requests(self, client, monkeypatch):
        monkeypatch.setattr(api, "RATE_LIMIT_MAX_REQUESTS", 2)
        monkeypatch.setattr(api, "RATE_LIMIT_WINDOW", 60.0)
        start(client, "CHESS")

        assert client.get("/api/board/g1").status_code == 200
        assert client.get("/api/board/g1").status_code == 429
