"""
Tests for the FastAPI service layer

Tests cover:
- REST snapshot, setup, player selection and policy controls
- Payload validation (bounded controls, unknown countries)
- One-time outcome delivery to clients
- WebSocket command handling
"""

import pytest
from fastapi.testclient import TestClient

from server import app, manager


@pytest.fixture
def client():
    manager.economy = None
    manager.active_websocket = None
    manager.loop_task = None
    return TestClient(app)


class TestRestApi:
    """Test suite for the REST endpoints"""

    def test_state_auto_initializes(self, client):
        response = client.get("/state")

        assert response.status_code == 200
        state = response.json()
        assert state["time"] == 0.0
        assert state["running"] is False
        assert len(state["countries"]) == 8
        assert state["outcome"] is None
        assert "history" in state

    def test_state_without_history(self, client):
        state = client.get("/state", params={"history": False}).json()

        assert "history" not in state

    def test_setup_with_country(self, client):
        response = client.post("/setup", json={"seed": 5, "term_length": 100, "country": "Japan"})

        assert response.status_code == 200
        state = client.get("/state").json()
        assert state["player_country"] == "Japan"
        assert state["term_length"] == 100

    def test_setup_rejects_unknown_country(self, client):
        response = client.post("/setup", json={"country": "Atlantis"})

        assert response.status_code == 400

    def test_select_player(self, client):
        response = client.post("/player", json={"country": "Brazil"})

        assert response.status_code == 200
        body = response.json()
        assert body["player_country"] == "Brazil"
        assert body["controls"]["fiscal_balance"] == -2.0

    def test_select_unknown_player(self, client):
        response = client.post("/player", json={"country": "Atlantis"})

        assert response.status_code == 404
        assert client.get("/state").json()["player_country"] is None

    def test_controls_require_player(self, client):
        response = client.post("/controls", json={"tariff_level": 10})

        assert response.status_code == 400

    def test_controls_convert_basis_points(self, client):
        client.post("/player", json={"country": "India"})

        response = client.post("/controls", json={"rate_override_bps": 150, "fiscal_balance": -3.5, "tariff_level": 12})

        assert response.status_code == 200
        controls = response.json()
        assert abs(controls["rate_override"] - 1.5) < 1e-12
        assert controls["fiscal_balance"] == -3.5
        assert controls["tariff_level"] == 12.0

    def test_controls_out_of_bounds(self, client):
        client.post("/player", json={"country": "India"})

        assert client.post("/controls", json={"rate_override_bps": 600}).status_code == 422
        assert client.post("/controls", json={"fiscal_balance": 7.0}).status_code == 422
        assert client.post("/controls", json={"tariff_level": -1}).status_code == 422

    def test_speed_is_clamped(self, client):
        assert client.post("/speed", json={"speed": 25}).json()["speed"] == 10.0
        assert client.post("/speed", json={"speed": 0}).status_code == 422

    def test_start_and_pause(self, client):
        assert client.post("/start").json()["running"] is True
        assert client.post("/pause").json()["running"] is False

    def test_history_endpoint(self, client):
        response = client.get("/history/China")

        assert response.status_code == 200
        assert list(response.json()["countries"]) == ["China"]
        assert client.get("/history/Atlantis").status_code == 404

    def test_outcome_delivered_once(self, client):
        client.post("/setup", json={"seed": 1, "country": "Russia"})
        economy = manager.economy
        economy.countries["Russia"].growth = -10.0
        economy.reputation = 0.0
        economy.start()
        economy.update(0.05)

        first = client.get("/state").json()["outcome"]
        second = client.get("/state").json()["outcome"]

        assert first is not None
        assert first["won"] is False
        assert second is None
        assert client.post("/start").status_code == 400

    def test_reset(self, client):
        client.post("/setup", json={"country": "China"})
        manager.economy.start()
        manager.economy.update(0.05)

        body = client.post("/reset").json()

        assert body["time"] == 0.0
        assert client.get("/state").json()["player_country"] is None


class TestWebSocket:
    """Test suite for websocket commands"""

    def test_setup_and_select(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"command": "SETUP", "config": {"seed": 3}})
            assert ws.receive_json() == {"type": "SETUP_COMPLETE"}

            ws.send_json({"command": "SELECT_COUNTRY", "country": "Euro Area"})
            assert ws.receive_json() == {"type": "PLAYER", "player_country": "Euro Area"}

            ws.send_json({"command": "CONTROLS", "controls": {"tariff_level": 8}})
            reply = ws.receive_json()
            assert reply["type"] == "CONTROLS"
            assert reply["controls"]["tariff_level"] == 8.0

            ws.send_json({"command": "STATE"})
            reply = ws.receive_json()
            assert reply["type"] == "STATE"
            assert reply["state"]["player_country"] == "Euro Area"

    def test_errors_are_reported(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"command": "SELECT_COUNTRY", "country": "Atlantis"})
            assert "error" in ws.receive_json()

            ws.send_json({"command": "CONTROLS", "controls": {"tariff_level": 80}})
            assert "error" in ws.receive_json()

            ws.send_json({"command": "BOGUS"})
            assert "error" in ws.receive_json()

            ws.send_json({"command": "SPEED", "speed": 3})
            assert ws.receive_json() == {"type": "SPEED", "speed": 3.0}
