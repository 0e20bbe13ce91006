"""Tests for the campaign HTTP API (FastAPI TestClient)."""

import random

import pytest
from fastapi.testclient import TestClient

from api.deps import CampaignServices
from api.main import create_app
from conftest import RecordingPersistence
from delegate.campaign import ManualClock


@pytest.fixture
def services():
    return CampaignServices(
        persistence=RecordingPersistence(),
        clock=ManualClock(),
        rng=random.Random(3),
        autostart=False,
    )


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as test_client:
        yield test_client


def _start(client, session_id="api-1", **extra):
    body = {"session_id": session_id, "title": "Security Council", "duration_minutes": 30, **extra}
    return client.post("/api/campaigns/start", json=body)


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["campaigns"] == 0


class TestStart:
    def test_start_fills_missing_session_parts(self, client):
        response = _start(client, scenario={"characters": [{"name": "Amb. Lindqvist", "country": "Sweden"}]})
        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == "api-1"
        assert set(data["filled_defaults"]) == {"player_character", "ai_characters", "current_crisis"}
        status = data["status"]
        assert status["is_active"] is True
        assert status["current_phase"] == "Opening Statements"
        assert status["next_action_in_ms"] == 30_000
        assert status["timeline"]["totalDuration"] == 30

    def test_start_keeps_supplied_roster(self, client):
        response = _start(
            client,
            player_character={"id": "player", "name": "Dana", "country": "Chile"},
            ai_characters=[{"id": "ai-0", "name": "Amb. Sato", "voiceId": "voice-sato"}],
            current_crisis={"id": "c1", "title": "Drought", "description": "Rivers are failing."},
        )
        assert response.json()["filled_defaults"] == []

    @pytest.mark.parametrize("duration", [0, -10])
    def test_invalid_duration(self, client, duration):
        response = _start(client, duration_minutes=duration)
        assert response.status_code == 400

    def test_missing_session_id(self, client):
        response = client.post("/api/campaigns/start", json={"duration_minutes": 30})
        assert response.status_code == 422

    def test_duplicate_start_conflicts(self, client):
        _start(client)
        assert _start(client).status_code == 409


class TestReadEndpoints:
    def test_list(self, client):
        _start(client, "api-1")
        _start(client, "api-2")
        campaigns = client.get("/api/campaigns").json()["campaigns"]
        assert {c["session_id"] for c in campaigns} == {"api-1", "api-2"}
        assert all(c["is_active"] for c in campaigns)

    def test_status(self, client):
        _start(client)
        status = client.get("/api/campaigns/api-1/status").json()
        assert status["session_id"] == "api-1"
        assert status["autonomous_actions"] == 0
        assert status["time_remaining"] == 30
        assert status["recent_failures"] == []

    def test_log(self, client):
        _start(client)
        data = client.get("/api/campaigns/api-1/log").json()
        assert data["total"] == 1
        [entry] = data["entries"]
        assert entry["title"] == "CAMPAIGN INITIATED"
        assert entry["type"] == "system_message"

    def test_log_limit_validated(self, client):
        _start(client)
        assert client.get("/api/campaigns/api-1/log", params={"limit": 0}).status_code == 422

    @pytest.mark.parametrize("path", ["/api/campaigns/nope/status", "/api/campaigns/nope/log"])
    def test_unknown_campaign(self, client, path):
        assert client.get(path).status_code == 404


class TestStop:
    def test_stop(self, client):
        _start(client)
        response = client.post("/api/campaigns/api-1/stop")
        assert response.status_code == 200
        assert response.json()["stopped"] is True
        assert response.json()["status"]["is_active"] is False

        assert client.post("/api/campaigns/api-1/stop").status_code == 200
        assert client.get("/api/campaigns/api-1/status").json()["is_active"] is False

    def test_restart_after_stop(self, client):
        _start(client)
        client.post("/api/campaigns/api-1/stop")
        assert _start(client).status_code == 200

    def test_stop_unknown(self, client):
        assert client.post("/api/campaigns/nope/stop").status_code == 404
