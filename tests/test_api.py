#!/usr/bin/env python3
"""
API Tests

HTTP surface of the discovery server, exercised in-process with FastAPI's
TestClient against the sample data in data/profiles.json.

Endpoints:
- GET  /api/discovery/{user_id}?mode=&limit=
- POST /api/swipes, POST /api/swipes/undo, GET /api/swipes/{user_id}/history
- GET  /, /api/health, /api/config/ranking

Run:
----
    pytest tests/test_api.py -v
"""

import pytest
from conftest import DATA_DIR, NOW
from fastapi.testclient import TestClient

import server.state
from server.app import app
from server.config import ServerConfig
from server.services import DiscoveryService
from server.state import AppState

PROFILES_PATH = DATA_DIR / "profiles.json"


@pytest.fixture
def client(monkeypatch):
    state = AppState(ServerConfig(profiles_json_path=PROFILES_PATH))
    state.discovery = DiscoveryService(
        state.profile_store,
        state.interaction_store,
        geocoder=state.geocoder,
        config=state.ranking_config,
        events=state.events,
        clock=lambda: NOW,
    )
    monkeypatch.setattr(server.state, "_state", state)
    return TestClient(app)


def _swipe(client, user_id, target_id, action="like", mode="MEET"):
    return client.post(
        "/api/swipes",
        json={"user_id": user_id, "target_id": target_id, "action": action, "mode": mode},
    )


class TestRootAndHealth:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["name"] == "Discovery Ranking API"
        assert body["stores"]["profiles"] == "JsonProfileStore"

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ranking_config(self, client):
        body = client.get("/api/config/ranking").json()
        assert body["hybrid_weights"] == {"content": 0.4, "collaborative": 0.35, "context": 0.25}
        assert body["source"] == "defaults"


class TestDiscoveryEndpoint:
    def test_ranked_candidates(self, client):
        response = client.get("/api/discovery/1")
        assert response.status_code == 200
        body = response.json()
        ids = [c["candidate_id"] for c in body["candidates"]]
        assert set(ids) == {2, 3, 7}
        assert body["returned_count"] == 3
        assert body["filter_stats"]["excluded"]["deal_breakers"] == 1
        assert [c["queue_position"] for c in body["candidates"]] == [0, 1, 2]
        for card in body["candidates"]:
            assert 0.0 <= card["final_score"] <= 1.0
            assert set(card["breakdown"]) >= {"content", "collaborative", "context"}

    def test_limit_and_mode(self, client):
        body = client.get("/api/discovery/1", params={"mode": "SUITE", "limit": 2}).json()
        assert body["mode"] == "SUITE"
        assert len(body["candidates"]) == 2

    def test_unknown_user(self, client):
        assert client.get("/api/discovery/999").status_code == 404

    def test_invalid_mode(self, client):
        assert client.get("/api/discovery/1", params={"mode": "PARTY"}).status_code == 422


class TestSwipeEndpoints:
    def test_swipe_then_excluded(self, client):
        response = _swipe(client, 1, 3, "dislike")
        assert response.status_code == 200
        assert response.json()["matched"] is False
        ids = [c["candidate_id"] for c in client.get("/api/discovery/1").json()["candidates"]]
        assert 3 not in ids

    def test_mutual_like_matches(self, client):
        _swipe(client, 2, 1)
        body = _swipe(client, 1, 2, "star").json()
        assert body["matched"] is True
        assert body["match"]["user_a"] == 1
        assert body["match"]["user_b"] == 2

    def test_undo(self, client):
        _swipe(client, 2, 1)
        _swipe(client, 1, 2)
        response = client.post("/api/swipes/undo", json={"user_id": 1, "mode": "MEET"})
        assert response.status_code == 200
        body = response.json()
        assert body["undone_target_id"] == 2
        assert body["undone_action"] == "like"
        assert body["match_retracted"] is True

    def test_undo_empty_is_conflict(self, client):
        response = client.post("/api/swipes/undo", json={"user_id": 1, "mode": "HEAT"})
        assert response.status_code == 409

    def test_self_swipe_is_bad_request(self, client):
        assert _swipe(client, 1, 1).status_code == 400

    def test_unknown_target(self, client):
        assert _swipe(client, 1, 999).status_code == 404

    def test_invalid_action(self, client):
        assert _swipe(client, 1, 2, "superlike").status_code == 422

    def test_history(self, client):
        _swipe(client, 1, 2)
        _swipe(client, 1, 3, "dislike")
        body = client.get("/api/swipes/1/history", params={"mode": "MEET"}).json()
        assert [e["target_id"] for e in body["entries"]] == [3, 2]
        assert body["entries"][0]["action"] == "dislike"
