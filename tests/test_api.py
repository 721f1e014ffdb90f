"""
Tests for the HTTP and WebSocket surface.

The default category table has 15 concepts; requests are attributed to an
address through X-Forwarded-For (trust_proxy_headers is on in the fixture).
"""

import logging

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


# =============================================================================
# DRAW / STATUS
# =============================================================================

class TestDrawEndpoint:

    def test_draw_assigns_concept(self, client, from_ip):
        response = client.get("/draw", headers=from_ip("10.0.0.1"))
        assert response.status_code == 200
        body = response.json()
        assert body["concept"] in {"Matak", "Azul", "Metan", "Kinur", "Mean"}
        assert body["color"].startswith("#")
        assert body["remaining"] == 14
        assert body["timestamp"]

    def test_second_draw_is_forbidden(self, client, from_ip):
        client.get("/draw", headers=from_ip("10.0.0.1"))
        response = client.get("/draw", headers=from_ip("10.0.0.1"))
        assert response.status_code == 403
        assert response.json()["detail"] == {
            "error": "You have already drawn a concept",
            "remaining": 14,
        }

    def test_invalid_address(self, client, from_ip):
        response = client.get("/draw", headers=from_ip("2001:db8::1"))
        assert response.status_code == 400
        assert response.json()["detail"] == "IPv4 address required"

    def test_without_forwarded_header_testclient_host_is_rejected(self, client):
        assert client.get("/draw").status_code == 400

    def test_exhausted_pool(self, client, from_ip):
        for i in range(15):
            assert client.get("/draw", headers=from_ip(f"10.0.1.{i}")).status_code == 200

        response = client.get("/draw", headers=from_ip("10.0.2.1"))
        assert response.status_code == 200
        assert response.json()["concept"] is None
        assert response.json()["remaining"] == 0


class TestStatusEndpoint:

    def test_status_before_draw(self, client, from_ip):
        response = client.get("/status", headers=from_ip("10.0.0.1"))
        assert response.status_code == 200
        assert response.json()["drawn"] is False
        assert response.json()["remaining"] == 15

    def test_status_after_draw(self, client, from_ip):
        drawn = client.get("/draw", headers=from_ip("10.0.0.1")).json()
        body = client.get("/status", headers=from_ip("::ffff:10.0.0.1")).json()
        assert body["drawn"] is True
        assert body["concept"] == drawn["concept"]
        assert body["timestamp"] == drawn["timestamp"]

    def test_status_invalid_address(self, client, from_ip):
        assert client.get("/status", headers=from_ip("garbage")).status_code == 400


# =============================================================================
# MONITOR
# =============================================================================

class TestMonitor:

    def test_monitor_snapshot(self, client, from_ip):
        client.get("/draw", headers=from_ip("10.0.0.1"))
        body = client.get("/api/monitor").json()

        assert len(body["participants"]) == 1
        assert body["participants"][0]["ip"] == "10.0.0.1"
        stats = body["stats"]
        assert stats["totalParticipants"] == 1
        assert stats["remainingConcepts"] == 14
        assert stats["totalConcepts"] == 15
        assert set(stats["categoryStats"]) == {
            "timor", "entrepreneurship", "youth", "sustainability", "health"
        }
        assert sum(stats["categoryStats"].values()) == 1

    def test_websocket_initial_data_and_live_draw(self, client, from_ip):
        client.get("/draw", headers=from_ip("10.0.0.1"))

        with client.websocket_connect("/ws/monitor") as websocket:
            initial = websocket.receive_json()
            assert initial["event"] == "initialData"
            assert [p["ip"] for p in initial["data"]["participants"]] == ["10.0.0.1"]
            assert initial["data"]["stats"]["remainingConcepts"] == 14

            drawn = client.get("/draw", headers=from_ip("10.0.0.2")).json()

            event = websocket.receive_json()
            assert event["event"] == "participantDraw"
            assert event["data"]["ip"] == "10.0.0.2"
            assert event["data"]["concept"] == drawn["concept"]
            assert event["data"]["remaining"] == 13

    def test_websocket_disconnect_unsubscribes(self, client):
        with client.websocket_connect("/ws/monitor") as websocket:
            websocket.receive_json()
        hub = client.app.state.draw_service.hub
        assert hub.subscriber_count() == 0


# =============================================================================
# SANDBOX
# =============================================================================

class TestSandboxRoutes:

    def test_sandbox_draws_leave_production_pool_alone(self, client, from_ip):
        for _ in range(3):
            response = client.get("/test/draw", headers=from_ip("10.0.0.1"))
            assert response.status_code == 200
            assert response.json()["concept"] is not None

        status = client.get("/status", headers=from_ip("10.0.0.1")).json()
        assert status["drawn"] is False
        assert status["remaining"] == 15

    def test_sandbox_reset(self, client, from_ip):
        client.get("/test/draw", headers=from_ip("10.0.0.1"))
        response = client.post("/test/reset")
        assert response.status_code == 200
        assert response.json() == {"remaining": 15}

    def test_sandbox_routes_can_be_disabled(self, tmp_path):
        settings = Settings(enable_test_routes=False, static_dir=str(tmp_path))
        with TestClient(create_app(settings)) as test_client:
            assert test_client.get("/test/draw").status_code == 404


# =============================================================================
# QR / HEALTH / CONFIG
# =============================================================================

class TestMisc:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_server_qr_served(self, client):
        response = client.get("/qr")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"

    def test_wifi_qr_unavailable_without_credentials(self, client):
        assert client.get("/wifi").status_code == 404

    def test_categories_file(self, tmp_path, small_table, from_ip):
        import json

        path = tmp_path / "categories.json"
        path.write_text(json.dumps(small_table), encoding="utf-8")
        settings = Settings(
            categories_file=str(path),
            trust_proxy_headers=True,
            static_dir=str(tmp_path / "public"),
        )
        with TestClient(create_app(settings)) as test_client:
            body = test_client.get("/api/monitor").json()
            assert body["stats"]["totalConcepts"] == 3
            assert body["stats"]["categoryStats"] == {"A": 0, "B": 0}

    def test_forwarded_header_ignored_when_not_trusted(self, tmp_path, from_ip):
        settings = Settings(trust_proxy_headers=False, static_dir=str(tmp_path))
        with TestClient(create_app(settings)) as test_client:
            response = test_client.get("/draw", headers=from_ip("10.0.0.1"))
            assert response.status_code == 400


@pytest.mark.parametrize("path", ["/", "/health"])
def test_liveness_routes(client, path):
    assert client.get(path).status_code == 200


def test_startup_log_points_at_existing_monitor_routes(settings, caplog):
    caplog.set_level(logging.INFO, logger="main")
    app = create_app(settings)
    with TestClient(app) as test_client:
        messages = [r.getMessage() for r in caplog.records if r.name == "main"]
        advertised = [m for m in messages if "Monitor" in m]
        assert advertised
        assert "/api/monitor" in advertised[0]
        assert test_client.get("/api/monitor").status_code == 200
        assert test_client.get("/monitor").status_code == 404


def test_unreadable_categories_file_fails_app_creation(tmp_path):
    from core.exceptions import InvalidCategoryTable

    settings = Settings(categories_file=str(tmp_path), static_dir=str(tmp_path / "public"))
    with pytest.raises(InvalidCategoryTable):
        create_app(settings)
