from __future__ import annotations

import pytest

from production_tracker.main import create_app
from production_tracker.storage.backend import InMemoryBackend


@pytest.fixture
def app():
    app = create_app("production_tracker.config.testing", backend=InMemoryBackend())
    yield app
    app.extensions["production_tracker"].close()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username="admin", password="password123"):
    resp = client.post("/api/session", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["user"]


def test_login_flow(client):
    assert client.get("/api/session").status_code == 401

    bad = client.post("/api/session", json={"username": "admin", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_json() == {"ok": False, "error": "Invalid username or password"}

    user = _login(client)
    assert user["role"] == "admin"
    assert "password" not in user
    assert client.get("/api/session").get_json()["user"]["username"] == "admin"

    assert client.delete("/api/session").status_code == 200
    assert client.get("/api/session").status_code == 401


def test_endpoints_require_session(client):
    assert client.get("/api/production").status_code == 401
    assert client.post("/api/production/plans", json={}).status_code == 401
    assert client.get("/api/logs").status_code == 401


def test_plan_actual_delete_round_trip(client):
    _login(client, "planner")
    created = client.post(
        "/api/production/plans",
        json={
            "date": "2026-02-10",
            "category": "Healthcare",
            "process": "Mixing",
            "productName": "vitamin c",
            "planQuantity": 800,
            "unit": "KG",
        },
    )
    assert created.status_code == 201
    entry = created.get_json()["entry"]
    assert entry["productName"] == "VITAMIN C"

    _login(client, "operator")
    actual = client.post(f"/api/production/{entry['id']}/actual", json={"actualQuantity": 760, "manpower": 4})
    assert actual.get_json()["entry"]["actualQuantity"] == 760

    listed = client.get("/api/production?date=2026-02-10").get_json()["entries"]
    assert [e["id"] for e in listed] == [entry["id"]]

    forbidden = client.delete(f"/api/production/{entry['id']}")
    assert forbidden.status_code == 403

    _login(client, "manager")
    edited = client.put(f"/api/production/{entry['id']}", json={"planQuantity": 900})
    assert edited.get_json()["entry"]["planQuantity"] == 900

    deleted = client.delete(f"/api/production/{entry['id']}").get_json()
    assert deleted["deleted"]["id"] == entry["id"]
    assert deleted["count"] == 0
    # remote is disabled in testing, so the awaited mirror reports False
    assert deleted["remoteOk"] is False

    actions = [log["action"] for log in client.get("/api/logs").get_json()["logs"]]
    assert actions == ["DELETE_RECORD", "EDIT_RECORD", "RECORD_ACTUAL", "CREATE_PLAN"]


def test_validation_errors_are_400(client):
    _login(client, "planner")
    resp = client.post(
        "/api/production/plans",
        json={"date": "2025-12-25", "category": "Healthcare", "process": "Mixing", "productName": "x", "planQuantity": 1},
    )
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False
    assert "Christmas Day" in resp.get_json()["error"]


def test_off_days_endpoints(client):
    assert len(client.get("/api/off-days").get_json()["offDays"]) == 2

    _login(client, "operator")
    assert client.post("/api/off-days", json={"date": "2026-08-31"}).status_code == 403

    _login(client, "manager")
    created = client.post("/api/off-days", json={"date": "2026-08-31", "description": "Merdeka"})
    assert created.status_code == 201
    assert client.post("/api/off-days", json={"date": "2026-08-31"}).status_code == 400

    od_id = created.get_json()["offDay"]["id"]
    assert client.delete(f"/api/off-days/{od_id}").status_code == 200
    assert len(client.get("/api/off-days").get_json()["offDays"]) == 2


def test_user_management_endpoints(client):
    _login(client, "manager")
    assert client.get("/api/users").status_code == 403

    _login(client)
    created = client.post(
        "/api/users",
        json={"name": "New Op", "username": "newop", "password": "secret1", "role": "operator", "category": "Rocksalt"},
    )
    assert created.status_code == 201
    new_id = created.get_json()["user"]["id"]
    assert "newop" in {u["username"] for u in client.get("/api/users").get_json()["users"]}

    assert client.delete(f"/api/users/{new_id}").status_code == 200
    assert client.delete("/api/users/u1").status_code == 400


def test_password_and_avatar_endpoints(client):
    _login(client, "operator")
    mismatch = client.post(
        "/api/users/me/password",
        json={"currentPassword": "password123", "newPassword": "abcdef", "confirmPassword": "zzzzzz"},
    )
    assert mismatch.status_code == 400

    changed = client.post(
        "/api/users/me/password",
        json={"currentPassword": "password123", "newPassword": "abcdef", "confirmPassword": "abcdef"},
    )
    assert changed.status_code == 200
    _login(client, "operator", "abcdef")

    avatar = client.post("/api/users/me/avatar", json={"avatar": "https://example.com/me.png"})
    assert avatar.get_json()["user"]["avatar"] == "https://example.com/me.png"


def test_analytics_endpoints(client):
    _login(client, "planner")
    client.post(
        "/api/production/plans",
        json={"date": "2026-02-10", "category": "Healthcare", "process": "Filling", "productName": "gel", "planQuantity": 100},
    )

    dashboard = client.get("/api/analytics/dashboard?category=Healthcare&month=2026-02").get_json()["dashboard"]
    assert dashboard["plan"] == 100
    assert dashboard["efficiency"] == 0.0

    processes = client.get("/api/analytics/processes").get_json()
    assert len(processes["metrics"]["processes"]) == 5
    assert processes["trend"][0]["date"] == "2026-02-10"

    monthly = client.get("/api/analytics/monthly").get_json()
    assert monthly["months"][0]["month"] == "2026-02"
    assert monthly["topProducts"][0]["product_name"] == "GEL"

    stats = client.get("/api/analytics/stats").get_json()["stats"]
    assert stats["total_plan"] == 100


def test_sync_and_remote_url_settings(client):
    _login(client)
    report = client.post("/api/sync").get_json()
    assert report["enabled"] is False

    assert client.put("/api/settings/remote-url", json={"url": "http://not-a-script"}).get_json()["enabled"] is False

    saved = client.put("/api/settings/remote-url", json={"url": "https://script.google.com/macros/s/x/exec"})
    assert saved.get_json()["enabled"] is True
    assert client.get("/api/settings/remote-url").get_json()["savedUrl"].endswith("/exec")

    _login(client, "planner")
    assert client.get("/api/settings/remote-url").status_code == 403
