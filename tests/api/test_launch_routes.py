import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from launchpad.api.deps import get_director
from launchpad.main import app
from launchpad.settings import settings

from conftest import Harness

client = TestClient(app)


@pytest.fixture
def h():
    harness = Harness()
    app.dependency_overrides[get_director] = lambda: harness.director
    yield harness
    app.dependency_overrides = {}


def test_health_and_root():
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "ok"


def test_initial_state_is_booting(h):
    res = client.get("/launch/state")
    assert res.status_code == 200
    assert res.json() == {"stage": "BOOTING", "destination": None, "permissionPromptVisible": False}


def test_attribution_event_drives_remote_config(h):
    h.resolved_push()
    res = client.post("/launch/events/attribution", json={
        "payload": {"af_status": "Non-organic", "campaign": "c"},
        "deviceId": "dev-from-host",
    })
    assert res.status_code == 200
    assert res.json()["stage"] == "WEB_EXPERIENCE"
    assert res.json()["destination"] == "https://w"
    assert h.config.requests[0]["af_id"] == "dev-from-host"


def test_attribution_failed_event(h):
    res = client.post("/launch/events/attribution-failed", json={"reason": "sdk_timeout"})
    assert res.json()["stage"] == "CLASSIC_FLOW"


def test_permission_prompt_flow(h):
    res = client.post("/launch/events/attribution", json={"payload": {"af_status": "Non-organic"}})
    assert res.json() == {"stage": "BOOTING", "destination": None, "permissionPromptVisible": True}

    res = client.post("/launch/events/push-permission", json={"allowed": True, "osGranted": False})
    assert res.json()["stage"] == "WEB_EXPERIENCE"
    assert h.store.declined_notifications_permanently is True


def test_deeplink_and_push_opened_events(h):
    res = client.post("/launch/events/deeplink", json={"payload": {"deep_link_value": "x"}})
    assert res.json()["stage"] == "BOOTING"

    res = client.post("/launch/events/push-opened", json={"url": "https://push/target"})
    assert res.status_code == 200
    assert h.store.peek_temp_destination() == "https://push/target"


def test_connectivity_event(h):
    h.store.app_mode = "Remote"
    res = client.post("/launch/events/connectivity", json={"status": "lost"})
    assert res.json()["stage"] == "OFFLINE_SCREEN"


def test_connectivity_event_rejects_unknown_status(h):
    res = client.post("/launch/events/connectivity", json={"status": "flaky"})
    assert res.status_code == 422


def test_push_opened_requires_url(h):
    res = client.post("/launch/events/push-opened", json={"url": ""})
    assert res.status_code == 422


def test_api_key_enforced_when_configured(h):
    with patch.object(settings, "API_KEY", "secret"):
        assert client.get("/launch/state").status_code == 401
        assert client.get("/launch/state", headers={"x-api-key": "secret"}).status_code == 200


def test_cooking_time_endpoint():
    res = client.get("/classic/cooking-time", params={"method": "Boiled", "doneness": "Hard", "size": "XL", "temperature": "Fridge"})
    assert res.status_code == 200
    assert res.json() == {"seconds": 750}

    res = client.get("/classic/cooking-time", params={"size": "XXL"})
    assert res.status_code == 422
