import json

import pytest
from fastapi.testclient import TestClient

import app.api as api_module
from app import chat
from app.routes import slack as slack_routes
from core.config import Settings, get_settings
from core.platforms import Platform

TOKEN = "verification-token"
FAKE_SLACK = object()


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def _recorder(name):
        async def _record(*args):
            recorded.append((name, args))

        return _record

    for name in ("send_categories", "flip_category_selection_slack", "open_keywords_dialog", "submit_keywords"):
        monkeypatch.setattr(chat, name, _recorder(name))

    api_module.app.dependency_overrides[get_settings] = lambda: Settings(slack_verification_token=TOKEN)
    api_module.app.dependency_overrides[slack_routes.get_slack_client] = lambda: FAKE_SLACK
    yield recorded
    api_module.app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(api_module.app)


def test_categories_command_schedules_picker(client, calls):
    resp = client.post("/categories/guru", data={"token": TOKEN, "channel_id": "C1"})

    assert resp.status_code == 200
    assert calls == [("send_categories", (FAKE_SLACK, Platform.GURU, "C1"))]


def test_bad_token_is_forbidden(client, calls):
    resp = client.post("/categories/guru", data={"token": "nope"})

    assert resp.status_code == 403
    assert resp.text == "Access forbidden"
    assert calls == []


def test_unknown_platform_is_rejected(client, calls):
    resp = client.post("/categories/upwork", data={"token": TOKEN})

    assert resp.status_code == 404
    assert "upwork" in resp.text
    assert calls == []


def test_keywords_command_opens_dialog(client, calls):
    resp = client.post("/keywords/Freelancer", data={"token": TOKEN, "trigger_id": "trig-1"})

    assert resp.status_code == 200
    assert calls == [("open_keywords_dialog", (FAKE_SLACK, Platform.FREELANCER, "trig-1"))]


def test_category_button_flips_selection(client, calls):
    payload = {
        "token": TOKEN,
        "callback_id": "guru_category",
        "channel": {"id": "C1"},
        "original_message": {"ts": "1700000000.0001"},
        "actions": [{"name": "Programming", "value": "programming-development"}],
    }
    resp = client.post("/action", data={"payload": json.dumps(payload)})

    assert resp.status_code == 200
    assert calls == [
        (
            "flip_category_selection_slack",
            (FAKE_SLACK, Platform.GURU, "C1", "1700000000.0001", "programming-development"),
        )
    ]


def test_keywords_submission_replaces_keywords(client, calls):
    payload = {
        "token": TOKEN,
        "callback_id": "freelancer_keywords",
        "channel": {"id": "C2"},
        "submission": {"keywords": "python, scraping"},
    }
    resp = client.post("/action", data={"payload": json.dumps(payload)})

    assert resp.status_code == 200
    assert calls == [("submit_keywords", (FAKE_SLACK, Platform.FREELANCER, "python, scraping", "C2"))]


def test_action_with_bad_token_is_forbidden(client, calls):
    payload = {"token": "nope", "callback_id": "guru_category", "actions": [{"value": "x"}]}
    resp = client.post("/action", data={"payload": json.dumps(payload)})

    assert resp.status_code == 403
    assert calls == []


def test_action_with_invalid_json(client, calls):
    resp = client.post("/action", data={"payload": "{not json"})
    assert resp.status_code == 400


def test_unknown_callback(client, calls):
    payload = {"token": TOKEN, "callback_id": "guru_something"}
    resp = client.post("/action", data={"payload": json.dumps(payload)})
    assert resp.status_code == 400
    assert calls == []


@pytest.mark.parametrize("payload", ["[]", '"text"', "42"])
def test_action_payload_must_be_an_object(client, calls, payload):
    resp = client.post("/action", data={"payload": payload})
    assert resp.status_code == 400
    assert calls == []
