"""Tests for Pydantic models — alias mapping, defaults, report aggregation."""
from dialogflow_bridge.models.auth import TokenResponse, TokenState, TokenStatus
from dialogflow_bridge.models.intents import IntentInput, ProviderIntent, SyncReport


# ── Intent models ────────────────────────────────────────────────────

def test_intent_input_default_utterances():
    assert IntentInput(intent="greet").training_utterances == []


def test_provider_intent_alias_dump():
    dumped = ProviderIntent(displayName="greet").model_dump(by_alias=True, exclude_none=True)
    assert "displayName" in dumped
    assert "display_name" not in dumped
    assert dumped["webhookState"] == 0


def test_provider_intent_populate_by_name():
    assert ProviderIntent(display_name="greet").display_name == "greet"


def test_provider_intent_keeps_unknown_fields():
    intent = ProviderIntent.model_validate({
        "name": "projects/p/agent/intents/1",
        "displayName": "greet",
        "priority": 500000,
        "trainingPhrases": [{"name": "tp1", "type": "EXAMPLE", "parts": [{"text": "hi"}]}],
    })
    dumped = intent.model_dump(by_alias=True)
    assert dumped["priority"] == 500000
    assert dumped["trainingPhrases"][0]["name"] == "tp1"
    assert dumped["trainingPhrases"][0]["type"] == "EXAMPLE"


def test_provider_intent_enum_webhook_state():
    intent = ProviderIntent.model_validate({"displayName": "x", "webhookState": "WEBHOOK_STATE_ENABLED"})
    assert intent.webhook_state == "WEBHOOK_STATE_ENABLED"


# ── SyncReport ───────────────────────────────────────────────────────

def test_report_empty_is_ok():
    report = SyncReport()
    assert report.ok
    assert report.failed == []


def test_report_aggregates():
    report = SyncReport()
    report.record("delete", "projects/p/agent/intents/1")
    report.record("delete", "projects/p/agent/intents/2", "API error (HTTP 404)")
    report.record("create", "greet")

    assert report.deleted == ["projects/p/agent/intents/1"]
    assert report.created == ["greet"]
    assert [o.target for o in report.failed] == ["projects/p/agent/intents/2"]
    assert report.ok is False


def test_report_summary():
    report = SyncReport()
    report.record("create", "greet")
    summary = report.summary()
    assert summary["ok"] is True
    assert summary["created"] == 1
    assert summary["outcomes"] == [{"action": "create", "target": "greet", "ok": True, "error": None}]


# ── Auth models ──────────────────────────────────────────────────────

def test_token_response_minimal():
    t = TokenResponse(access_token="ya29.x")
    assert t.token_type == "Bearer"
    assert t.expires_in is None


def test_token_response_ignores_extra():
    t = TokenResponse(access_token="ya29.x", id_token="ignored")
    assert not hasattr(t, "id_token")


def test_token_status_state_value():
    status = TokenStatus(has_token=False, is_valid=False, state=TokenState.NO_TOKEN)
    assert status.model_dump(mode="json")["state"] == "no_token"
