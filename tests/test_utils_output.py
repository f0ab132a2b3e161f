"""Tests for utils/output.py — where sync reports, intents and status records land."""
import json

from dialogflow_bridge.models.intents import ProviderIntent, SyncReport
from dialogflow_bridge.utils.output import (
    OutputFormat,
    print_json,
    render_detection,
    render_fields,
    render_intents,
    render_report,
)


def _report():
    report = SyncReport()
    report.record("list", "projects/p/agent/intents")
    report.record("delete", "projects/p/agent/intents/1", "API error (HTTP 404)")
    report.record("create", "greet")
    return report


def test_print_json_non_serializable_uses_str(capsys):
    from pathlib import Path

    print_json({"path": Path("/tmp/tok.txt")})
    assert json.loads(capsys.readouterr().out) == {"path": "/tmp/tok.txt"}


def test_render_detection_is_verbatim(capsys):
    raw = {"responseId": "r1", "queryResult": {"queryText": "hi", "unknownField": [1, 2]}}
    render_detection(raw)
    assert json.loads(capsys.readouterr().out) == raw


def test_render_report_json_is_summary(capsys):
    render_report(_report(), OutputFormat.JSON)
    summary = json.loads(capsys.readouterr().out)
    assert summary["ok"] is False
    assert summary["created"] == 1
    assert len(summary["outcomes"]) == 3


def test_render_report_table_goes_to_stderr(capsys):
    render_report(_report(), OutputFormat.TABLE)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "greet" in captured.err
    assert "failed" in captured.err
    assert "HTTP 404" in captured.err


def test_render_intents_json_uses_provider_names(capsys):
    intent = ProviderIntent(name="projects/p/agent/intents/1", displayName="greet")
    render_intents([intent], OutputFormat.JSON)
    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["displayName"] == "greet"
    assert rows[0]["name"] == "projects/p/agent/intents/1"


def test_render_intents_empty(capsys):
    render_intents([], OutputFormat.TABLE)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "no intents" in captured.err


def test_render_fields_table(capsys):
    render_fields({"has_token": True, "state": "token_ready"}, OutputFormat.TABLE, title="Token Status")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "token_ready" in captured.err


def test_render_fields_json(capsys):
    render_fields({"status": "authenticated"}, OutputFormat.JSON)
    assert json.loads(capsys.readouterr().out) == {"status": "authenticated"}
