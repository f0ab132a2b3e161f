"""Tests for session.py — exposed operations wired over real store and flow."""
from unittest.mock import MagicMock

import httpx
import pytest

from dialogflow_bridge.session import BridgeSession
from dialogflow_bridge.utils.errors import StorageUnavailable, ValidationFailure


def _resp(status_code=200, json_data=None):
    r = MagicMock(spec=httpx.Response)
    r.status_code = status_code
    r.text = ""
    r.json.return_value = json_data if json_data is not None else {}
    return r


@pytest.fixture
def session(fake_config):
    s = BridgeSession.from_config(fake_config)
    s._auth._http = MagicMock()
    s._client._http = MagicMock()
    return s


def test_no_token_routes_to_authorization_url(session):
    with pytest.raises(StorageUnavailable):
        session.authorized_token()
    assert session.get_authorization_url().startswith("https://accounts.google.com/o/oauth2/v2/auth?")


def test_valid_persisted_token_proceeds_without_reauthorization(session):
    session.store.save_token("persisted")
    session._auth._http.get.return_value = _resp(200)
    session._client._http.request.return_value = _resp(200, {"queryResult": {"queryText": "hi"}})

    result = session.detect("hi")

    assert result == {"queryResult": {"queryText": "hi"}}
    session._auth._http.post.assert_not_called()
    headers = session._client._http.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer persisted"


def test_rejected_token_raises_validation_failure(session):
    session.store.save_token("stale")
    session._auth._http.get.return_value = _resp(401)

    with pytest.raises(ValidationFailure):
        session.sync_intents({"a": {"intent": "greet", "training_utterances": ["hi"]}})
    session._client._http.request.assert_not_called()


def test_exchange_then_calls_use_new_token(session):
    session._auth._http.post.return_value = _resp(200, {"access_token": "fresh"})
    session._auth._http.get.return_value = _resp(200)
    session._client._http.request.return_value = _resp(200, {})

    session.exchange_code("code")
    session.detect("hi")

    headers = session._client._http.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer fresh"


def test_is_token_valid_defaults_to_current_token(session):
    assert session.is_token_valid() is False
    session._auth._http.get.assert_not_called()

    session.store.save_token("tok")
    session._auth._http.get.return_value = _resp(200)
    assert session.is_token_valid() is True


def test_is_token_valid_reads_token_persisted_earlier(fake_config, session):
    session.store.save_token("from-disk")
    fresh = BridgeSession.from_config(fake_config)
    fresh._auth._http = MagicMock()
    fresh._auth._http.get.return_value = _resp(200)

    assert fresh.store.current_token is None
    assert fresh.is_token_valid() is True
    assert fresh._auth._http.get.call_args.kwargs["params"] == {"access_token": "from-disk"}


def test_sync_with_explicit_token_skips_probe(session):
    session._client._http.request.return_value = _resp(200, {"intents": []})

    report = session.sync_intents({"a": {"intent": "greet"}}, token="given")

    session._auth._http.get.assert_not_called()
    assert report.created == ["greet"]


def test_sync_uses_credentials_project(session):
    session._client._http.request.return_value = _resp(200, {"intents": []})
    session.sync_intents({}, token="t")

    urls = [c.kwargs["url"] for c in session._client._http.request.call_args_list]
    assert urls[0] == "https://dialogflow.googleapis.com/v2/projects/test-project/agent"


def test_sync_lenient_override(session):
    def request(method, url, **kwargs):
        if url.endswith("/intents") and method == "GET":
            return _resp(500, {"error": {"message": "backend"}})
        return _resp(200, {})
    session._client._http.request.side_effect = request

    report = session.sync_intents({"a": {"intent": "greet"}}, abort_on_list_failure=False, token="t")
    assert report.created == ["greet"]


def test_close_closes_both_clients(session):
    session.close()
    session._client._http.close.assert_called_once()
    session._auth._http.close.assert_called_once()
