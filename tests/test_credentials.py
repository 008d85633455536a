import pytest
import requests

from amazon_ads import config
from amazon_ads.credentials import resolve_credentials, retrieve_platform_tokens
from amazon_ads.errors import CredentialError, ValidationError
from conftest import make_response


@pytest.fixture
def backend(monkeypatch):
    """Replace the token backend with queued responses."""
    calls = []
    responses = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr("amazon_ads.credentials.requests.post", fake_post)
    return calls, responses


def test_session_token_exchange(backend):
    calls, responses = backend
    responses.append(make_response(200, {
        "success": True,
        "tokens": {"access_token": "at", "client_id": "cid", "profile_id": 42},
    }))

    creds = resolve_credentials({"sessionToken": "sess"})

    assert creds.access_token == "at"
    assert creds.client_id == "cid"
    assert creds.profile_id == "42"
    assert calls[0]["url"] == config.TOKEN_ENDPOINT
    assert calls[0]["json"] == {"sessionToken": "sess", "platform": "amazon_ads"}


def test_session_profile_falls_back_to_caller(backend):
    _, responses = backend
    responses.append(make_response(200, {"success": True, "tokens": {"access_token": "at", "client_id": "cid"}}))

    creds = resolve_credentials({"sessionToken": "sess", "profile_id": "7"})
    assert creds.profile_id == "7"


def test_unknown_session(backend):
    _, responses = backend
    responses.append(make_response(404, {"error": "not found"}))

    with pytest.raises(CredentialError) as exc:
        retrieve_platform_tokens({"sessionToken": "sess"})
    assert exc.value.http_status == 404
    assert "Session not found" in exc.value.message


def test_bad_session_token(backend):
    _, responses = backend
    responses.append(make_response(400, {"error": "malformed token"}))

    with pytest.raises(CredentialError) as exc:
        retrieve_platform_tokens({"sessionToken": "sess"})
    assert exc.value.message == "Invalid session token or platform: malformed token"


def test_backend_unreachable(backend):
    _, responses = backend
    responses.append(requests.exceptions.ConnectTimeout("timed out"))

    with pytest.raises(CredentialError):
        retrieve_platform_tokens({"sessionToken": "sess"})


def test_backend_reports_failure(backend):
    _, responses = backend
    responses.append(make_response(200, {"success": False, "error": "revoked"}))

    with pytest.raises(CredentialError) as exc:
        retrieve_platform_tokens({"sessionToken": "sess"})
    assert exc.value.message == "revoked"


def test_no_access_token_in_backend_reply(backend):
    _, responses = backend
    responses.append(make_response(200, {"success": True, "tokens": {}}))

    with pytest.raises(CredentialError):
        retrieve_platform_tokens({"sessionToken": "sess"})


def test_legacy_credentials(backend):
    calls, _ = backend
    creds = resolve_credentials({"access_token": "at", "client_id": "cid", "profile_id": 99})
    assert creds.profile_id == "99"
    assert calls == []


@pytest.mark.parametrize("user_credentials", [
    None,
    {},
    {"access_token": "at"},
    {"client_id": "cid"},
])
def test_incomplete_credentials(user_credentials):
    with pytest.raises(ValidationError):
        resolve_credentials(user_credentials)
