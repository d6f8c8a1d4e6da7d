from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from workspace_purge.config import Credentials
from workspace_purge.tokens import AuthError, TokenProvider

CREDENTIALS = Credentials(client_id="client-id", client_secret="client-secret", refresh_token="refresh-token")
TOKEN_URL = "https://oauth.example.test/token"


def _provider(handler) -> TokenProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TokenProvider(CREDENTIALS, client=client, token_endpoint=TOKEN_URL)


def test_fetch_access_token_posts_refresh_grant() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["content_type"] = request.headers["content-type"]
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"access_token": "ya29.token", "expires_in": 3599, "token_type": "Bearer"})

    token = _provider(handler).fetch_access_token()

    assert token.value == "ya29.token"
    assert token.expires_in == 3599
    assert token.authorization_header() == {"Authorization": "Bearer ya29.token"}
    assert captured["method"] == "POST"
    assert captured["url"] == TOKEN_URL
    assert captured["content_type"] == "application/x-www-form-urlencoded"
    assert captured["form"] == {
        "client_id": ["client-id"],
        "client_secret": ["client-secret"],
        "refresh_token": ["refresh-token"],
        "grant_type": ["refresh_token"],
    }


def test_non_success_status_raises_with_body_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text='{"error": "invalid_grant"}')

    with pytest.raises(AuthError) as excinfo:
        _provider(handler).fetch_access_token()

    assert excinfo.value.status_code == 400
    assert "invalid_grant" in excinfo.value.detail


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"token_type": "Bearer"}),
        httpx.Response(200, json={"access_token": ""}),
        httpx.Response(200, json=["access_token"]),
    ],
)
def test_unusable_success_payload_raises(response: httpx.Response) -> None:
    with pytest.raises(AuthError):
        _provider(lambda request: response).fetch_access_token()


def test_transport_failure_raises_auth_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthError, match="connection refused"):
        _provider(handler).fetch_access_token()


def test_secrets_are_hidden_from_repr() -> None:
    assert "client-secret" not in repr(CREDENTIALS)
    assert "refresh-token" not in repr(CREDENTIALS)
