"""OAuth2 refresh-token exchange for directory access tokens."""

from __future__ import annotations

import logging

import httpx

from .config import DEFAULT_TOKEN_ENDPOINT, Credentials
from .models import AccessToken

logger = logging.getLogger("workspace_purge.tokens")


class AuthError(RuntimeError):
    """Raised when the token endpoint does not hand out an access token."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class TokenProvider:
    """Exchange the long-lived refresh token for a bearer access token.

    Tokens are not cached: every call performs a fresh exchange.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        client: httpx.Client,
        token_endpoint: str = DEFAULT_TOKEN_ENDPOINT,
    ) -> None:
        self._credentials = credentials
        self._client = client
        self._token_endpoint = token_endpoint

    def fetch_access_token(self) -> AccessToken:
        form = {
            "client_id": self._credentials.client_id,
            "client_secret": self._credentials.client_secret,
            "refresh_token": self._credentials.refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            response = self._client.post(self._token_endpoint, data=form)
        except httpx.RequestError as exc:
            raise AuthError(f"Failed to contact token endpoint: {exc}") from exc

        if not response.is_success:
            logger.warning("Token exchange failed with status %s", response.status_code)
            raise AuthError(response.text, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthError("Token endpoint returned an invalid JSON response") from exc

        if not isinstance(payload, dict):
            raise AuthError("Token endpoint returned an unexpected response payload")

        value = payload.get("access_token")
        if not isinstance(value, str) or not value:
            raise AuthError("Token endpoint response did not include an access_token")

        expires_in = payload.get("expires_in")
        try:
            expires = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires = None

        return AccessToken(
            value=value,
            expires_in=expires,
            token_type=str(payload.get("token_type") or "Bearer"),
        )


__all__ = ["AuthError", "TokenProvider"]
