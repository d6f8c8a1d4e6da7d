"""Client for the Google Workspace Directory ``users`` resource."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import DEFAULT_DIRECTORY_URL
from .models import AccessToken, DeleteOutcome

logger = logging.getLogger("workspace_purge.directory")

PAGE_SIZE = 500
DEFAULT_CUSTOMER = "my_customer"


class ListError(RuntimeError):
    """Raised when a page of the user listing cannot be fetched."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class DeleteFailure(RuntimeError):
    """A single account could not be deleted."""

    def __init__(self, email: str, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Failed to delete {email}: {detail}")
        self.email = email
        self.detail = detail
        self.status_code = status_code


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Directory base URL must not be empty")
    return cleaned.rstrip("/")


class DirectoryClient:
    """List and delete directory accounts using a bearer access token."""

    def __init__(self, client: httpx.Client, *, base_url: str = DEFAULT_DIRECTORY_URL) -> None:
        self._client = client
        self._base_url = _normalize_base_url(base_url)

    def _users_url(self, email: Optional[str] = None) -> str:
        if email is None:
            return f"{self._base_url}/users"
        return f"{self._base_url}/users/{quote(email, safe='')}"

    def list_all_users(self, access_token: AccessToken, domain: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return every user record across all pages.

        The whole listing fails with :class:`ListError` if any page fails; no
        partial result is returned.
        """
        users: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        pages = 0

        while True:
            params: Dict[str, str] = {"maxResults": str(PAGE_SIZE)}
            if domain:
                params["domain"] = domain
            else:
                params["customer"] = DEFAULT_CUSTOMER
            if page_token:
                params["pageToken"] = page_token

            try:
                response = self._client.get(
                    self._users_url(),
                    params=params,
                    headers=access_token.authorization_header(),
                )
            except httpx.RequestError as exc:
                raise ListError(f"Failed to contact directory API: {exc}") from exc

            if not response.is_success:
                logger.warning(
                    "Directory listing failed on page %s with status %s",
                    pages + 1,
                    response.status_code,
                )
                raise ListError(response.text, status_code=response.status_code)

            try:
                payload = response.json()
            except ValueError as exc:
                raise ListError("Directory API returned an invalid JSON response") from exc
            if not isinstance(payload, dict):
                raise ListError("Directory API returned an unexpected response payload")

            pages += 1
            users.extend(payload.get("users") or [])

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        logger.info("Fetched %s user(s) across %s page(s)", len(users), pages)
        return users

    def delete_user(self, access_token: AccessToken, email: str) -> DeleteOutcome:
        """Delete one account. Failures are reported, never raised."""
        try:
            response = self._client.delete(
                self._users_url(email),
                headers=access_token.authorization_header(),
            )
        except httpx.RequestError as exc:
            logger.warning("Could not reach directory API to delete %s: %s", email, exc)
            return DeleteOutcome(email=email, ok=False, status_code=None, detail=str(exc))

        if response.is_success:
            logger.info("Deleted directory user %s", email)
            return DeleteOutcome(email=email, ok=True, status_code=response.status_code)

        logger.warning("Deleting %s failed with status %s", email, response.status_code)
        return DeleteOutcome(
            email=email,
            ok=False,
            status_code=response.status_code,
            detail=response.text,
        )


__all__ = ["DeleteFailure", "DirectoryClient", "ListError", "PAGE_SIZE"]
