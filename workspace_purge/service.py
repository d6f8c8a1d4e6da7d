"""FastAPI application that exposes the list/delete control surface."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import anyio
import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .directory import DeleteFailure, DirectoryClient, ListError
from .filters import filter_by_pattern
from .tokens import AuthError, TokenProvider
from .transport import open_client

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

logger = logging.getLogger("workspace_purge.service")


class BadRequest(ValueError):
    """Raised when the caller's request body is unusable."""


def _parse_email(body: bytes) -> str:
    try:
        payload = json.loads(body or b"null")
    except ValueError as exc:
        raise BadRequest("Request body must be valid JSON") from exc

    if not isinstance(payload, dict):
        raise BadRequest("Missing email parameter")
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        raise BadRequest("Missing email parameter")
    return email.strip()


def create_app(
    *,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> FastAPI:
    """Create the control application.

    ``transport`` is handed to every per-request :class:`httpx.Client`, which
    lets tests substitute the upstream Google endpoints.
    """

    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="Workspace Account Purge",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    def _list_matching_users() -> List[Dict[str, Any]]:
        with open_client(settings, transport=transport) as client:
            token = TokenProvider(
                settings.credentials,
                client=client,
                token_endpoint=settings.token_endpoint,
            ).fetch_access_token()
            directory = DirectoryClient(client, base_url=settings.directory_base_url)
            users = directory.list_all_users(token, settings.domain)
        matched = filter_by_pattern(users, settings.domain, settings.username_length)
        logger.info("%s of %s user(s) match the username pattern", len(matched), len(users))
        return matched

    def _delete_user(email: str) -> None:
        with open_client(settings, transport=transport) as client:
            token = TokenProvider(
                settings.credentials,
                client=client,
                token_endpoint=settings.token_endpoint,
            ).fetch_access_token()
            outcome = DirectoryClient(client, base_url=settings.directory_base_url).delete_user(token, email)
        outcome.raise_for_failure()

    @app.get("/", response_class=HTMLResponse)
    async def control_page(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "domain": settings.domain,
                "username_length": settings.username_length,
            },
        )

    @app.get("/api/listByUsernamePattern")
    def list_by_username_pattern() -> JSONResponse:
        return JSONResponse(_list_matching_users())

    @app.post("/api/deleteUser")
    async def delete_user(request: Request) -> PlainTextResponse:
        email = _parse_email(await request.body())
        await anyio.to_thread.run_sync(_delete_user, email)
        return PlainTextResponse("deleted")

    @app.exception_handler(BadRequest)
    async def handle_bad_request(_: object, exc: BadRequest):
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning("Access token exchange failed for %s", request.url.path)
        return PlainTextResponse(
            f"Failed to obtain access token: {exc.detail}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(ListError)
    async def handle_list_error(_: object, exc: ListError):
        return PlainTextResponse(
            f"Failed to list users: {exc.detail}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(DeleteFailure)
    async def handle_delete_failure(_: object, exc: DeleteFailure):
        return PlainTextResponse(
            f"Failed to delete user: {exc.detail}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: object, exc: StarletteHTTPException):
        # Unknown paths and wrong methods on known paths are both plain 404s.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return PlainTextResponse("Not Found", status_code=status.HTTP_404_NOT_FOUND)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    return app


__all__ = ["BadRequest", "create_app"]
