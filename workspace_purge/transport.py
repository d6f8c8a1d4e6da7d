"""HTTP client construction for upstream Google APIs."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .config import Settings


def open_client(settings: Settings, *, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Return a fresh client; callers own it and must close it."""

    kwargs: Dict[str, Any] = {}
    if transport is not None:
        kwargs["transport"] = transport
    # httpx treats timeout=None as "never time out", so only pass explicit values.
    if settings.timeout is not None:
        kwargs["timeout"] = settings.timeout
    return httpx.Client(**kwargs)


__all__ = ["open_client"]
