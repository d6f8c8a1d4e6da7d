"""Bulk removal of Google Workspace accounts by username pattern."""

from __future__ import annotations

from typing import Any

from .config import Credentials, Settings, load_settings
from .filters import filter_by_pattern


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI control application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Credentials",
    "Settings",
    "create_app",
    "filter_by_pattern",
    "load_settings",
]
