"""Select directory accounts by domain and username shape."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Pattern

from .config import DEFAULT_USERNAME_LENGTH


def build_username_pattern(length: int) -> Pattern[str]:
    """Compile the fixed-length ASCII alphanumeric username pattern."""
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError(f"Username length must be a positive integer, got {length!r}")
    return re.compile(f"[A-Za-z0-9]{{{length}}}")


def email_matches(email: object, domain: str, pattern: Pattern[str]) -> bool:
    if not isinstance(email, str) or not email:
        return False
    username, separator, email_domain = email.partition("@")
    if not separator or "@" in email_domain:
        return False
    if email_domain != domain:
        return False
    return pattern.fullmatch(username) is not None


def filter_by_pattern(
    users: Iterable[Dict[str, Any]],
    domain: str,
    username_length: int = DEFAULT_USERNAME_LENGTH,
) -> List[Dict[str, Any]]:
    """Return the records whose ``primaryEmail`` is ``<N alphanumerics>@<domain>``.

    Records are returned unchanged and in their original order.
    """
    pattern = build_username_pattern(username_length)
    return [
        user
        for user in users
        if isinstance(user, dict) and email_matches(user.get("primaryEmail"), domain, pattern)
    ]


__all__ = ["build_username_pattern", "email_matches", "filter_by_pattern"]
