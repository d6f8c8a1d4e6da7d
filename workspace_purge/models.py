"""Value types shared by the directory client and the HTTP surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class AccessToken:
    """Short-lived bearer token minted from the refresh credential."""

    value: str
    expires_in: Optional[int] = None
    token_type: str = "Bearer"

    def __repr__(self) -> str:
        return f"AccessToken(value=***, expires_in={self.expires_in!r})"

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.value}"}


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of deleting a single directory account."""

    email: str
    ok: bool
    status_code: Optional[int] = None
    detail: str = ""

    def raise_for_failure(self) -> None:
        if not self.ok:
            from .directory import DeleteFailure

            raise DeleteFailure(self.email, self.detail, status_code=self.status_code)


__all__ = ["AccessToken", "DeleteOutcome"]
