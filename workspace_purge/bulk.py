"""Sequential bulk deletion with progress tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .directory import DirectoryClient
from .models import AccessToken, DeleteOutcome

logger = logging.getLogger("workspace_purge.bulk")


@dataclass
class DeleteProgress:
    """Running tally of a bulk deletion."""

    total: int
    succeeded: int = 0
    failed: int = 0
    failures: List[DeleteOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed

    @property
    def remaining(self) -> int:
        return max(self.total - self.attempted, 0)

    @property
    def finished(self) -> bool:
        return self.attempted >= self.total

    def record(self, outcome: DeleteOutcome) -> None:
        if outcome.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append(outcome)


ProgressCallback = Callable[[DeleteProgress, DeleteOutcome], None]


def iter_delete_outcomes(
    directory: DirectoryClient,
    access_token: AccessToken,
    emails: Iterable[str],
) -> Iterator[DeleteOutcome]:
    """Delete each email in turn, yielding one outcome per account.

    Deletion is lazy: nothing is deleted until the iterator is consumed, and
    abandoning the iterator leaves the remaining accounts untouched.
    """
    for email in emails:
        yield directory.delete_user(access_token, email)


def run_bulk_delete(
    directory: DirectoryClient,
    access_token: AccessToken,
    users: Iterable[Dict[str, Any]],
    *,
    on_progress: Optional[ProgressCallback] = None,
) -> DeleteProgress:
    emails = [str(user["primaryEmail"]) for user in users if user.get("primaryEmail")]
    progress = DeleteProgress(total=len(emails))

    for outcome in iter_delete_outcomes(directory, access_token, emails):
        progress.record(outcome)
        if on_progress is not None:
            on_progress(progress, outcome)

    logger.info(
        "Bulk deletion finished: %s succeeded, %s failed",
        progress.succeeded,
        progress.failed,
    )
    return progress


__all__ = ["DeleteProgress", "iter_delete_outcomes", "run_bulk_delete"]
