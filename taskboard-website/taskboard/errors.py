from __future__ import annotations

from typing import Any, List, Optional


class ApiError(Exception):
    """Non-success reply (or transport failure, status 0) from the task API."""

    def __init__(self, status: int, error: str, *, detail: Optional[str] = None) -> None:
        # transport failures keep ``error`` empty; ``detail`` is for logs only
        super().__init__(f"HTTP {status}: {error}" if status else (detail or error))
        self.status = int(status)
        self.error = error
        self.detail = detail

    def to_dict(self) -> dict:
        return {"status": self.status, "error": self.error}


class TransitionError(ApiError):
    """A committed optimistic change was rejected by the API.

    ``rollback_tasks`` is the snapshot that existed right before the change.
    """

    def __init__(
        self,
        status: int,
        error: str,
        *,
        task_id: str,
        field: str,
        rollback_tasks: List[Any],
    ) -> None:
        super().__init__(status, error)
        self.task_id = task_id
        self.field = field
        self.rollback_tasks = rollback_tasks


def user_message(exc: BaseException, default: str) -> str:
    """Text shown to the user for a failed operation."""
    error: Optional[str] = getattr(exc, "error", None)
    return error or default
