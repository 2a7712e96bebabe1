"""Deadline urgency classification.

Deadlines are calendar dates (``YYYY-MM-DD``) compared against an injected
"today". A malformed deadline is treated as no deadline, never an error.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from taskboard.models import DONE

URGENCY_NONE = "none"
URGENCY_ON_TRACK = "on-track"
URGENCY_DUE_SOON = "due-soon"
URGENCY_OVERDUE = "overdue"

DUE_SOON_DAYS = 7

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def start_of_today() -> date:
    """Local calendar date; the only place the wall clock is read."""
    return datetime.now().date()


def parse_deadline(value: Union[str, date, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def classify_urgency(
    status: str,
    deadline: Union[str, date, None],
    today: date,
    *,
    due_soon_days: int = DUE_SOON_DAYS,
) -> str:
    if status == DONE:
        return URGENCY_NONE
    parsed = parse_deadline(deadline)
    if parsed is None:
        return URGENCY_NONE
    if parsed < today:
        return URGENCY_OVERDUE
    if parsed <= today + timedelta(days=due_soon_days):
        return URGENCY_DUE_SOON
    return URGENCY_ON_TRACK


def task_urgency(task, today: date, *, due_soon_days: int = DUE_SOON_DAYS) -> str:
    return classify_urgency(task.status, task.deadline, today, due_soon_days=due_soon_days)
