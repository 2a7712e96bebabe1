"""Auto-generated task summary: bullets, a badge and one suggested next step.

Output depends only on the inputs and the injected ``today``; calling
``compose_summary`` twice with the same arguments yields equal results.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Sequence

from taskboard.models import DONE, IN_PROGRESS, TODO, Comment, Task
from taskboard.urgency import (
    DUE_SOON_DAYS,
    URGENCY_DUE_SOON,
    URGENCY_OVERDUE,
    classify_urgency,
)

UNASSIGNED = "Unassigned"
ELLIPSIS = "…"

DESCRIPTION_MAX_LEN = 140
COMMENT_MAX_LEN = 110

SEVERITY_CRITICAL = "critical"
SEVERITY_WARNING = "warning"
SEVERITY_NEUTRAL = "neutral"

NEXT_ASSIGN_OWNER = "Assign an owner."
NEXT_FIX_OVERDUE = "Update the deadline or mark done."
NEXT_START = "Move to In Progress when started."
NEXT_UPDATE = "Add an update comment when a milestone is reached."
NEXT_DOCUMENT = "Optionally add a final note for documentation."

STATUS_LABELS = {TODO: "To Do", IN_PROGRESS: "In Progress", DONE: "Done"}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def truncate_text(value: str, max_len: int) -> str:
    """Collapse whitespace runs and cap at ``max_len`` chars, ellipsis included."""
    text = " ".join(value.split())
    if len(text) <= max_len:
        return text
    return text[: max(0, max_len - 1)].rstrip() + ELLIPSIS


def latest_comment(comments: Sequence[Comment]) -> Optional[Comment]:
    # Timestamps are compared as text; the first of equal timestamps wins.
    dated = [c for c in comments if c.created_at]
    if not dated:
        return None
    return max(dated, key=lambda c: c.created_at)


@dataclass(frozen=True)
class Badge:
    label: str
    severity: str


@dataclass(frozen=True)
class AutoSummary:
    bullets: List[str]
    badge: Badge
    next_step: str
    urgency: str
    title: str = "Auto-generated summary"

    @property
    def overdue(self) -> bool:
        return self.urgency == URGENCY_OVERDUE

    @property
    def due_soon(self) -> bool:
        return self.urgency == URGENCY_DUE_SOON

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "bullets": list(self.bullets),
            "badge": {"label": self.badge.label, "severity": self.badge.severity},
            "nextStep": self.next_step,
            "overdue": self.overdue,
            "dueSoon": self.due_soon,
        }


def badge_for(urgency: str) -> Badge:
    if urgency == URGENCY_OVERDUE:
        return Badge("Overdue", SEVERITY_CRITICAL)
    if urgency == URGENCY_DUE_SOON:
        return Badge("Due soon", SEVERITY_WARNING)
    return Badge("Live", SEVERITY_NEUTRAL)


def next_step_for(status: str, urgency: str, assignee_label: str) -> str:
    # Evaluation order matters: an unassigned overdue task asks for an owner.
    if assignee_label == UNASSIGNED:
        return NEXT_ASSIGN_OWNER
    if urgency == URGENCY_OVERDUE:
        return NEXT_FIX_OVERDUE
    if status == TODO:
        return NEXT_START
    if status == IN_PROGRESS:
        return NEXT_UPDATE
    return NEXT_DOCUMENT


def _deadline_bullet(task: Task, urgency: str) -> str:
    if not task.deadline:
        return "Deadline: None"
    suffix = ""
    if urgency == URGENCY_OVERDUE:
        suffix = " (Overdue)"
    elif urgency == URGENCY_DUE_SOON:
        suffix = " (Due soon)"
    return f"Deadline: {task.deadline}{suffix}"


def _comments_bullet(comments: Sequence[Comment]) -> str:
    if not comments:
        return "Comments: 0"
    latest = latest_comment(comments)
    snippet = truncate_text(latest.body, COMMENT_MAX_LEN) if latest and latest.body else ""
    latest_part = f" • Latest: “{snippet}”" if snippet else ""
    return f"Comments: {len(comments)}{latest_part}"


def compose_summary(
    task: Task,
    comments: Sequence[Comment],
    assignee_label: str,
    status_label_fn: Callable[[str], str] = status_label,
    *,
    today: date,
    due_soon_days: int = DUE_SOON_DAYS,
) -> AutoSummary:
    urgency = classify_urgency(task.status, task.deadline, today, due_soon_days=due_soon_days)

    bullets = [
        f"Status: {status_label_fn(task.status)}",
        _deadline_bullet(task, urgency),
        f"Assignee: {assignee_label}",
    ]
    if task.description and task.description.strip():
        bullets.append(f"Key detail: {truncate_text(task.description, DESCRIPTION_MAX_LEN)}")
    bullets.append(_comments_bullet(comments))

    return AutoSummary(
        bullets=bullets,
        badge=badge_for(urgency),
        next_step=next_step_for(task.status, urgency, assignee_label),
        urgency=urgency,
    )
