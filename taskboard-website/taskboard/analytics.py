"""Read-only rollup across every team, shown to the root admin.

The rollup is computed from already-fetched orgs, members, projects and tasks;
``load_analytics_rollup`` does the fetching through the API client.
"""
from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from taskboard.board import count_statuses
from taskboard.models import DONE, Member, Org, Project, Task
from taskboard.summary import status_label
from taskboard.urgency import (
    DUE_SOON_DAYS,
    URGENCY_DUE_SOON,
    URGENCY_OVERDUE,
    classify_urgency,
)
from taskboard.transitions import invoke_remote

TOP_N = 8

TASK_COLUMNS = ["id", "project_id", "title", "status", "status_label", "deadline", "assigned_to_user_id", "urgency"]


@dataclass(frozen=True)
class ChartPoint:
    label: str
    value: int


@dataclass(frozen=True)
class AnalyticsRollup:
    org_count: int = 0
    member_count: int = 0
    project_count: int = 0
    task_count: int = 0
    todo_count: int = 0
    in_progress_count: int = 0
    done_count: int = 0
    overdue_count: int = 0
    due_soon_count: int = 0
    projects_per_team: List[ChartPoint] = field(default_factory=list)
    team_progress: List[ChartPoint] = field(default_factory=list)
    open_tasks_by_project: List[ChartPoint] = field(default_factory=list)

    @property
    def completion_rate(self) -> int:
        return _round_half_up(self.done_count * 100 / self.task_count) if self.task_count else 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _top(points: Iterable[ChartPoint], n: int = TOP_N) -> List[ChartPoint]:
    # sorted() is stable, so equal values keep their input order
    return sorted(points, key=lambda p: p.value, reverse=True)[:n]


def build_analytics_rollup(
    orgs: Sequence[Org],
    members_by_org: Mapping[str, Sequence[Member]],
    projects: Sequence[Project],
    tasks: Sequence[Task],
    today: date,
    *,
    due_soon_days: int = DUE_SOON_DAYS,
) -> AnalyticsRollup:
    unique_members = {m.user_id for members in members_by_org.values() for m in members}
    counts = count_statuses(tasks)

    urgencies = [classify_urgency(t.status, t.deadline, today, due_soon_days=due_soon_days) for t in tasks]

    projects_per_team = _top(
        ChartPoint(o.name, sum(1 for p in projects if p.org_id == o.id)) for o in orgs
    )

    org_by_project = {p.id: p.org_id for p in projects}
    org_names = {o.id: o.name for o in orgs}
    totals: Dict[str, List[int]] = {}
    for task in tasks:
        org_id = org_by_project.get(task.project_id)
        if not org_id:
            continue
        bucket = totals.setdefault(org_id, [0, 0])
        bucket[0] += 1
        if task.status == DONE:
            bucket[1] += 1
    team_progress = _top(
        ChartPoint(org_names.get(org_id, org_id), _round_half_up(done * 100 / total) if total else 0)
        for org_id, (total, done) in totals.items()
    )

    open_tasks_by_project = _top(
        ChartPoint(p.name, sum(1 for t in tasks if t.project_id == p.id and t.status != DONE))
        for p in projects
    )

    return AnalyticsRollup(
        org_count=len(orgs),
        member_count=len(unique_members),
        project_count=len(projects),
        task_count=len(tasks),
        todo_count=counts.todo,
        in_progress_count=counts.in_progress,
        done_count=counts.done,
        overdue_count=urgencies.count(URGENCY_OVERDUE),
        due_soon_count=urgencies.count(URGENCY_DUE_SOON),
        projects_per_team=projects_per_team,
        team_progress=team_progress,
        open_tasks_by_project=open_tasks_by_project,
    )


async def load_analytics_rollup(client, today: date, *, due_soon_days: int = DUE_SOON_DAYS) -> AnalyticsRollup:
    """Fetch every org, its members, projects and tasks, then build the rollup.

    Any failed fetch propagates as ``ApiError``; the page shows one message.
    """
    orgs = await invoke_remote(client.list_orgs)
    member_lists = await asyncio.gather(*(invoke_remote(client.fetch_org_members, o.id) for o in orgs))
    project_lists = await asyncio.gather(*(invoke_remote(client.list_projects, o.id) for o in orgs))
    projects = [p for plist in project_lists for p in plist]
    task_lists = await asyncio.gather(*(invoke_remote(client.fetch_project_tasks, p.id) for p in projects))
    tasks = [t for tlist in task_lists for t in tlist]

    members_by_org = {o.id: list(m) for o, m in zip(orgs, member_lists)}
    return build_analytics_rollup(orgs, members_by_org, projects, tasks, today, due_soon_days=due_soon_days)


def chart_frame(points: Sequence[ChartPoint]) -> pd.DataFrame:
    return pd.DataFrame([{"label": p.label, "value": p.value} for p in points], columns=["label", "value"])


def tasks_to_df(tasks: Sequence[Task], today: date, *, due_soon_days: int = DUE_SOON_DAYS) -> pd.DataFrame:
    if not tasks:
        return pd.DataFrame(columns=TASK_COLUMNS)
    rows = [
        {
            "id": t.id,
            "project_id": t.project_id,
            "title": t.title,
            "status": t.status,
            "status_label": status_label(t.status),
            "deadline": t.deadline,
            "assigned_to_user_id": t.assigned_to_user_id,
            "urgency": classify_urgency(t.status, t.deadline, today, due_soon_days=due_soon_days),
        }
        for t in tasks
    ]
    df = pd.DataFrame(rows, columns=TASK_COLUMNS)
    df["deadline"] = pd.to_datetime(df["deadline"], errors="coerce").dt.date
    return df
