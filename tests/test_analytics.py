import asyncio
from datetime import date

import pytest

from taskboard.analytics import (
    ChartPoint,
    TASK_COLUMNS,
    build_analytics_rollup,
    chart_frame,
    load_analytics_rollup,
    tasks_to_df,
)
from taskboard.errors import ApiError
from taskboard.models import DONE, IN_PROGRESS, TODO, Member, Org, Project, Task

TODAY = date(2024, 1, 10)

ORGS = [Org(id="o1", name="Alpha"), Org(id="o2", name="Beta")]
MEMBERS = {
    "o1": [Member(org_id="o1", user_id="u1"), Member(org_id="o1", user_id="u2")],
    "o2": [Member(org_id="o2", user_id="u2"), Member(org_id="o2", user_id="u3")],
}
PROJECTS = [
    Project(id="p1", org_id="o1", name="Site"),
    Project(id="p2", org_id="o1", name="App"),
    Project(id="p3", org_id="o2", name="Docs"),
]
TASKS = [
    Task(id="t1", project_id="p1", title="a", status=DONE),
    Task(id="t2", project_id="p1", title="b", status=TODO, deadline="2024-01-01"),
    Task(id="t3", project_id="p2", title="c", status=IN_PROGRESS, deadline="2024-01-12"),
    Task(id="t4", project_id="p3", title="d", status=DONE),
    Task(id="t5", project_id="p3", title="e", status=DONE),
    Task(id="t6", project_id="p3", title="f", status=TODO, deadline="2024-03-01"),
]


def test_rollup_counts():
    rollup = build_analytics_rollup(ORGS, MEMBERS, PROJECTS, TASKS, TODAY)
    assert rollup.org_count == 2
    assert rollup.member_count == 3
    assert rollup.project_count == 3
    assert rollup.task_count == 6
    assert (rollup.todo_count, rollup.in_progress_count, rollup.done_count) == (2, 1, 3)
    assert rollup.overdue_count == 1
    assert rollup.due_soon_count == 1
    assert rollup.completion_rate == 50


def test_rollup_charts_sorted_descending():
    rollup = build_analytics_rollup(ORGS, MEMBERS, PROJECTS, TASKS, TODAY)
    assert rollup.projects_per_team == [ChartPoint("Alpha", 2), ChartPoint("Beta", 1)]
    # Alpha: 1 of 3 done -> 33; Beta: 2 of 3 done -> 67
    assert rollup.team_progress == [ChartPoint("Beta", 67), ChartPoint("Alpha", 33)]
    assert rollup.open_tasks_by_project == [ChartPoint("Site", 1), ChartPoint("App", 1), ChartPoint("Docs", 1)]


def test_rollup_keeps_top_eight():
    orgs = [Org(id=f"o{i}", name=f"Team {i}") for i in range(10)]
    projects = [Project(id=f"p{i}-{j}", org_id=f"o{i}", name="x") for i in range(10) for j in range(i)]
    rollup = build_analytics_rollup(orgs, {}, projects, [], TODAY)
    assert len(rollup.projects_per_team) == 8
    assert rollup.projects_per_team[0] == ChartPoint("Team 9", 9)
    assert rollup.team_progress == []
    assert rollup.completion_rate == 0


def test_progress_rounds_half_up():
    tasks = [Task(id=f"t{i}", project_id="p1", title="x", status=DONE if i < 1 else TODO) for i in range(8)]
    rollup = build_analytics_rollup(ORGS[:1], {}, PROJECTS[:1], tasks, TODAY)
    # 1/8 = 12.5%
    assert rollup.team_progress == [ChartPoint("Alpha", 13)]


class FakeClient:
    def __init__(self, fail_projects=False):
        self.fail_projects = fail_projects

    def list_orgs(self):
        return ORGS

    def fetch_org_members(self, org_id):
        return MEMBERS[org_id]

    def list_projects(self, org_id):
        if self.fail_projects:
            raise ApiError(500, "Projects unavailable")
        return [p for p in PROJECTS if p.org_id == org_id]

    def fetch_project_tasks(self, project_id):
        return [t for t in TASKS if t.project_id == project_id]


def test_load_rollup_through_client():
    rollup = asyncio.run(load_analytics_rollup(FakeClient(), TODAY))
    assert rollup == build_analytics_rollup(ORGS, MEMBERS, PROJECTS, TASKS, TODAY)


def test_load_rollup_propagates_api_error():
    with pytest.raises(ApiError):
        asyncio.run(load_analytics_rollup(FakeClient(fail_projects=True), TODAY))


def test_chart_frame():
    df = chart_frame([ChartPoint("a", 3)])
    assert list(df.columns) == ["label", "value"]
    assert df.iloc[0]["value"] == 3
    assert chart_frame([]).empty


def test_tasks_to_df():
    df = tasks_to_df(TASKS, TODAY)
    assert list(df.columns) == TASK_COLUMNS
    assert len(df) == len(TASKS)
    row = df[df["id"] == "t2"].iloc[0]
    assert row["urgency"] == "overdue"
    assert row["deadline"] == date(2024, 1, 1)
    assert row["status_label"] == "To Do"
    assert list(tasks_to_df([], TODAY).columns) == TASK_COLUMNS
