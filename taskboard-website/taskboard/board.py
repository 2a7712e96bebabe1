"""Board logic: groups a task snapshot into fixed, ordered status columns.

Column order is TODO, IN_PROGRESS, DONE. Each column keeps tasks in the order
they had in the input; every known status always has a (possibly empty) key.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from taskboard.models import DONE, IN_PROGRESS, STATUSES, TODO, Task
from taskboard.summary import status_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    status: str
    tasks: List[Task]

    @property
    def title(self) -> str:
        return status_label(self.status)

    @property
    def count(self) -> int:
        return len(self.tasks)


def partition_by_status(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    columns: Dict[str, List[Task]] = {status: [] for status in STATUSES}
    for task in tasks:
        bucket = columns.get(task.status)
        if bucket is None:
            logger.warning("Skipping task %s with unknown status %r", task.id, task.status)
            continue
        bucket.append(task)
    return columns


def build_columns(tasks: Iterable[Task]) -> List[Column]:
    partitioned = partition_by_status(tasks)
    return [Column(status=status, tasks=partitioned[status]) for status in STATUSES]


@dataclass(frozen=True)
class StatusCounts:
    todo: int = 0
    in_progress: int = 0
    done: int = 0

    @property
    def total(self) -> int:
        return self.todo + self.in_progress + self.done

    def to_dict(self) -> Dict[str, int]:
        return {"todo": self.todo, "inProgress": self.in_progress, "done": self.done}


def count_statuses(tasks: Iterable[Task]) -> StatusCounts:
    partitioned = partition_by_status(tasks)
    return StatusCounts(
        todo=len(partitioned[TODO]),
        in_progress=len(partitioned[IN_PROGRESS]),
        done=len(partitioned[DONE]),
    )


def team_status_counts(task_lists: Iterable[Sequence[Task]]) -> StatusCounts:
    """Counts across every project of a team (team admin view)."""
    return count_statuses(task for tasks in task_lists for task in tasks)


def my_status_counts(my_tasks: Iterable[Task], project_ids: Iterable[str]) -> StatusCounts:
    """Counts of the user's own tasks limited to the selected team's projects."""
    allowed = set(project_ids)
    return count_statuses(t for t in my_tasks if t.project_id in allowed)
