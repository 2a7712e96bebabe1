"""Optimistic task edits with rollback.

``apply_optimistic_change`` builds the next snapshot synchronously and returns
an ``OptimisticChange`` whose ``commit()`` performs the remote update.
``TaskBoardController`` owns the snapshot shown by the board and project
pages and reconciles each commit when it resolves:

- success: the optimistic snapshot stays as is.
- failure: the changed field of that one task gets its previous value back
  and a user-visible message is recorded in ``error``. Changes to other
  tasks, in flight or already confirmed, are left as they are.

Several commits may be in flight at once, for the same or different tasks.
Each change bumps the generation of its (task, field) pair; a failed commit
that has already been superseded by a newer change to the same field of the
same task reports its error but leaves the newer value alone.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from taskboard.errors import TransitionError, user_message
from taskboard.models import STATUSES, Task

logger = logging.getLogger(__name__)

FIELD_STATUS = "status"
FIELD_DEADLINE = "deadline"
FIELD_ASSIGNEE = "assignee"

# field -> (Task attribute, wire key)
FIELDS: Dict[str, tuple] = {
    FIELD_STATUS: ("status", "status"),
    FIELD_DEADLINE: ("deadline", "deadline"),
    FIELD_ASSIGNEE: ("assigned_to_user_id", "assignedToUserId"),
}

DEFAULT_MESSAGES = {
    FIELD_STATUS: "Failed to move task",
    FIELD_DEADLINE: "Failed to update deadline",
    FIELD_ASSIGNEE: "Failed to update assignee",
}
DELETE_MESSAGE = "Failed to delete task"

Updater = Callable[[str, Dict[str, Any]], Union[Any, Awaitable[Any]]]


async def invoke_remote(fn: Callable[..., Any], *args: Any) -> Any:
    """Await ``fn`` when it is async, otherwise run it off the event loop."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return result


def _normalize(field: str, value: Any) -> Any:
    if field == FIELD_STATUS:
        if value not in STATUSES:
            raise ValueError(f"Invalid status: {value!r}")
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and not value.strip():
        return None
    return value


@dataclass
class OptimisticChange:
    previous_tasks: Sequence[Task]
    next_tasks: Sequence[Task]
    task_id: str
    field: str
    value: Any
    updater: Optional[Updater] = None

    @property
    def is_noop(self) -> bool:
        return self.next_tasks is self.previous_tasks

    def remote_fields(self) -> Dict[str, Any]:
        _, wire_key = FIELDS[self.field]
        return {wire_key: self.value}

    async def commit(self) -> None:
        """Persist the change; raises ``TransitionError`` if the API rejects it."""
        if self.is_noop:
            return
        if self.updater is None:
            raise RuntimeError(f"No updater to commit {self.field} change for task {self.task_id}")
        try:
            await invoke_remote(self.updater, self.task_id, self.remote_fields())
        except Exception as exc:
            raise TransitionError(
                getattr(exc, "status", 0),
                getattr(exc, "error", "") or "",
                task_id=self.task_id,
                field=self.field,
                rollback_tasks=list(self.previous_tasks),
            ) from exc


def apply_optimistic_change(
    tasks: Sequence[Task],
    task_id: str,
    field: str,
    value: Any,
    updater: Optional[Updater] = None,
) -> OptimisticChange:
    """Replace one field of one task, leaving ``tasks`` untouched.

    Unknown task ids and unchanged values produce a no-op change whose
    ``next_tasks`` is ``tasks`` itself and whose ``commit()`` does nothing.
    """
    if field not in FIELDS:
        raise ValueError(f"Unsupported field: {field!r}")
    value = _normalize(field, value)
    attr, _ = FIELDS[field]

    current = next((t for t in tasks if t.id == task_id), None)
    if current is None or getattr(current, attr) == value:
        return OptimisticChange(tasks, tasks, task_id, field, value, updater)

    next_tasks = [replace(t, **{attr: value}) if t.id == task_id else t for t in tasks]
    return OptimisticChange(tasks, next_tasks, task_id, field, value, updater)


@dataclass
class PendingTransition:
    change: OptimisticChange
    generation: int
    controller: "TaskBoardController"

    @property
    def next_tasks(self) -> Sequence[Task]:
        return self.change.next_tasks

    async def settle(self) -> bool:
        return await self.controller._reconcile(self)


class TaskBoardController:
    """Owns the task snapshot rendered by the board and project views."""

    def __init__(
        self,
        tasks: Sequence[Task] = (),
        *,
        update_task: Updater,
        delete_task: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.tasks: List[Task] = list(tasks)
        self.error: Optional[str] = None
        self._update_task = update_task
        self._delete_task = delete_task
        self._generations: Dict[Tuple[str, str], int] = {}
        self._in_flight: Dict[str, int] = {}
        # task ids of status commits still in flight, oldest first
        self._moves: List[str] = []

    @property
    def in_flight(self) -> FrozenSet[str]:
        return frozenset(self._in_flight)

    @property
    def moving_task_id(self) -> Optional[str]:
        """The most recently moved task whose status commit is still pending."""
        return self._moves[-1] if self._moves else None

    def is_committing(self, task_id: str) -> bool:
        return task_id in self._in_flight

    def replace_tasks(self, tasks: Sequence[Task]) -> None:
        """Adopt a full refetch."""
        self.tasks = list(tasks)

    def find(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def begin(self, task_id: str, field: str, value: Any) -> Optional[PendingTransition]:
        """Apply the change locally; returns None when there is nothing to commit."""
        change = apply_optimistic_change(self.tasks, task_id, field, value, self._update_task)
        if change.is_noop:
            return None
        self.error = None
        self.tasks = list(change.next_tasks)
        key = (task_id, field)
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        self._in_flight[task_id] = self._in_flight.get(task_id, 0) + 1
        if field == FIELD_STATUS:
            self._moves.append(task_id)
        return PendingTransition(change, generation, self)

    async def _reconcile(self, pending: PendingTransition) -> bool:
        change = pending.change
        try:
            await change.commit()
        except TransitionError as exc:
            self.error = user_message(exc, DEFAULT_MESSAGES[change.field])
            if self._generations.get((change.task_id, change.field)) != pending.generation:
                logger.warning(
                    "Superseded %s change for task %s failed (%s); keeping newer value",
                    change.field, change.task_id, exc,
                )
            else:
                logger.warning(
                    "Rolling back %s change for task %s: %s", change.field, change.task_id, exc
                )
                self._restore_field(change.task_id, change.field, exc.rollback_tasks)
            return False
        finally:
            self._release(change.task_id, change.field)
        logger.debug("Committed %s=%r for task %s", change.field, change.value, change.task_id)
        return True

    def _restore_field(self, task_id: str, field: str, previous_tasks: Sequence[Task]) -> None:
        previous = next((t for t in previous_tasks if t.id == task_id), None)
        if previous is None:
            return
        attr, _ = FIELDS[field]
        value = getattr(previous, attr)
        self.tasks = [replace(t, **{attr: value}) if t.id == task_id else t for t in self.tasks]

    def _release(self, task_id: str, field: str) -> None:
        if field == FIELD_STATUS and task_id in self._moves:
            self._moves.remove(task_id)
        remaining = self._in_flight.get(task_id, 0) - 1
        if remaining > 0:
            self._in_flight[task_id] = remaining
        else:
            self._in_flight.pop(task_id, None)

    async def change_field(self, task_id: str, field: str, value: Any) -> bool:
        pending = self.begin(task_id, field, value)
        if pending is None:
            return True
        return await pending.settle()

    async def move_task(self, task_id: str, status: str) -> bool:
        return await self.change_field(task_id, FIELD_STATUS, status)

    async def set_deadline(self, task_id: str, deadline: Union[str, date, None]) -> bool:
        return await self.change_field(task_id, FIELD_DEADLINE, deadline)

    async def set_assignee(self, task_id: str, user_id: Optional[str]) -> bool:
        return await self.change_field(task_id, FIELD_ASSIGNEE, user_id)

    async def delete_task(self, task_id: str) -> bool:
        """Remove the task from the snapshot once the API confirms the delete."""
        if self._delete_task is None:
            raise RuntimeError("TaskBoardController was built without a delete_task callable")
        self.error = None
        try:
            await invoke_remote(self._delete_task, task_id)
        except Exception as exc:
            logger.warning("Delete of task %s failed: %s", task_id, exc)
            self.error = user_message(exc, DELETE_MESSAGE)
            return False
        self.tasks = [t for t in self.tasks if t.id != task_id]
        for key in [k for k in self._generations if k[0] == task_id]:
            del self._generations[key]
        return True

    @classmethod
    def for_client(cls, client, tasks: Sequence[Task] = ()) -> "TaskBoardController":
        return cls(tasks, update_task=client.update_task, delete_task=client.delete_task)
