"""Per-session view state shared across pages.

The project and board pages render the same task snapshot, so there is one
``TaskBoardController`` per project in the session. Arriving on a page
refetches the tasks; reruns of the same page reuse what is cached.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from taskboard.comments import CommentThread
from taskboard.transitions import TaskBoardController

CURRENT_PAGE_KEY = "current_page"
CONTROLLERS_KEY = "board_controllers"
THREADS_KEY = "comment_threads"
THREAD_TASK_KEY = "comment_task_id"


def enter_page(session_state, page: str) -> bool:
    """Record the rendered page; True when it differs from the previous run."""
    entered = session_state.get(CURRENT_PAGE_KEY) != page
    session_state[CURRENT_PAGE_KEY] = page
    return entered


def project_controller(session_state, client, project_id: str, *, refresh: bool = False) -> TaskBoardController:
    """The shared controller for ``project_id``; refetches tasks when asked or missing."""
    controllers = session_state.setdefault(CONTROLLERS_KEY, {})
    controller: Optional[TaskBoardController] = controllers.get(project_id)
    if controller is not None and not refresh:
        return controller
    tasks = client.fetch_project_tasks(project_id)
    if controller is None:
        controller = TaskBoardController.for_client(client, tasks)
        controllers[project_id] = controller
    else:
        controller.replace_tasks(tasks)
        controller.error = None
    return controller


def comment_thread(session_state, client, task_id: str, *, refresh: bool = False) -> CommentThread:
    """The comment thread of the selected task, refetched when the selection changes."""
    threads = session_state.setdefault(THREADS_KEY, {})
    selection_changed = session_state.get(THREAD_TASK_KEY) != task_id
    session_state[THREAD_TASK_KEY] = task_id

    thread: Optional[CommentThread] = threads.get(task_id)
    if thread is None:
        thread = CommentThread.for_client(client, task_id)
        threads[task_id] = thread
        refresh = True
    if refresh or selection_changed:
        asyncio.run(thread.refresh())
    return thread


def reset_views(session_state) -> None:
    """Drop cached view state; controllers and threads hold the old client's token."""
    for key in (CONTROLLERS_KEY, THREADS_KEY, THREAD_TASK_KEY, "project_view", "board_view", "member_users"):
        session_state.pop(key, None)
