from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from taskboard.errors import user_message
from taskboard.models import Comment
from taskboard.summary import latest_comment
from taskboard.transitions import invoke_remote

logger = logging.getLogger(__name__)


class CommentThread:
    """Comments of one task. Adds and removes are followed by a refetch."""

    def __init__(
        self,
        task_id: str,
        *,
        fetch_comments: Callable[[str], Sequence[Comment]],
        create_comment: Callable[[str, str], Any],
        delete_comment: Callable[[str, str], Any],
        comments: Sequence[Comment] = (),
    ) -> None:
        self.task_id = task_id
        self.comments: List[Comment] = list(comments)
        self.error: Optional[str] = None
        self._fetch = fetch_comments
        self._create = create_comment
        self._delete = delete_comment

    @classmethod
    def for_client(cls, client, task_id: str) -> "CommentThread":
        return cls(
            task_id,
            fetch_comments=client.fetch_task_comments,
            create_comment=client.create_comment,
            delete_comment=client.delete_comment,
        )

    @property
    def latest(self) -> Optional[Comment]:
        return latest_comment(self.comments)

    async def refresh(self) -> bool:
        try:
            self.comments = list(await invoke_remote(self._fetch, self.task_id))
        except Exception as exc:
            logger.warning("Loading comments for task %s failed: %s", self.task_id, exc)
            self.error = user_message(exc, "Failed to load comments")
            return False
        return True

    async def add(self, body: str) -> bool:
        self.error = None
        if not body or not body.strip():
            return False
        try:
            await invoke_remote(self._create, self.task_id, body)
        except Exception as exc:
            logger.warning("Adding comment to task %s failed: %s", self.task_id, exc)
            self.error = user_message(exc, "Failed to add comment")
            return False
        return await self.refresh()

    async def remove(self, comment_id: str) -> bool:
        self.error = None
        try:
            await invoke_remote(self._delete, self.task_id, comment_id)
        except Exception as exc:
            logger.warning("Deleting comment %s failed: %s", comment_id, exc)
            self.error = user_message(exc, "Failed to delete comment")
            return False
        return await self.refresh()
