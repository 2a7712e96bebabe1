"""Task board view-models: urgency, summaries, board columns and optimistic edits."""

from .board import build_columns, partition_by_status
from .summary import compose_summary
from .transitions import TaskBoardController, apply_optimistic_change
from .urgency import classify_urgency

__all__ = [
    "apply_optimistic_change",
    "build_columns",
    "classify_urgency",
    "compose_summary",
    "partition_by_status",
    "TaskBoardController",
]
