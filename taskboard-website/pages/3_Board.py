import asyncio

import streamlit as st

from taskboard.api_client import TaskboardApiClient
from taskboard.auth import current_identity, is_logged_in
from taskboard.board import build_columns
from taskboard.config import get_config
from taskboard.errors import ApiError, user_message
from taskboard.models import STATUSES
from taskboard.summary import badge_for
from taskboard.theme import card_html, set_theme
from taskboard.transitions import TaskBoardController
from taskboard.urgency import start_of_today, task_urgency
from taskboard.views import enter_page, project_controller

set_theme(page_title="Board")
entered = enter_page(st.session_state, "board")

if not is_logged_in(st.session_state):
    st.warning("Please log in from the home page.")
    st.stop()

project_id = st.session_state.get("project_id")
if not project_id:
    st.info("Open a project from the dashboard.")
    st.stop()

identity = current_identity(st.session_state)
client = TaskboardApiClient.from_config(identity=identity)
cfg = get_config()

refresh_clicked = st.button("↻", help="Refresh from API")
board = st.session_state.get("board_view")
refresh = refresh_clicked or entered or not board or board["project_id"] != project_id
try:
    if refresh:
        board = {"project_id": project_id, "project": client.fetch_project(project_id)}
        st.session_state.board_view = board
    controller: TaskBoardController = project_controller(st.session_state, client, project_id, refresh=refresh)
except ApiError as exc:
    st.error(user_message(exc, "Failed to load board"))
    st.stop()

st.title(board["project"].name)
st.caption(board["project"].description or "Move cards between columns to update status.")

if controller.error:
    st.error(controller.error)

today = start_of_today()
cols = st.columns(len(STATUSES))
for col, column in zip(cols, build_columns(controller.tasks)):
    with col:
        st.markdown(f'<div class="tb-col-header">{column.title} ({column.count})</div>', unsafe_allow_html=True)
        if not column.tasks:
            st.caption("No tasks.")
        for task in column.tasks:
            badge = badge_for(task_urgency(task, today, due_soon_days=cfg.due_soon_days))
            st.markdown(
                card_html(
                    task.title,
                    task.deadline or "No deadline",
                    badge.label,
                    badge.severity,
                    moving=controller.is_committing(task.id),
                ),
                unsafe_allow_html=True,
            )
            idx = STATUSES.index(column.status)
            prev_col, next_col = st.columns(2)
            if idx > 0 and prev_col.button("←", key=f"prev-{task.id}"):
                asyncio.run(controller.move_task(task.id, STATUSES[idx - 1]))
                st.rerun()
            if idx < len(STATUSES) - 1 and next_col.button("→", key=f"next-{task.id}"):
                asyncio.run(controller.move_task(task.id, STATUSES[idx + 1]))
                st.rerun()
