import asyncio

import plotly.express as px
import streamlit as st

from taskboard.analytics import chart_frame, load_analytics_rollup
from taskboard.api_client import TaskboardApiClient
from taskboard.auth import current_identity, is_logged_in
from taskboard.config import get_config
from taskboard.errors import ApiError, user_message
from taskboard.theme import set_theme
from taskboard.urgency import start_of_today
from taskboard.views import enter_page

set_theme(page_title="Analytics")
enter_page(st.session_state, "analytics")

if not is_logged_in(st.session_state):
    st.warning("Please log in from the home page.")
    st.stop()

identity = current_identity(st.session_state)
if not identity.root_admin:
    st.warning("Analytics is only available to the root admin.")
    st.stop()

client = TaskboardApiClient.from_config(identity=identity)
cfg = get_config()

st.title("Analytics")

with st.spinner("Loading analytics…"):
    try:
        rollup = asyncio.run(load_analytics_rollup(client, start_of_today(), due_soon_days=cfg.due_soon_days))
    except ApiError as exc:
        st.error(user_message(exc, "Failed to load analytics"))
        st.stop()

k1, k2, k3, k4 = st.columns(4)
k1.metric("Teams", rollup.org_count)
k2.metric("Members", rollup.member_count)
k3.metric("Projects", rollup.project_count)
k4.metric("Tasks", rollup.task_count)

s1, s2, s3, s4, s5 = st.columns(5)
s1.metric("To Do", rollup.todo_count)
s2.metric("In Progress", rollup.in_progress_count)
s3.metric("Done", rollup.done_count)
s4.metric("Overdue", rollup.overdue_count)
s5.metric("Due soon", rollup.due_soon_count)

charts = [
    ("Projects per team", rollup.projects_per_team),
    ("Team progress (%)", rollup.team_progress),
    ("Open tasks by project", rollup.open_tasks_by_project),
]
for col, (title, points) in zip(st.columns(len(charts)), charts):
    with col:
        st.subheader(title)
        if not points:
            st.caption("No data.")
            continue
        fig = px.bar(chart_frame(points), x="value", y="label", orientation="h", template="plotly_white")
        fig.update_layout(margin=dict(l=6, r=6, t=10, b=10), height=320, yaxis=dict(autorange="reversed"))
        st.plotly_chart(fig, use_container_width=True)
