import asyncio

import streamlit as st

from taskboard.analytics import tasks_to_df
from taskboard.api_client import TaskboardApiClient
from taskboard.auth import current_identity, is_logged_in
from taskboard.config import get_config
from taskboard.errors import ApiError, user_message
from taskboard.members import assignee_label, member_label_map, resolve_member_users, short_id, sort_members
from taskboard.models import STATUSES
from taskboard.summary import compose_summary, status_label
from taskboard.theme import badge_html, set_theme
from taskboard.transitions import TaskBoardController
from taskboard.urgency import parse_deadline, start_of_today
from taskboard.views import comment_thread, enter_page, project_controller

set_theme(page_title="Project")
entered = enter_page(st.session_state, "project")

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


def refresh_all():
    project = client.fetch_project(project_id)
    members = client.fetch_org_members(project.org_id)
    users = asyncio.run(
        resolve_member_users([m.user_id for m in members], client.fetch_user, known=st.session_state.get("member_users"))
    )
    st.session_state.member_users = users
    project_controller(st.session_state, client, project_id, refresh=True)
    st.session_state.project_view = {
        "project_id": project_id,
        "project": project,
        "members": members,
    }


view = st.session_state.get("project_view")
if entered or not view or view["project_id"] != project_id:
    try:
        refresh_all()
    except ApiError as exc:
        st.error(user_message(exc, "Failed to load project"))
        st.stop()
    view = st.session_state.project_view

project = view["project"]
members = view["members"]
controller: TaskBoardController = project_controller(st.session_state, client, project_id)
labels = member_label_map(members, st.session_state.get("member_users", {}))
sorted_members = sort_members(members)
assignee_options = [""] + [m.user_id for m in sorted_members]
role_by_user = {m.user_id: m.role for m in sorted_members}


def assignee_option_label(user_id):
    if not user_id:
        return "Unassigned"
    return f"{labels.get(user_id) or short_id(user_id)} ({role_by_user.get(user_id, '')})"


def commit_and_rerun(widget_key, change):
    # selectors re-read the task value on the next run
    asyncio.run(change)
    st.session_state.pop(widget_key, None)
    st.rerun()


st.title(project.name)
st.caption(project.description or "No description")
st.metric("Tasks", len(controller.tasks))

if controller.error:
    st.error(controller.error)

left, right = st.columns(2)

with left:
    st.subheader("Tasks")
    with st.form("new-task", clear_on_submit=True):
        title = st.text_input("Title")
        description = st.text_input("Description (optional)")
        deadline = st.date_input("Deadline", value=None)
        assignee = st.selectbox("Assignee", options=assignee_options, format_func=assignee_option_label)
        create = st.form_submit_button("Create task")
    if create and title.strip():
        try:
            client.create_task(
                project_id,
                title=title,
                description=description,
                deadline=deadline.isoformat() if deadline else None,
                assigned_to_user_id=assignee,
            )
            refresh_all()
            st.rerun()
        except ApiError as exc:
            st.error(user_message(exc, "Failed to create task"))

    if not controller.tasks:
        st.info("No tasks yet.")
    for task in controller.tasks:
        meta = f"Deadline: {task.deadline}" if task.deadline else "No deadline"
        if task.assigned_to_user_id:
            meta += f" • Assigned: {labels.get(task.assigned_to_user_id) or short_id(task.assigned_to_user_id)}"
        if st.button(f"{task.title} · {status_label(task.status)}", key=f"select-{task.id}", help=meta):
            st.session_state.selected_task_id = task.id

    if controller.tasks and st.button("Generate CSV Export", key="export-csv-btn"):
        df_exp = tasks_to_df(controller.tasks, start_of_today(), due_soon_days=cfg.due_soon_days)
        csv_data = df_exp.to_csv(index=False).encode("utf-8")
        st.download_button("Download tasks.csv", data=csv_data, file_name="tasks.csv", mime="text/csv", key="dl-csv")

selected_id = st.session_state.get("selected_task_id")
if controller.find(selected_id or "") is None and controller.tasks:
    selected_id = controller.tasks[0].id
    st.session_state.selected_task_id = selected_id

with right:
    st.subheader("Task Details")
    task = controller.find(selected_id or "")
    if task is None:
        st.info("Select a task.")
        st.stop()

    thread = comment_thread(st.session_state, client, task.id, refresh=entered)

    st.markdown(f"**{task.title}**")
    if task.description:
        st.caption(task.description)

    c1, c2, c3 = st.columns(3)
    new_status = c1.selectbox(
        "Status", options=list(STATUSES), index=list(STATUSES).index(task.status), format_func=status_label,
        key=f"status-{task.id}",
    )
    new_deadline = c2.date_input("Deadline", value=parse_deadline(task.deadline), key=f"deadline-{task.id}")
    new_assignee = c3.selectbox(
        "Assignee",
        options=assignee_options,
        index=assignee_options.index(task.assigned_to_user_id) if task.assigned_to_user_id in assignee_options else 0,
        format_func=assignee_option_label,
        key=f"assignee-{task.id}",
    )
    if new_status != task.status:
        commit_and_rerun(f"status-{task.id}", controller.move_task(task.id, new_status))
    if new_deadline != parse_deadline(task.deadline):
        commit_and_rerun(f"deadline-{task.id}", controller.set_deadline(task.id, new_deadline))
    if (new_assignee or None) != task.assigned_to_user_id:
        commit_and_rerun(f"assignee-{task.id}", controller.set_assignee(task.id, new_assignee))

    summary = compose_summary(
        task,
        thread.comments,
        assignee_label(task, labels),
        status_label,
        today=start_of_today(),
        due_soon_days=cfg.due_soon_days,
    )
    st.markdown(f"#### {summary.title} {badge_html(summary.badge.label, summary.badge.severity)}", unsafe_allow_html=True)
    st.markdown("\n".join(f"- {b}" for b in summary.bullets))
    st.markdown(f"**Suggested next step:** {summary.next_step}")

    if st.button("Delete task", key=f"delete-{task.id}"):
        if asyncio.run(controller.delete_task(task.id)):
            st.session_state.selected_task_id = None
        st.rerun()

    st.markdown(f"#### Comments ({len(thread.comments)})")
    if thread.error:
        st.error(thread.error)
    with st.form(f"comment-{task.id}", clear_on_submit=True):
        body = st.text_area("Write a comment", height=90)
        if st.form_submit_button("Add comment"):
            asyncio.run(thread.add(body))
            st.rerun()
    if not thread.comments:
        st.caption("No comments yet.")
    for comment in thread.comments:
        with st.container(border=True):
            st.caption(short_id(comment.author_user_id))
            st.write(comment.body)
            st.caption(comment.created_at)
            if st.button("Delete", key=f"del-comment-{comment.id}"):
                asyncio.run(thread.remove(comment.id))
                st.rerun()
