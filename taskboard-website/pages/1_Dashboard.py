import asyncio

import pandas as pd
import streamlit as st

from taskboard.api_client import TaskboardApiClient
from taskboard.auth import current_identity, is_logged_in
from taskboard.board import my_status_counts, team_status_counts
from taskboard.errors import ApiError, user_message
from taskboard.members import (
    is_org_admin,
    member_label_map,
    resolve_member_user_id,
    resolve_member_users,
    sort_members,
)
from taskboard.models import ADMIN, MEMBER
from taskboard.theme import set_theme
from taskboard.views import enter_page, reset_views

set_theme(page_title="Dashboard")
enter_page(st.session_state, "dashboard")

if not is_logged_in(st.session_state):
    st.warning("Please log in from the home page.")
    st.stop()

identity = current_identity(st.session_state)
client = TaskboardApiClient.from_config(identity=identity)

st.title("Student Progress")
st.caption("Create teams, then add projects under them.")
if identity.root_admin:
    st.info("Root Admin Mode: teams are read-only.")

if st.session_state.get("dashboard_error"):
    st.error(st.session_state.pop("dashboard_error"))


def run_action(fn, default_message):
    """Run a mutation; on failure keep the message for the next run, then rerun."""
    try:
        fn()
    except ValueError as exc:
        st.session_state.dashboard_error = str(exc)
    except ApiError as exc:
        st.session_state.dashboard_error = user_message(exc, default_message)
    st.rerun()


if not identity.root_admin:
    with st.form("new-team", clear_on_submit=True):
        new_team = st.text_input("New team name")
        if st.form_submit_button("Create team") and new_team.strip():
            run_action(lambda: client.create_org(new_team.strip()), "Failed to create org")

try:
    orgs = client.list_orgs()
except ApiError as exc:
    st.error(user_message(exc, "Failed to load teams"))
    st.stop()

if not orgs:
    st.info("No teams yet.")
    st.stop()

org_names = {o.id: o.name for o in orgs}
selected_org_id = st.selectbox("Team", options=list(org_names), format_func=lambda oid: org_names[oid])

try:
    projects = client.list_projects(selected_org_id)
    members = client.fetch_org_members(selected_org_id)
except ApiError as exc:
    st.error(user_message(exc, "Failed to load team"))
    st.stop()

users = asyncio.run(
    resolve_member_users(
        [m.user_id for m in members],
        client.fetch_user,
        known=st.session_state.get("member_users"),
    )
)
st.session_state.member_users = users
labels = member_label_map(members, users)
admin = is_org_admin(members, identity.user_id)

try:
    if admin:
        counts = team_status_counts(client.fetch_project_tasks(p.id) for p in projects)
        st.subheader("Team progress")
    else:
        counts = my_status_counts(client.fetch_my_tasks(identity.user_id), [p.id for p in projects])
        st.subheader("My progress")
except ApiError as exc:
    st.error(user_message(exc, "Failed to load analytics"))
    counts = None

if counts is not None:
    c1, c2, c3 = st.columns(3)
    c1.metric("To Do", counts.todo)
    c2.metric("In Progress", counts.in_progress)
    c3.metric("Done", counts.done)

st.subheader("Projects")
if admin:
    with st.form("new-project", clear_on_submit=True):
        project_name = st.text_input("Project name")
        project_desc = st.text_input("Description (optional)")
        if st.form_submit_button("Create project") and project_name.strip():
            run_action(
                lambda: client.create_project(selected_org_id, project_name.strip(), project_desc),
                "Failed to create project",
            )
if not projects:
    st.info("No projects in this team.")
for project in projects:
    col_name, col_open, col_delete = st.columns([4, 1, 1])
    col_name.markdown(f"**{project.name}**  \n{project.description or 'No description'}")
    if col_open.button("Open", key=f"open-{project.id}"):
        st.session_state.project_id = project.id
        st.switch_page("pages/2_Project.py")
    if admin:
        confirm = col_delete.checkbox("Confirm", key=f"confirm-delete-{project.id}", help="Also deletes its tasks")
        if col_delete.button("Delete", key=f"delete-{project.id}", disabled=not confirm):
            if st.session_state.get("project_id") == project.id:
                st.session_state.project_id = None
            reset_views(st.session_state)
            run_action(lambda: client.delete_project(project.id), "Failed to delete project")

st.subheader("Members")
if admin:
    with st.form("new-member", clear_on_submit=True):
        raw_member = st.text_input("User email or UUID")
        role = st.selectbox("Role", options=[MEMBER, ADMIN])
        if st.form_submit_button("Add member"):

            def add_member():
                user_id = resolve_member_user_id(raw_member, client.lookup_user_by_email)
                if user_id:
                    client.add_org_member(selected_org_id, user_id, role)

            run_action(add_member, "Failed to add member")

st.dataframe(
    pd.DataFrame(
        [{"member": labels[m.user_id], "role": m.role} for m in sort_members(members)],
        columns=["member", "role"],
    ),
    use_container_width=True,
    hide_index=True,
)
if admin:
    removable = [m for m in sort_members(members) if m.user_id != identity.user_id]
    if removable:
        with st.form("remove-member"):
            target = st.selectbox("Remove member", options=[m.user_id for m in removable], format_func=labels.get)
            confirmed = st.checkbox("Remove this member from the team?")
            if st.form_submit_button("Remove") and confirmed:
                run_action(lambda: client.remove_org_member(selected_org_id, target), "Failed to remove member")
