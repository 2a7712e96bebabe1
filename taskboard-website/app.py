import streamlit as st

from taskboard.api_client import TaskboardApiClient
from taskboard.auth import clear_session, current_identity, is_logged_in, login
from taskboard.config import get_config
from taskboard.errors import ApiError, user_message
from taskboard.log import setup_logging
from taskboard.theme import set_theme
from taskboard.views import enter_page, reset_views

set_theme()
enter_page(st.session_state, "home")
setup_logging(get_config().log_level)

st.title("Task Board")

if is_logged_in(st.session_state):
    identity = current_identity(st.session_state)
    st.success(f"Signed in as {identity.name or identity.email}")
    if identity.root_admin:
        st.info("Root Admin Mode: the Analytics page is available.")
    st.markdown("Use the sidebar to open the dashboard, a project, its board, or your notifications.")
    if st.button("Log out"):
        clear_session(st.session_state)
        reset_views(st.session_state)
        st.rerun()
else:
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")
    if submitted:
        client = TaskboardApiClient.from_config()
        try:
            login(client, email, password, st.session_state)
            st.rerun()
        except ApiError as exc:
            st.error(user_message(exc, "Login failed"))
