import streamlit as st

from taskboard.api_client import TaskboardApiClient
from taskboard.auth import current_identity, is_logged_in
from taskboard.errors import ApiError, user_message
from taskboard.models import unread_count
from taskboard.theme import set_theme
from taskboard.views import enter_page

set_theme(page_title="Notifications")
enter_page(st.session_state, "notifications")

if not is_logged_in(st.session_state):
    st.warning("Please log in from the home page.")
    st.stop()

client = TaskboardApiClient.from_config(identity=current_identity(st.session_state))

st.title("Notifications")
st.caption("Activity updates from assignments and comments.")

try:
    rows = client.list_notifications()
except ApiError as exc:
    st.error(user_message(exc, "Failed to load notifications"))
    st.stop()

st.metric("Unread", unread_count(rows))
if st.button("Refresh"):
    st.rerun()

if not rows:
    st.info("No notifications.")
for n in rows:
    with st.container(border=True):
        st.caption(n.type)
        st.write(n.message)
        st.caption(n.created_at)
        if n.read:
            st.caption("Read")
        elif st.button("Mark read", key=f"read-{n.id}"):
            try:
                client.mark_notification_read(n.id)
            except ApiError as exc:
                st.error(user_message(exc, "Failed to mark notification read"))
            else:
                st.rerun()
