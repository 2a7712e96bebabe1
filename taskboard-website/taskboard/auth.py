"""Session identity helpers.

Identity lives in a session-state mapping (``st.session_state`` in the app)
and is handed explicitly to the view-models; nothing reads it globally.
"""
from typing import Optional

from taskboard.models import Identity

SESSION_KEY = "identity"


def login(client, email, password, session_state):
    identity = client.login(email, password)
    set_session(session_state, identity)
    return identity


def set_session(session_state, identity: Identity):
    session_state[SESSION_KEY] = identity


def clear_session(session_state):
    session_state.pop(SESSION_KEY, None)


def current_identity(session_state) -> Optional[Identity]:
    identity = session_state.get(SESSION_KEY)
    return identity if isinstance(identity, Identity) else None


def is_logged_in(session_state):
    identity = current_identity(session_state)
    return bool(identity and identity.access_token)
