from taskboard import auth
from taskboard.models import Identity


class FakeClient:
    def __init__(self, identity):
        self.identity = identity
        self.calls = []

    def login(self, email, password):
        self.calls.append((email, password))
        return self.identity


def test_login_success():
    session_state = {}
    identity = Identity(user_id="u1", name="Ada", access_token="tok")
    client = FakeClient(identity)
    assert auth.login(client, "ada@example.com", "pw", session_state) == identity
    assert client.calls == [("ada@example.com", "pw")]
    assert auth.is_logged_in(session_state) == True
    assert auth.current_identity(session_state) == identity


def test_login_failure():
    assert auth.is_logged_in({}) == False
    assert auth.is_logged_in({"identity": Identity(user_id="u1")}) == False
    assert auth.current_identity({"identity": "not-an-identity"}) is None


def test_clear_session():
    session_state = {}
    auth.set_session(session_state, Identity(user_id="u1", access_token="tok"))
    auth.clear_session(session_state)
    assert auth.is_logged_in(session_state) == False
    auth.clear_session(session_state)
