import json
from unittest import mock

import pytest
import requests

from taskboard.api_client import TaskboardApiClient
from taskboard.config import TaskboardConfig
from taskboard.errors import ApiError, user_message
from taskboard.models import DONE, Identity


def fake_response(status_code=200, body=None, reason="OK"):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.reason = reason
    if body is None:
        resp.text = ""
    elif isinstance(body, str):
        resp.text = body
    else:
        resp.text = json.dumps(body)
    return resp


@pytest.fixture
def client():
    return TaskboardApiClient(base_url="http://api.test/", token="tok", timeout_seconds=5)


def test_request_sends_bearer_and_json(client):
    with mock.patch.object(requests.Session, "request", return_value=fake_response(body={"id": "t1", "status": DONE})) as req:
        task = client.update_task("t1", {"status": DONE})

    assert task.status == DONE
    args, kwargs = req.call_args
    assert args == ("PATCH", "http://api.test/tasks/t1")
    assert kwargs["json"] == {"status": DONE}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["timeout"] == 5


def test_no_content_returns_none(client):
    with mock.patch.object(requests.Session, "request", return_value=fake_response(status_code=204)):
        assert client.request("DELETE", "tasks/t1") is None
        assert client.update_task("t1", {"deadline": None}) is None


def test_error_body_text_is_used(client):
    resp = fake_response(status_code=403, body={"error": "Not allowed"}, reason="Forbidden")
    with mock.patch.object(requests.Session, "request", return_value=resp):
        with pytest.raises(ApiError) as info:
            client.delete_task("t1")
    assert info.value.status == 403
    assert info.value.error == "Not allowed"
    assert str(info.value) == "HTTP 403: Not allowed"


def test_error_falls_back_to_raw_text_then_reason(client):
    with mock.patch.object(requests.Session, "request", return_value=fake_response(500, "gateway down", "Server Error")):
        with pytest.raises(ApiError) as info:
            client.list_orgs()
    assert info.value.error == "gateway down"

    with mock.patch.object(requests.Session, "request", return_value=fake_response(502, None, "Bad Gateway")):
        with pytest.raises(ApiError) as info:
            client.list_orgs()
    assert info.value.error == "Bad Gateway"


def test_transport_failure_is_status_zero(client):
    with mock.patch.object(requests.Session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ApiError) as info:
            client.me()
    assert info.value.status == 0
    assert info.value.error == ""
    assert "refused" in str(info.value)
    assert user_message(info.value, "Failed to load teams") == "Failed to load teams"


def test_login_stores_token():
    client = TaskboardApiClient(base_url="http://api.test")
    payload = {"user": {"id": "u1", "name": "Ada", "email": "ada@example.com"}, "accessToken": "new-token"}
    with mock.patch.object(requests.Session, "request", return_value=fake_response(body=payload)) as req:
        identity = client.login("ada@example.com", "pw")

    assert identity.user_id == "u1"
    assert client.token == "new-token"
    assert "Authorization" not in req.call_args.kwargs["headers"]


def test_my_tasks_filter_is_a_query_param(client):
    with mock.patch.object(requests.Session, "request", return_value=fake_response(body=[])) as req:
        assert client.fetch_my_tasks("a b") == []
    assert req.call_args.args[1] == "http://api.test/tasks"
    assert req.call_args.kwargs["params"] == {"assignedToUserId": "a b"}


def test_from_config_uses_identity_token():
    cfg = TaskboardConfig(
        api_base_url="http://gw:8090",
        api_timeout_seconds=12,
        verify_ssl=False,
        due_soon_days=7,
        log_level="INFO",
    )
    client = TaskboardApiClient.from_config(cfg, Identity(user_id="u1", access_token="abc"))
    assert client.base_url == "http://gw:8090"
    assert client.token == "abc"
    assert client.verify_ssl is False
    assert client.timeout_seconds == 12


def test_team_management_endpoints(client):
    responses = [
        fake_response(status_code=201, body={"id": "o1", "name": "Alpha"}),
        fake_response(body={"id": "u9", "email": "bo@example.com"}),
        fake_response(status_code=201, body={"orgId": "o1", "userId": "u9", "role": "ADMIN"}),
        fake_response(status_code=204),
        fake_response(status_code=201, body={"id": "p1", "orgId": "o1", "name": "Site", "description": None}),
    ]
    with mock.patch.object(requests.Session, "request", side_effect=responses) as req:
        assert client.create_org("Alpha").name == "Alpha"
        assert client.lookup_user_by_email("bo@example.com").id == "u9"
        assert client.add_org_member("o1", "u9", "ADMIN").role == "ADMIN"
        assert client.remove_org_member("o1", "u9") is None
        assert client.create_project("o1", "Site", "").id == "p1"

    calls = [(c.args, c.kwargs.get("json"), c.kwargs.get("params")) for c in req.call_args_list]
    assert calls == [
        (("POST", "http://api.test/orgs"), {"name": "Alpha"}, None),
        (("GET", "http://api.test/auth/users/lookup"), None, {"email": "bo@example.com"}),
        (("POST", "http://api.test/orgs/o1/members"), {"userId": "u9", "role": "ADMIN"}, None),
        (("DELETE", "http://api.test/orgs/o1/members/u9"), None, None),
        (("POST", "http://api.test/orgs/o1/projects"), {"name": "Site", "description": None}, None),
    ]


def test_delete_project_removes_tasks_first(client):
    with mock.patch.object(requests.Session, "request", return_value=fake_response(status_code=204)) as req:
        client.delete_project("p1")
    assert [c.args for c in req.call_args_list] == [
        ("DELETE", "http://api.test/projects/p1/tasks"),
        ("DELETE", "http://api.test/projects/p1"),
    ]


def test_delete_project_stops_when_task_cleanup_fails(client):
    resp = fake_response(status_code=403, body={"error": "Only admins"})
    with mock.patch.object(requests.Session, "request", return_value=resp) as req:
        with pytest.raises(ApiError):
            client.delete_project("p1")
    assert req.call_count == 1
