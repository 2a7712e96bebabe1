import asyncio

import pytest

from taskboard.errors import ApiError
from taskboard.members import (
    assignee_label,
    is_org_admin,
    member_label_map,
    resolve_member_user_id,
    resolve_member_users,
    short_id,
    sort_members,
)
from taskboard.models import ADMIN, MEMBER, Member, Task, UserView


MEMBERS = [
    Member(org_id="o1", user_id="user-b", role=MEMBER),
    Member(org_id="o1", user_id="user-a", role=MEMBER),
    Member(org_id="o1", user_id="boss", role=ADMIN),
]


def test_short_id():
    assert short_id("  abc ") == "abc"
    assert short_id("0123456789abcdef0123") == "01234567…0123"


def test_sort_members_by_role_then_id():
    assert [m.user_id for m in sort_members(MEMBERS)] == ["boss", "user-a", "user-b"]


def test_member_labels_fall_back_to_email_and_id():
    users = {
        "boss": UserView(id="boss", name="Grace"),
        "user-a": UserView(id="user-a", email="a@example.com"),
    }
    labels = member_label_map(MEMBERS, users)
    assert labels == {
        "boss": "01 • Grace",
        "user-a": "02 • a@example.com",
        "user-b": "03 • user-b",
    }


def test_assignee_label():
    labels = {"u1": "01 • Ada"}
    assert assignee_label(Task(id="t", project_id="p", title="x"), labels) == "Unassigned"
    assert assignee_label(Task(id="t", project_id="p", title="x", assigned_to_user_id="u1"), labels) == "01 • Ada"
    assert assignee_label(Task(id="t", project_id="p", title="x", assigned_to_user_id="ghost"), labels) == "ghost"


def test_is_org_admin():
    assert is_org_admin(MEMBERS, "boss")
    assert not is_org_admin(MEMBERS, "user-a")
    assert not is_org_admin(MEMBERS, "stranger")
    assert not is_org_admin(MEMBERS, None)


def test_resolve_member_users_drops_failures():
    calls = []

    async def fetch_user(user_id):
        calls.append(user_id)
        if user_id == "bad":
            raise ApiError(404, "User not found")
        return UserView(id=user_id, name=user_id.upper())

    known = {"cached": UserView(id="cached", name="Cached")}
    users = asyncio.run(resolve_member_users(["cached", "ok", "bad", "ok"], fetch_user, known=known))

    assert sorted(calls) == ["bad", "ok"]
    assert set(users) == {"cached", "ok"}
    assert users["ok"].name == "OK"
    assert known == {"cached": UserView(id="cached", name="Cached")}


def test_resolve_member_users_nothing_missing():
    def fetch_user(user_id):
        raise AssertionError("should not be called")

    known = {"u1": UserView(id="u1")}
    assert asyncio.run(resolve_member_users(["u1"], fetch_user, known=known)) == known


def test_resolve_member_user_id():
    uid = "3f2b8c1e-9a4d-4e2f-8b1a-0c9d8e7f6a5b"
    lookups = []

    def lookup(email):
        lookups.append(email)
        return UserView(id="u-from-email", email=email)

    assert resolve_member_user_id("  ", lookup) is None
    assert resolve_member_user_id(uid.upper(), lookup) == uid.upper()
    assert resolve_member_user_id(" bo@example.com ", lookup) == "u-from-email"
    assert lookups == ["bo@example.com"]
    with pytest.raises(ValueError, match="valid user UUID or an email"):
        resolve_member_user_id("bob", lookup)


def test_resolve_member_user_id_lookup_failure_propagates():
    def lookup(email):
        raise ApiError(404, "User not found")

    with pytest.raises(ApiError):
        resolve_member_user_id("ghost@example.com", lookup)
