import asyncio

from taskboard.comments import CommentThread
from taskboard.errors import ApiError
from taskboard.models import Comment


class FakeComments:
    def __init__(self):
        self.rows = [Comment(id="c1", task_id="t1", author_user_id="u1", body="first", created_at="2024-01-01T10:00:00Z")]
        self.fail_create = None
        self.fail_fetch = None

    def fetch(self, task_id):
        if self.fail_fetch:
            raise self.fail_fetch
        return list(self.rows)

    def create(self, task_id, body):
        if self.fail_create:
            raise self.fail_create
        self.rows.append(Comment(id=f"c{len(self.rows) + 1}", task_id=task_id, author_user_id="u1", body=body,
                                 created_at=f"2024-01-0{len(self.rows) + 1}T10:00:00Z"))

    def delete(self, task_id, comment_id):
        self.rows = [c for c in self.rows if c.id != comment_id]


def make_thread(api):
    return CommentThread("t1", fetch_comments=api.fetch, create_comment=api.create, delete_comment=api.delete)


def test_refresh_and_latest():
    thread = make_thread(FakeComments())
    assert asyncio.run(thread.refresh()) is True
    assert thread.latest.id == "c1"


def test_add_refetches():
    api = FakeComments()
    thread = make_thread(api)
    assert asyncio.run(thread.add("second")) is True
    assert [c.body for c in thread.comments] == ["first", "second"]
    assert thread.latest.body == "second"


def test_blank_comment_is_ignored():
    api = FakeComments()
    thread = make_thread(api)
    assert asyncio.run(thread.add("   ")) is False
    assert len(api.rows) == 1
    assert thread.error is None


def test_add_failure_records_error():
    api = FakeComments()
    api.fail_create = ApiError(403, "Not a member")
    thread = make_thread(api)
    assert asyncio.run(thread.add("hello")) is False
    assert thread.error == "Not a member"


def test_remove_then_refresh_failure():
    api = FakeComments()
    thread = make_thread(api)
    asyncio.run(thread.refresh())
    api.fail_fetch = ApiError(500, "")
    assert asyncio.run(thread.remove("c1")) is False
    assert thread.error == "Failed to load comments"
    assert api.rows == []
