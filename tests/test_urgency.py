from datetime import date, timedelta

import pytest

from taskboard.models import DONE, IN_PROGRESS, TODO
from taskboard.urgency import (
    URGENCY_DUE_SOON,
    URGENCY_NONE,
    URGENCY_ON_TRACK,
    URGENCY_OVERDUE,
    classify_urgency,
    parse_deadline,
)

TODAY = date(2024, 1, 10)


def _iso(d):
    return d.isoformat()


@pytest.mark.parametrize("deadline", ["2023-01-01", "2024-01-09", "2024-01-10", "2024-01-17", "2030-05-05", None, "garbage"])
def test_done_is_never_flagged(deadline):
    assert classify_urgency(DONE, deadline, TODAY) == URGENCY_NONE


@pytest.mark.parametrize("status", [TODO, IN_PROGRESS, DONE])
def test_no_deadline_is_none(status):
    assert classify_urgency(status, None, TODAY) == URGENCY_NONE
    assert classify_urgency(status, "", TODAY) == URGENCY_NONE


def test_yesterday_is_overdue():
    assert classify_urgency(TODO, _iso(TODAY - timedelta(days=1)), TODAY) == URGENCY_OVERDUE


def test_due_soon_window_is_inclusive():
    assert classify_urgency(TODO, _iso(TODAY), TODAY) == URGENCY_DUE_SOON
    assert classify_urgency(TODO, _iso(TODAY + timedelta(days=3)), TODAY) == URGENCY_DUE_SOON
    assert classify_urgency(IN_PROGRESS, _iso(TODAY + timedelta(days=7)), TODAY) == URGENCY_DUE_SOON


def test_beyond_window_is_on_track():
    assert classify_urgency(TODO, _iso(TODAY + timedelta(days=8)), TODAY) == URGENCY_ON_TRACK


def test_custom_window():
    assert classify_urgency(TODO, _iso(TODAY + timedelta(days=3)), TODAY, due_soon_days=2) == URGENCY_ON_TRACK


@pytest.mark.parametrize("raw", ["2024-13-01", "2024-02-30", "01/10/2024", "2024-1-5", "2024-01-10T00:00:00", "tomorrow"])
def test_malformed_deadline_is_treated_as_absent(raw):
    assert parse_deadline(raw) is None
    assert classify_urgency(TODO, raw, TODAY) == URGENCY_NONE


def test_parse_deadline_accepts_dates():
    assert parse_deadline("2024-01-10") == TODAY
    assert parse_deadline(TODAY) == TODAY
