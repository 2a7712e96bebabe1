"""Member display labels and assignee resolution.

Labels look like ``"02 • Ada Lovelace"``: the member's position in the
role/user-id ordering followed by the best available name.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from taskboard.models import ADMIN, Member, Task, UserView
from taskboard.summary import UNASSIGNED
from taskboard.transitions import invoke_remote

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}", re.IGNORECASE)

INVALID_MEMBER_INPUT = "Enter a valid user UUID or an email address"


def short_id(value: str) -> str:
    v = value.strip()
    if len(v) <= 12:
        return v
    return f"{v[:8]}…{v[-4:]}"


def sort_members(members: Iterable[Member]) -> List[Member]:
    return sorted(members, key=lambda m: (m.role, m.user_id))


def member_label_map(members: Iterable[Member], users: Mapping[str, UserView]) -> Dict[str, str]:
    labels: Dict[str, str] = {}
    for idx, member in enumerate(sort_members(members), start=1):
        user = users.get(member.user_id)
        name = (user.name if user else "") or (user.email if user else "") or short_id(member.user_id)
        labels[member.user_id] = f"{idx:02d} • {name}"
    return labels


def assignee_label(task: Task, labels: Mapping[str, str]) -> str:
    user_id = task.assigned_to_user_id
    if not user_id:
        return UNASSIGNED
    return labels.get(user_id) or short_id(user_id)


def is_org_admin(members: Iterable[Member], user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    own = next((m for m in members if m.user_id == user_id), None)
    return own is not None and own.role.upper() == ADMIN


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.fullmatch(value))


def resolve_member_user_id(raw: str, lookup_by_email: Callable[[str], UserView]) -> Optional[str]:
    """Turn the add-member input (a user UUID or an email) into a user id.

    Blank input gives None. Anything that is neither a UUID nor contains an
    ``@`` raises ``ValueError``; lookup failures propagate as ``ApiError``.
    """
    value = (raw or "").strip()
    if not value:
        return None
    if is_uuid(value):
        return value
    if "@" not in value:
        raise ValueError(INVALID_MEMBER_INPUT)
    return lookup_by_email(value).id


async def resolve_member_users(
    user_ids: Sequence[str],
    fetch_user: Callable[[str], UserView],
    known: Optional[Mapping[str, UserView]] = None,
) -> Dict[str, UserView]:
    """Look up users not in ``known``; failed lookups are dropped, not raised."""
    resolved: Dict[str, UserView] = dict(known or {})
    missing = [uid for uid in dict.fromkeys(user_ids) if uid not in resolved]
    if not missing:
        return resolved

    results = await asyncio.gather(
        *(invoke_remote(fetch_user, uid) for uid in missing),
        return_exceptions=True,
    )
    for uid, result in zip(missing, results):
        if isinstance(result, BaseException):
            logger.warning("User lookup for %s failed: %s", uid, result)
            continue
        resolved[result.id] = result
    return resolved
