"""Entities handed to the view-models by the API layer.

Wire payloads use camelCase keys; the dataclasses use snake_case fields and
convert in ``from_dict`` / ``to_dict``. Nothing here talks to the network.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


TODO = "TODO"
IN_PROGRESS = "IN_PROGRESS"
DONE = "DONE"
STATUSES: Tuple[str, ...] = (TODO, IN_PROGRESS, DONE)

MEMBER = "MEMBER"
ADMIN = "ADMIN"


@dataclass(frozen=True)
class Task:
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    status: str = TODO
    deadline: Optional[str] = None  # YYYY-MM-DD, no time component
    assigned_to_user_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            project_id=str(data.get("projectId") or ""),
            title=data.get("title") or "",
            description=data.get("description"),
            status=data.get("status") or TODO,
            deadline=data.get("deadline"),
            assigned_to_user_id=data.get("assignedToUserId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "deadline": self.deadline,
            "assignedToUserId": self.assigned_to_user_id,
        }


@dataclass(frozen=True)
class Comment:
    id: str
    task_id: str
    author_user_id: str
    body: str
    created_at: str  # sortable ISO-like text

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=str(data["id"]),
            task_id=str(data.get("taskId") or ""),
            author_user_id=str(data.get("authorUserId") or ""),
            body=data.get("body") or "",
            created_at=data.get("createdAt") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "authorUserId": self.author_user_id,
            "body": self.body,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class Member:
    org_id: str
    user_id: str
    role: str = MEMBER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        return cls(
            org_id=str(data.get("orgId") or ""),
            user_id=str(data["userId"]),
            role=data.get("role") or MEMBER,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"orgId": self.org_id, "userId": self.user_id, "role": self.role}


@dataclass(frozen=True)
class UserView:
    id: str
    name: str = ""
    email: str = ""
    root_admin: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserView":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            root_admin=bool(data.get("rootAdmin", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "rootAdmin": self.root_admin,
        }


@dataclass(frozen=True)
class Org:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Org":
        return cls(id=str(data["id"]), name=data.get("name") or "")


@dataclass(frozen=True)
class Project:
    id: str
    org_id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=str(data["id"]),
            org_id=str(data.get("orgId") or ""),
            name=data.get("name") or "",
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str
    type: str
    message: str
    ref_type: Optional[str] = None
    ref_id: Optional[str] = None
    read: bool = False
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            id=str(data["id"]),
            user_id=str(data.get("userId") or ""),
            type=data.get("type") or "",
            message=data.get("message") or "",
            ref_type=data.get("refType"),
            ref_id=data.get("refId"),
            read=bool(data.get("read", False)),
            created_at=data.get("createdAt") or "",
        )


@dataclass(frozen=True)
class Identity:
    """Already-established session identity, passed explicitly to the core."""

    user_id: str
    name: str = ""
    email: str = ""
    root_admin: bool = False
    access_token: Optional[str] = None

    @classmethod
    def from_auth_response(cls, data: Dict[str, Any]) -> "Identity":
        user = UserView.from_dict(data.get("user") or {})
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            root_admin=user.root_admin,
            access_token=data.get("accessToken"),
        )


def unread_count(notifications) -> int:
    return sum(1 for n in notifications if not n.read)
