"""HTTP client for the task management API (gateway on port 8090 by default).

All methods are synchronous ``requests`` calls. Non-2xx replies raise
``ApiError`` carrying the HTTP status and the server's ``error`` text.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from taskboard.config import TaskboardConfig, get_config
from taskboard.errors import ApiError
from taskboard.models import (
    MEMBER,
    Comment,
    Identity,
    Member,
    Notification,
    Org,
    Project,
    Task,
    UserView,
)

logger = logging.getLogger(__name__)


class TaskboardApiClient:
    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        verify_ssl: bool = True,
        timeout_seconds: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.verify_ssl = bool(verify_ssl)
        self.timeout_seconds = int(timeout_seconds)

        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: Optional[TaskboardConfig] = None,
        identity: Optional[Identity] = None,
    ) -> "TaskboardApiClient":
        cfg = config or get_config()
        return cls(
            base_url=cfg.api_base_url,
            token=identity.access_token if identity else None,
            verify_ssl=cfg.verify_ssl,
            timeout_seconds=cfg.api_timeout_seconds,
        )

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
    ) -> Any:
        method_u = (method or "GET").upper().strip()
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.base_url}{path}"

        try:
            resp = self._session.request(
                method_u,
                url,
                params=params,
                json=json_body,
                headers=self._build_headers(),
                verify=self.verify_ssl,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method_u, url, exc)
            raise ApiError(0, "", detail=str(exc)) from exc

        raw = resp.text or ""

        if not 200 <= int(resp.status_code) < 300:
            body: Any = None
            if raw:
                try:
                    body = json.loads(raw)
                except ValueError:
                    body = None
            detail = body.get("error") if isinstance(body, dict) else None
            error = detail or raw or resp.reason or f"HTTP {resp.status_code}"
            logger.warning("%s %s -> %s: %s", method_u, url, resp.status_code, error)
            raise ApiError(int(resp.status_code), str(error))

        if resp.status_code == 204 or not raw:
            return None
        return json.loads(raw)

    # -------------------- auth --------------------
    def login(self, email: str, password: str) -> Identity:
        data = self.request("POST", "/auth/login", json_body={"email": email, "password": password})
        identity = Identity.from_auth_response(data or {})
        self.token = identity.access_token
        return identity

    def me(self) -> UserView:
        return UserView.from_dict(self.request("GET", "/auth/me"))

    def fetch_user(self, user_id: str) -> UserView:
        return UserView.from_dict(self.request("GET", f"/auth/users/{quote(user_id, safe='')}"))

    def lookup_user_by_email(self, email: str) -> UserView:
        return UserView.from_dict(self.request("GET", "/auth/users/lookup", params={"email": email}))

    # -------------------- orgs / projects --------------------
    def list_orgs(self) -> List[Org]:
        return [Org.from_dict(o) for o in self.request("GET", "/orgs") or []]

    def create_org(self, name: str) -> Org:
        return Org.from_dict(self.request("POST", "/orgs", json_body={"name": name}))

    def fetch_org_members(self, org_id: str) -> List[Member]:
        return [Member.from_dict(m) for m in self.request("GET", f"/orgs/{org_id}/members") or []]

    def add_org_member(self, org_id: str, user_id: str, role: str = MEMBER) -> Optional[Member]:
        data = self.request("POST", f"/orgs/{org_id}/members", json_body={"userId": user_id, "role": role})
        return Member.from_dict(data) if data else None

    def remove_org_member(self, org_id: str, user_id: str) -> None:
        self.request("DELETE", f"/orgs/{org_id}/members/{user_id}")

    def list_projects(self, org_id: str) -> List[Project]:
        return [Project.from_dict(p) for p in self.request("GET", f"/orgs/{org_id}/projects") or []]

    def create_project(self, org_id: str, name: str, description: Optional[str] = None) -> Project:
        body = {"name": name, "description": description or None}
        return Project.from_dict(self.request("POST", f"/orgs/{org_id}/projects", json_body=body))

    def fetch_project(self, project_id: str) -> Project:
        return Project.from_dict(self.request("GET", f"/projects/{project_id}"))

    def delete_project(self, project_id: str) -> None:
        """Delete the project's tasks, then the project itself."""
        self.request("DELETE", f"/projects/{project_id}/tasks")
        self.request("DELETE", f"/projects/{project_id}")

    # -------------------- tasks --------------------
    def fetch_project_tasks(self, project_id: str) -> List[Task]:
        return [Task.from_dict(t) for t in self.request("GET", f"/projects/{project_id}/tasks") or []]

    def fetch_my_tasks(self, user_id: str) -> List[Task]:
        data = self.request("GET", "/tasks", params={"assignedToUserId": user_id})
        return [Task.from_dict(t) for t in data or []]

    def create_task(
        self,
        project_id: str,
        *,
        title: str,
        description: Optional[str] = None,
        deadline: Optional[str] = None,
        assigned_to_user_id: Optional[str] = None,
    ) -> Task:
        body = {
            "title": title,
            "description": description or None,
            "status": "TODO",
            "deadline": deadline or None,
            "assignedToUserId": assigned_to_user_id or None,
        }
        return Task.from_dict(self.request("POST", f"/projects/{project_id}/tasks", json_body=body))

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """PATCH partial wire fields, e.g. ``{"status": "DONE"}``."""
        data = self.request("PATCH", f"/tasks/{task_id}", json_body=fields)
        return Task.from_dict(data) if data else None

    def delete_task(self, task_id: str) -> None:
        self.request("DELETE", f"/tasks/{task_id}")

    # -------------------- comments --------------------
    def fetch_task_comments(self, task_id: str) -> List[Comment]:
        return [Comment.from_dict(c) for c in self.request("GET", f"/tasks/{task_id}/comments") or []]

    def create_comment(self, task_id: str, body: str) -> Optional[Comment]:
        data = self.request("POST", f"/tasks/{task_id}/comments", json_body={"body": body})
        return Comment.from_dict(data) if data else None

    def delete_comment(self, task_id: str, comment_id: str) -> None:
        self.request("DELETE", f"/tasks/{task_id}/comments/{comment_id}")

    # -------------------- notifications --------------------
    def list_notifications(self) -> List[Notification]:
        return [Notification.from_dict(n) for n in self.request("GET", "/notifications") or []]

    def mark_notification_read(self, notification_id: str) -> Optional[Notification]:
        data = self.request("PATCH", f"/notifications/{notification_id}/read")
        return Notification.from_dict(data) if data else None
