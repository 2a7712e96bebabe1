from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Optional


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() if strip else value


def env_optional_str(name: str, default: Optional[str] = None, *, strip: bool = True) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip() if strip else value
    return value or default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class TaskboardConfig:
    """Runtime configuration for the task board client.

    Env vars:
    - TASKBOARD_API_BASE_URL (default http://localhost:8090)
    - TASKBOARD_API_TIMEOUT_SECONDS (default 30)
    - TASKBOARD_VERIFY_SSL (default true)
    - TASKBOARD_DUE_SOON_DAYS: width of the due-soon window (default 7)
    - TASKBOARD_LOG_LEVEL (default INFO)
    """

    api_base_url: str
    api_timeout_seconds: int
    verify_ssl: bool
    due_soon_days: int
    log_level: str

    DEFAULT_API_BASE_URL: ClassVar[str] = "http://localhost:8090"
    DEFAULT_API_TIMEOUT_SECONDS: ClassVar[int] = 30
    DEFAULT_DUE_SOON_DAYS: ClassVar[int] = 7

    @classmethod
    def from_env(cls) -> "TaskboardConfig":
        return cls(
            api_base_url=env_str("TASKBOARD_API_BASE_URL", cls.DEFAULT_API_BASE_URL).rstrip("/"),
            api_timeout_seconds=max(1, env_int("TASKBOARD_API_TIMEOUT_SECONDS", cls.DEFAULT_API_TIMEOUT_SECONDS)),
            verify_ssl=env_bool("TASKBOARD_VERIFY_SSL", True),
            due_soon_days=max(0, env_int("TASKBOARD_DUE_SOON_DAYS", cls.DEFAULT_DUE_SOON_DAYS)),
            log_level=env_str("TASKBOARD_LOG_LEVEL", "INFO").upper(),
        )

    def to_dict(self) -> dict:
        return {
            "api_base_url": self.api_base_url,
            "api_timeout_seconds": self.api_timeout_seconds,
            "verify_ssl": self.verify_ssl,
            "due_soon_days": self.due_soon_days,
            "log_level": self.log_level,
        }


# Global config instance
_config: Optional[TaskboardConfig] = None


def get_config() -> TaskboardConfig:
    """Get the board configuration (cached)."""
    global _config
    if _config is None:
        _config = TaskboardConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
