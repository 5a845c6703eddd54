"""
quiz-engine configuration

Resolution mode, display flags, persistence and storage settings live here.
Environment variables override defaults for deployment flexibility.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional


def to_bool(value: Any) -> bool:
    """Host flags arrive as strings; only "true" (any case) is true."""
    return str(value).lower() == "true"


@dataclass
class QuizSettings:
    """How a quiz instance behaves"""
    method: Literal["rules", "highest_category"] = os.getenv("QUIZ_METHOD", "highest_category")
    show_progress: bool = to_bool(os.getenv("QUIZ_SHOW_PROGRESS", "true"))
    persist: bool = to_bool(os.getenv("QUIZ_PERSIST", "false"))
    restart_enabled: bool = to_bool(os.getenv("QUIZ_RESTART_ENABLED", "true"))

    @classmethod
    def from_attributes(cls, attrs: Mapping[str, Any]) -> "QuizSettings":
        """
        Build settings from host-provided string flags.

        Args:
            attrs: Mapping with optional keys method, show_progress,
                persist and restart_enabled

        Returns:
            QuizSettings; missing flags are off, missing method is
            highest_category
        """
        return cls(
            method=attrs.get("method") or "highest_category",
            show_progress=to_bool(attrs.get("show_progress")),
            persist=to_bool(attrs.get("persist")),
            restart_enabled=to_bool(attrs.get("restart_enabled")),
        )


@dataclass
class StorageSettings:
    """Where session state goes"""
    backend: Literal["memory", "file", "cloudflare"] = os.getenv("QUIZ_STORAGE", "memory")
    path: str = os.getenv("QUIZ_STATE_FILE", ".quiz-state.json")
    cloudflare_account_id: str = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
    cloudflare_namespace_id: str = os.getenv("CLOUDFLARE_KV_NAMESPACE_ID", "")
    cloudflare_api_token: str = os.getenv("CLOUDFLARE_API_TOKEN", "")
    timeout_seconds: float = float(os.getenv("QUIZ_STORAGE_TIMEOUT", "10.0"))

    def store_kwargs(self) -> dict:
        """Keyword arguments for storage.get_store() for the selected backend."""
        if self.backend == "file":
            return {"path": self.path}
        if self.backend == "cloudflare":
            return {
                "account_id": self.cloudflare_account_id or None,
                "namespace_id": self.cloudflare_namespace_id or None,
                "api_token": self.cloudflare_api_token or None,
                "timeout": self.timeout_seconds,
            }
        return {}


@dataclass
class Config:
    """Master config — import this"""
    quiz: QuizSettings = field(default_factory=QuizSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)

    # Quick presets
    @classmethod
    def ephemeral(cls) -> "Config":
        """In-memory only, nothing persisted"""
        cfg = cls()
        cfg.quiz.persist = False
        cfg.storage.backend = "memory"
        return cfg

    @classmethod
    def persistent(cls, path: Optional[str] = None) -> "Config":
        """Progress saved to a local JSON file"""
        cfg = cls()
        cfg.quiz.persist = True
        cfg.storage.backend = "file"
        if path:
            cfg.storage.path = path
        return cfg


# Singleton
config = Config()
