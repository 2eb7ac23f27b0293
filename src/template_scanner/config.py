"""Runtime settings read from the process environment."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from template_scanner.errors import ConfigError

_DOTENV_FILES = (".env.local", ".env")


@dataclass(frozen=True, slots=True)
class Settings:
    """Everything the producer, worker and trigger endpoint need to start."""

    redis_url: str
    github_token: str | None = None
    temp_dir: str = tempfile.gettempdir()
    clone_timeout_ms: int = 30000
    queue_concurrency: int = 3
    queue_name: str = "template-scan"
    supabase_url: str = ""
    supabase_key: str = ""
    scan_batch_size: int = 10
    log_level: str = "INFO"

    @property
    def clone_timeout(self) -> float:
        """Clone timeout in seconds."""
        return self.clone_timeout_ms / 1000

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``env`` (defaults to ``os.environ``).

        Raises:
            ConfigError: If REDIS_URL is missing or a numeric option is not an integer.
        """
        env = os.environ if env is None else env

        redis_url = env.get("REDIS_URL", "").strip()
        if not redis_url:
            raise ConfigError("REDIS_URL must be set in environment variables")

        log_level = env.get("LOG_LEVEL", "").strip().upper() or "INFO"
        if log_level not in logging.getLevelNamesMapping():
            raise ConfigError(f"LOG_LEVEL must be a logging level name, got '{log_level}'")

        return cls(
            redis_url=redis_url,
            github_token=env.get("GITHUB_TOKEN", "").strip() or None,
            temp_dir=env.get("TEMP_DIR", "").strip() or tempfile.gettempdir(),
            clone_timeout_ms=_int_option(env, "CLONE_TIMEOUT", 30000),
            queue_concurrency=_int_option(env, "QUEUE_CONCURRENCY", 3),
            queue_name=env.get("QUEUE_NAME", "").strip() or "template-scan",
            supabase_url=env.get("SUPABASE_URL", "").strip().rstrip("/"),
            supabase_key=env.get("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            scan_batch_size=_int_option(env, "SCAN_BATCH_SIZE", 10),
            log_level=log_level,
        )


def load_env_files(directory: str | Path = ".") -> None:
    """Load ``.env.local`` then ``.env`` without overriding variables already set."""
    root = Path(directory)
    for name in _DOTENV_FILES:
        path = root / name
        if path.is_file():
            load_dotenv(path, override=False)


def _int_option(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
