"""
Process configuration, resolved once at startup from the environment (and `.env`).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

from core.platforms import Platform, parse_platforms


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    slack_token: str = ""
    slack_channel: str = "jobs-alert"
    slack_verification_token: str = ""
    guru_username: str = ""
    guru_password: str = ""
    guru_security_answers: Tuple[str, ...] = ()
    freelancer_token: str = ""
    enabled_platforms: Tuple[Platform, ...] = field(
        default_factory=lambda: (Platform.GURU, Platform.FREELANCER)
    )
    check_interval: int = 300
    retry_min_seconds: int = 5
    retry_max_seconds: int = 600
    headless: bool = True


def load_settings() -> Settings:
    """
    Build Settings from the current environment.
    Raises UnknownPlatform if ENABLED_PLATFORMS names a platform we don't support.
    """
    answers = os.getenv("GURU_SECURITY_ANSWERS", "")
    return Settings(
        slack_token=os.getenv("SLACK_TOKEN", ""),
        slack_channel=os.getenv("SLACK_CHANNEL_NAME", "jobs-alert"),
        slack_verification_token=os.getenv("SLACK_VERIFICATION_TOKEN", ""),
        guru_username=os.getenv("GURU_USERNAME", ""),
        guru_password=os.getenv("GURU_PASSWORD", ""),
        guru_security_answers=tuple(a.strip() for a in answers.split(",") if a.strip()),
        freelancer_token=os.getenv("FREELANCER_TOKEN", ""),
        enabled_platforms=tuple(parse_platforms(os.getenv("ENABLED_PLATFORMS", "Guru,Freelancer"))),
        check_interval=_env_int("CHECK_INTERVAL", 300),
        retry_min_seconds=_env_int("RETRY_MIN_SECONDS", 5),
        retry_max_seconds=_env_int("RETRY_MAX_SECONDS", 600),
        headless=_env_bool("PLAYWRIGHT_HEADLESS", "true"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached Settings for the web app (used as a FastAPI dependency)."""
    # Load `.env` for local/dev runs (override=True so updates take effect after restart).
    load_dotenv(override=True)
    return load_settings()


__all__ = ["Settings", "load_settings", "get_settings"]
