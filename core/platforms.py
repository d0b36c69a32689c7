"""
Supported job marketplaces.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List

from core.errors import UnknownPlatform


class Platform(str, Enum):
    GURU = "Guru"
    FREELANCER = "Freelancer"

    @property
    def slug(self) -> str:
        """Lowercase form used in Slack command paths and callback ids."""
        return self.value.lower()


def parse_platform(raw: str | None) -> Platform:
    """
    Resolve a user/config supplied platform name ("guru", "Guru", " FREELANCER ").
    Raises UnknownPlatform for anything else.
    """
    value = (raw or "").strip().lower()
    for platform in Platform:
        if platform.slug == value:
            return platform
    raise UnknownPlatform(raw or "")


def parse_platforms(raw: str | Iterable[str]) -> List[Platform]:
    """Parse a comma separated list (or iterable) of platform names, keeping order."""
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    platforms: List[Platform] = []
    for part in parts:
        if not part.strip():
            continue
        platform = parse_platform(part)
        if platform not in platforms:
            platforms.append(platform)
    return platforms


__all__ = ["Platform", "parse_platform", "parse_platforms"]
