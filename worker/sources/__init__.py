"""
Source adapters and the registry that maps each Platform to its adapter.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from core.config import Settings
from core.platforms import Platform
from worker.sources.base import SourceAdapter
from worker.sources.freelancer_engine import FreelancerAdapter
from worker.sources.guru_engine import GuruAdapter


def build_adapter(platform: Platform, settings: Settings) -> SourceAdapter:
    if platform is Platform.GURU:
        return GuruAdapter(
            username=settings.guru_username,
            password=settings.guru_password,
            security_answers=settings.guru_security_answers,
            headless=settings.headless,
        )
    if platform is Platform.FREELANCER:
        return FreelancerAdapter(token=settings.freelancer_token)
    raise ValueError(f"No adapter for {platform!r}")


def build_adapters(
    settings: Settings,
    platforms: Optional[Iterable[Platform]] = None,
) -> Dict[Platform, SourceAdapter]:
    """Adapters for the enabled platforms, built once at startup."""
    wanted = settings.enabled_platforms if platforms is None else platforms
    return {platform: build_adapter(platform, settings) for platform in wanted}


__all__ = [
    "SourceAdapter",
    "GuruAdapter",
    "FreelancerAdapter",
    "build_adapter",
    "build_adapters",
]
