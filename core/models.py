"""
Records passed between the source adapters, the resolver, the stores and Slack.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from core.platforms import Platform


@dataclass(frozen=True)
class JobSummary:
    """
    Listing-only reference to a job: enough to dedup against the watermark.
    `id` is derived from `locator` when the source exposes no explicit id.
    """

    id: str
    locator: str
    title: Optional[str] = None


@dataclass(frozen=True)
class FixedBudget:
    amount: str
    type: str = "Fixed Price"


@dataclass(frozen=True)
class HourlyBudget:
    days: str
    hours: str
    rate: str


Budget = Union[FixedBudget, HourlyBudget]


@dataclass(frozen=True)
class EmployerInfo:
    name: str = ""
    country: str = ""
    feedback: str = ""
    paid: str = ""
    paid_jobs: str = ""


@dataclass(frozen=True)
class JobDetail:
    id: str
    url: str
    title: str
    description: str
    budget: Budget
    skills: Tuple[str, ...] = ()
    employer: EmployerInfo = field(default_factory=EmployerInfo)


@dataclass
class Category:
    platform: Platform
    name: str
    external_key: str
    selected: bool = False


@dataclass(frozen=True)
class Keyword:
    platform: Platform
    value: str


@dataclass(frozen=True)
class Watermark:
    platform: Platform
    last_job_id: str


@dataclass(frozen=True)
class FilterSet:
    """Selected categories and keywords for one platform, read fresh every cycle."""

    platform: Platform
    categories: Tuple[Category, ...] = ()
    keywords: Tuple[str, ...] = ()

    @property
    def selected_keys(self) -> List[str]:
        return [c.external_key for c in self.categories if c.selected]

    def matches_keywords(self, title: Optional[str]) -> bool:
        """True when no keywords are set, or when the title contains any of them."""
        if not self.keywords:
            return True
        title_lower = (title or "").lower()
        return any(k.lower() in title_lower for k in self.keywords)


__all__ = [
    "JobSummary",
    "FixedBudget",
    "HourlyBudget",
    "Budget",
    "EmployerInfo",
    "JobDetail",
    "Category",
    "Keyword",
    "Watermark",
    "FilterSet",
]
