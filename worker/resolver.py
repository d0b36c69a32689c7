"""
New-job resolution: which listed jobs haven't been delivered yet, and their details.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from core.models import JobDetail, JobSummary
from worker.sources.base import SourceAdapter

log = logging.getLogger("worker.resolver")

IdOrder = Callable[[str, str], Optional[bool]]


def _is_watermark(summary: JobSummary, watermark: str) -> bool:
    return summary.id == watermark or watermark in summary.locator


def watermark_in_listing(all_visible: Sequence[JobSummary], watermark: str) -> bool:
    return bool(watermark) and any(_is_watermark(s, watermark) for s in all_visible)


def diff_new(
    all_visible: Sequence[JobSummary],
    watermark: str,
    newer_than: Optional[IdOrder] = None,
) -> List[JobSummary]:
    """
    Return the listed jobs newer than the watermark, keeping the listing's
    newest-first order.

    - empty watermark (never processed): everything listed is new
    - otherwise: everything before the first entry whose id equals the watermark
      or whose locator contains it
    - watermark not on the page at all: everything listed is new, except jobs
      `newer_than` can prove are older than the watermark
    """
    if not watermark:
        return list(all_visible)

    new_jobs: List[JobSummary] = []
    for summary in all_visible:
        if _is_watermark(summary, watermark):
            return new_jobs
        new_jobs.append(summary)

    if newer_than is not None:
        new_jobs = [s for s in new_jobs if newer_than(s.id, watermark) is not False]

    if new_jobs:
        # Possible duplicate notifications: the listing reordered or the last
        # delivered job dropped off the page.
        log.warning(
            "Watermark not found in listing, treating all visible jobs as new",
            extra={"watermark": watermark, "visible": len(new_jobs)},
        )
    return new_jobs


async def fetch_details(
    adapter: SourceAdapter,
    session: Any,
    summaries: Sequence[JobSummary],
) -> List[JobDetail]:
    """
    Fetch details one job at a time, in the given order.
    The first DetailFetchFailed stops the batch and propagates.
    """
    details: List[JobDetail] = []
    for summary in summaries:
        details.append(await adapter.fetch_job_detail(session, summary))
    return details


__all__ = ["diff_new", "fetch_details", "watermark_in_listing"]
