"""
SourceAdapter: the contract every job marketplace connector implements.

The resolver and the polling driver only talk to this interface, so they don't
care whether jobs come from a browser scrape or an HTTP API.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, List, Optional

from core.models import Category, FilterSet, JobDetail, JobSummary
from core.platforms import Platform


def numeric_newer(job_id: str, watermark: str) -> Optional[bool]:
    """Compare ids that are integers on the source; None when either one isn't."""
    try:
        return int(job_id) > int(watermark)
    except (TypeError, ValueError):
        return None


class SourceAdapter(ABC):
    platform: Platform

    def newer_than(self, job_id: str, watermark: str) -> Optional[bool]:
        """
        Whether `job_id` was posted after the job `watermark` names.
        None means the ids are opaque and can't be ordered.
        """
        return None

    @abstractmethod
    def session(self) -> AsyncContextManager[Any]:
        """
        Acquire the authenticated resource for one cycle (logged-in browser page,
        API client, ...) and yield it as a handle for the other calls.

        The resource is released when the context exits, whether the cycle
        succeeded or raised.

        Raises:
            AuthRequired: credentials are missing.
            AuthFailed: the login or security challenge was rejected.
            SourceUnavailable: the source could not be reached.
        """

    @abstractmethod
    async def list_visible_jobs(self, session: Any, filters: FilterSet) -> List[JobSummary]:
        """
        Return the jobs currently visible on the source, newest first, limited to
        the selected categories and (when set) the keywords.

        Raises:
            SourceUnavailable: network/navigation failure.
            AuthRequired: the source bounced us to a login or challenge page.
        """

    @abstractmethod
    async def fetch_job_detail(self, session: Any, summary: JobSummary) -> JobDetail:
        """
        Resolve the full record for one listed job.

        Raises:
            DetailFetchFailed: the detail page/payload was unreachable or malformed.
        """

    @abstractmethod
    async def fetch_categories(self, session: Any) -> List[Category]:
        """Return the source's full category catalogue (all unselected)."""
