"""
Freelancer connector: talks to the Freelancer REST API with an OAuth token.

Freelancer calls skills "jobs" and jobs "projects". Projects are searched by the
skills that belong to the selected categories.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import httpx

from core.errors import AuthFailed, AuthRequired, DetailFetchFailed, SourceUnavailable
from core.models import (
    Category,
    EmployerInfo,
    FilterSet,
    FixedBudget,
    HourlyBudget,
    JobDetail,
    JobSummary,
)
from core.platforms import Platform
from worker.sources.base import SourceAdapter, numeric_newer

log = logging.getLogger("worker.freelancer")

FREELANCER_API_URL = "https://www.freelancer.com/api"
FREELANCER_SITE_URL = "https://www.freelancer.com"


def project_url(project: Dict[str, Any]) -> str:
    seo_url = project.get("seo_url")
    if seo_url:
        return f"{FREELANCER_SITE_URL}/projects/{seo_url}"
    return f"{FREELANCER_SITE_URL}/projects/{project['id']}"


def format_amount(budget: Dict[str, Any], currency: Dict[str, Any]) -> str:
    """{"minimum": 250, "maximum": 750} + USD -> "$250 - $750 USD"."""
    sign = currency.get("sign") or "$"
    code = currency.get("code") or "USD"
    low = budget.get("minimum")
    high = budget.get("maximum")

    def _fmt(value) -> str:
        return f"{sign}{float(value):,.0f}"

    if low is not None and high:
        return f"{_fmt(low)} - {_fmt(high)} {code}"
    if low is not None:
        return f"{_fmt(low)}+ {code}"
    return "Not specified"


def detail_from_project(summary: JobSummary, project: Dict[str, Any], owner: Dict[str, Any]) -> JobDetail:
    amount = format_amount(project.get("budget") or {}, project.get("currency") or {})

    if project.get("type") == "hourly":
        info = project.get("hourly_project_info") or {}
        commitment = info.get("commitment") or {}
        hours = ""
        if commitment.get("hours"):
            hours = f"{commitment['hours']} hrs/{commitment.get('interval') or 'week'}"
        budget = HourlyBudget(
            days=str(info.get("duration_enum") or ""),
            hours=hours,
            rate=f"{amount}/hr",
        )
    else:
        budget = FixedBudget(amount=amount, type="Fixed Price")

    reputation = (owner.get("employer_reputation") or {}).get("entire_history") or {}
    country = ((owner.get("location") or {}).get("country") or {}).get("name") or ""
    payment_verified = (owner.get("status") or {}).get("payment_verified")

    return JobDetail(
        id=str(project["id"]),
        url=project_url(project),
        title=project["title"],
        description=project.get("description") or project.get("preview_description") or "",
        budget=budget,
        skills=tuple(j["name"] for j in project.get("jobs") or [] if j.get("name")),
        employer=EmployerInfo(
            name=owner.get("public_name") or owner.get("username") or "",
            country=country,
            feedback=str(reputation.get("overall", "")),
            paid="Yes" if payment_verified else "No",
            paid_jobs=str(reputation.get("complete", "")),
        ),
    )


class FreelancerAdapter(SourceAdapter):
    platform = Platform.FREELANCER

    # Project ids are handed out in posting order.
    newer_than = staticmethod(numeric_newer)

    def __init__(
        self,
        token: str,
        timeout_s: float = 20.0,
        limit: int = 50,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token
        self._timeout = timeout_s
        self._limit = limit
        self._transport = transport

    @asynccontextmanager
    async def session(self):
        if not self._token:
            raise AuthRequired("FREELANCER_TOKEN must be set")
        async with httpx.AsyncClient(
            base_url=FREELANCER_API_URL,
            headers={"freelancer-oauth-v1": self._token},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            yield client

    async def _get(self, client: httpx.AsyncClient, route: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET an API route and return its `result` member."""
        try:
            resp = await client.get(route, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in (401, 403):
                raise AuthFailed(f"Freelancer rejected the token ({exc.response.status_code})") from exc
            raise SourceUnavailable(f"Freelancer API error on {route}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Freelancer API unreachable on {route}: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise SourceUnavailable(f"Freelancer API sent a non-JSON body on {route}") from exc
        if not isinstance(payload, dict):
            raise SourceUnavailable(f"Freelancer API sent an unexpected payload on {route}")
        if payload.get("status") != "success":
            raise SourceUnavailable(f"Freelancer API returned {payload.get('status')!r} on {route}")
        return payload.get("result")

    async def list_visible_jobs(self, session: httpx.AsyncClient, filters: FilterSet) -> List[JobSummary]:
        category_ids = filters.selected_keys
        if not category_ids:
            return []

        skills = await self._get(session, "/projects/0.1/jobs/", {"categories[]": category_ids}) or []
        skill_ids = [s["id"] for s in skills if s.get("id") is not None]
        if not skill_ids:
            log.info("No Freelancer skills for the selected categories")
            return []

        result = await self._get(
            session,
            "/projects/0.1/projects/active/",
            {"jobs[]": skill_ids, "limit": self._limit},
        ) or {}
        projects = sorted(result.get("projects") or [], key=lambda p: int(p["id"]), reverse=True)

        summaries = [
            JobSummary(id=str(p["id"]), locator=project_url(p), title=p.get("title"))
            for p in projects
            if filters.matches_keywords(p.get("title"))
        ]
        log.info("Freelancer listing loaded", extra={"projects": len(projects), "relevant": len(summaries)})
        return summaries

    async def fetch_job_detail(self, session: httpx.AsyncClient, summary: JobSummary) -> JobDetail:
        try:
            project = await self._get(
                session,
                f"/projects/0.1/projects/{summary.id}/",
                {"full_description": "true", "job_details": "true"},
            )
            owner: Dict[str, Any] = {}
            owner_id = (project or {}).get("owner_id")
            if owner_id:
                users = await self._get(
                    session,
                    "/users/0.1/users/",
                    {"users[]": [owner_id], "employer_reputation": "true", "country_details": "true"},
                ) or {}
                owner = (users.get("users") or {}).get(str(owner_id)) or {}
            return detail_from_project(summary, project, owner)
        except (SourceUnavailable, AuthFailed) as exc:
            raise DetailFetchFailed(summary, str(exc)) from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise DetailFetchFailed(summary, f"malformed project payload: {exc}") from exc

    async def fetch_categories(self, session: httpx.AsyncClient) -> List[Category]:
        log.info("Fetching categories from Freelancer")
        result = await self._get(session, "/projects/0.1/categories/") or {}
        return [
            Category(platform=self.platform, name=c["name"], external_key=str(c["id"]))
            for c in result.get("categories") or []
            if c.get("name") and c.get("id") is not None
        ]
