"""
Guru connector: scrapes guru.com with Playwright behind an authenticated session.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from core.errors import AuthFailed, AuthRequired, DetailFetchFailed, SourceUnavailable
from core.models import (
    Budget,
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

log = logging.getLogger("worker.guru")

GURU_BASE_URL = "https://www.guru.com"
LOGIN_URL = f"{GURU_BASE_URL}/login.aspx"
JOBS_URL = f"{GURU_BASE_URL}/d/jobs"

USERNAME_INPUT = "input#ctl00_ContentPlaceHolder1_ucLogin_txtUserName_txtUserName_TextBox"
PASSWORD_INPUT = "input#ctl00_ContentPlaceHolder1_ucLogin_txtPassword_txtPassword_TextBox"
SIGN_IN_BUTTON = "input#ctl00_ContentPlaceHolder1_btnLoginAccount_btnLoginAccount_Button"
SECURITY_ANSWER_INPUT = "input#ctl00_ContentPlaceHolder1_ucSqAnswer_txtAns1_txtAns1_TextBox"
SECURITY_CONTINUE_BUTTON = "input#ctl00_ContentPlaceHolder1_ucSqAnswer_btnSave_btnSave_Button"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)

_LISTING_JS = """
() => [...document.querySelectorAll('li.serviceItem')].map(job => {
    const link = job.querySelector('h2.servTitle > a');
    const skill = job.querySelector('ul.skills a');
    return {
        url: link ? link.href : '',
        title: link ? link.innerText.trim() : '',
        category_href: skill ? skill.href : '',
    };
})
"""

_DETAIL_JS = """
() => {
    const text = sel => {
        const el = document.querySelector(sel);
        return el ? el.innerText.trim() : null;
    };
    const texts = sel => [...document.querySelectorAll(sel)].map(el => el.innerText.trim());
    return {
        title: text('h1#ctl00_guB_hTitleAndAddtoWatchSec'),
        description: text('.section_desc.jobDetail-section'),
        budget: texts('div.budget > ul > li'),
        skills: texts('ul#ctl00_guB_ucProjectDetail_ulSkills > li'),
        employer: {
            name: text('h3.identityName'),
            country: text('p#ctl00_guB_divEmpLoc'),
            feedback: text('table.module_table tr:nth-child(2) > td.right'),
            paid: text('section#empStats > table tr td:nth-child(2)'),
            paid_jobs: text('section#empStats > table tr:nth-child(4) td:nth-child(2)'),
        },
    };
}
"""

_CATEGORIES_JS = """
() => [...document.querySelectorAll('a[href*="/d/jobs/c/"]')].map(a => ({
    name: a.innerText.trim(),
    href: a.href,
}))
"""


@dataclass
class BrowserSession:
    """Logged-in Playwright page, owned by GuruAdapter.session()."""

    page: Page


def job_id_from_url(url: str) -> str:
    """
    Guru job URLs look like https://www.guru.com/jobs/<slug>/<id>&SearchUrl=...
    The id is the sixth path segment, cut at the first '&' or '?'.
    """
    parts = (url or "").split("/")
    if len(parts) < 6 or not parts[5]:
        raise ValueError(f"Not a Guru job URL: {url!r}")
    return parts[5].split("&")[0].split("?")[0]


def category_key_from_href(href: str) -> str:
    """https://www.guru.com/d/jobs/c/<slug>/... -> <slug> ('' if not a category link)."""
    parts = (href or "").split("/")
    return parts[6] if len(parts) > 6 else ""


def filter_listing(rows: Iterable[Dict], filters: FilterSet) -> List[JobSummary]:
    """Keep listing rows from selected categories (and matching keywords), in page order."""
    selected = set(filters.selected_keys)
    summaries: List[JobSummary] = []
    for row in rows:
        url = (row.get("url") or "").strip()
        if not url:
            continue
        if category_key_from_href(row.get("category_href") or "") not in selected:
            continue
        title = (row.get("title") or "").strip()
        if not filters.matches_keywords(title):
            continue
        try:
            job_id = job_id_from_url(url)
        except ValueError:
            log.warning("Skipping listing row with unexpected URL", extra={"url": url})
            continue
        summaries.append(JobSummary(id=job_id, locator=url, title=title))
    return summaries


def _at(items: Sequence[str], index: int) -> str:
    return items[index] if len(items) > index else ""


def parse_budget(items: Sequence[str]) -> Budget:
    """
    The budget box is a list: ["Fixed Price", "Under $250"] or
    ["Hourly", "$15-$25/hr", "10-30 hrs/week", "1-3 months"].
    """
    if not items:
        raise ValueError("budget section is empty")
    kind = items[0].strip()
    if kind.lower().startswith("hourly"):
        return HourlyBudget(rate=_at(items, 1), hours=_at(items, 2), days=_at(items, 3))
    return FixedBudget(type=kind, amount=_at(items, 1))


def detail_from_payload(summary: JobSummary, payload: Dict) -> JobDetail:
    if not payload or not payload.get("title"):
        raise ValueError("job title not found on page")
    employer = payload.get("employer") or {}
    return JobDetail(
        id=summary.id,
        url=summary.locator,
        title=payload["title"],
        description=payload.get("description") or "",
        budget=parse_budget(payload.get("budget") or []),
        skills=tuple(payload.get("skills") or ()),
        employer=EmployerInfo(
            name=employer.get("name") or "",
            country=employer.get("country") or "",
            feedback=employer.get("feedback") or "",
            paid=employer.get("paid") or "",
            paid_jobs=employer.get("paid_jobs") or "",
        ),
    )


def _is_auth_page(url: str) -> bool:
    lowered = (url or "").lower()
    return "login.aspx" in lowered or "securityquestions" in lowered


class GuruAdapter(SourceAdapter):
    platform = Platform.GURU

    # The number at the end of a job URL grows with posting time.
    newer_than = staticmethod(numeric_newer)

    def __init__(
        self,
        username: str,
        password: str,
        security_answers: Sequence[str] = (),
        headless: bool = True,
    ) -> None:
        self._username = username
        self._password = password
        self._security_answers = list(security_answers)
        self._headless = headless

    @asynccontextmanager
    async def session(self):
        if not (self._username and self._password):
            raise AuthRequired("GURU_USERNAME and GURU_PASSWORD must be set")

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=self._headless)
                try:
                    context = await browser.new_context(
                        user_agent=USER_AGENT,
                        extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
                    )
                    page = await context.new_page()
                    await self._login(page)
                    yield BrowserSession(page=page)
                finally:
                    await browser.close()
                    log.info("Browser closed")
        except PlaywrightError as exc:
            raise SourceUnavailable(f"Guru browser session failed: {exc}") from exc

    async def _login(self, page: Page) -> None:
        log.info("Logging in to Guru")
        await page.goto(LOGIN_URL, wait_until="domcontentloaded")
        await page.fill(USERNAME_INPUT, self._username)
        await page.fill(PASSWORD_INPUT, self._password)
        await page.click(SIGN_IN_BUTTON)
        await page.wait_for_load_state("domcontentloaded")

        if await self._requires_security_answer(page):
            await self._answer_security_question(page)

        if "login.aspx" in page.url.lower():
            raise AuthFailed("Guru rejected the username/password")

    async def _requires_security_answer(self, page: Page) -> bool:
        await page.wait_for_timeout(2500)
        return "securityquestions" in page.url.lower()

    async def _answer_security_question(self, page: Page) -> None:
        """Try every configured answer until Guru lets us through."""
        for answer in self._security_answers:
            await page.fill(SECURITY_ANSWER_INPUT, answer)
            await page.click(SECURITY_CONTINUE_BUTTON)
            if not await self._requires_security_answer(page):
                log.info("Guru security question answered")
                return
        raise AuthFailed("None of the configured Guru security answers were accepted")

    async def list_visible_jobs(self, session: BrowserSession, filters: FilterSet) -> List[JobSummary]:
        page = session.page
        try:
            await page.goto(JOBS_URL, wait_until="domcontentloaded")
            await page.wait_for_selector("body")
            if _is_auth_page(page.url):
                raise AuthRequired("Guru redirected the job listing to a login page")
            rows = await page.evaluate(_LISTING_JS)
        except PlaywrightError as exc:
            raise SourceUnavailable(f"Could not load Guru job listing: {exc}") from exc

        summaries = filter_listing(rows or [], filters)
        log.info("Guru listing loaded", extra={"rows": len(rows or []), "relevant": len(summaries)})
        return summaries

    async def fetch_job_detail(self, session: BrowserSession, summary: JobSummary) -> JobDetail:
        page = session.page
        try:
            await page.goto(summary.locator, wait_until="domcontentloaded")
            await page.wait_for_selector("body")
            payload = await page.evaluate(_DETAIL_JS)
        except PlaywrightError as exc:
            raise DetailFetchFailed(summary, str(exc)) from exc

        try:
            return detail_from_payload(summary, payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise DetailFetchFailed(summary, str(exc)) from exc

    async def fetch_categories(self, session: BrowserSession) -> List[Category]:
        page = session.page
        log.info("Fetching categories from Guru")
        try:
            await page.goto(JOBS_URL, wait_until="domcontentloaded")
            links = await page.evaluate(_CATEGORIES_JS)
        except PlaywrightError as exc:
            raise SourceUnavailable(f"Could not load Guru categories: {exc}") from exc

        categories: Dict[str, Category] = {}
        for link in links or []:
            key = category_key_from_href(link.get("href") or "")
            name = (link.get("name") or "").strip()
            if key and name and key not in categories:
                categories[key] = Category(platform=self.platform, name=name, external_key=key)
        return list(categories.values())
