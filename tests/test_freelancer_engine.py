import asyncio

import httpx
import pytest

from core.errors import AuthFailed, AuthRequired, DetailFetchFailed, SourceUnavailable
from core.models import Category, FilterSet, FixedBudget, HourlyBudget, JobSummary
from core.platforms import Platform
from worker.sources.freelancer_engine import FreelancerAdapter, format_amount

PROJECTS = [
    {"id": 101, "title": "Python scraper", "seo_url": "python/python-scraper"},
    {"id": 103, "title": "Django dashboard", "seo_url": "django/django-dashboard"},
    {"id": 102, "title": "Logo design", "seo_url": "graphic-design/logo"},
]


def _ok(result):
    return httpx.Response(200, json={"status": "success", "result": result})


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/projects/0.1/jobs/":
        assert request.url.params.get_list("categories[]") == ["3"]
        return _ok([{"id": 13, "name": "Python"}, {"id": 95, "name": "Django"}])
    if path == "/api/projects/0.1/projects/active/":
        assert request.url.params.get_list("jobs[]") == ["13", "95"]
        return _ok({"projects": PROJECTS})
    if path == "/api/projects/0.1/projects/103/":
        return _ok(
            {
                "id": 103,
                "title": "Django dashboard",
                "seo_url": "django/django-dashboard",
                "description": "Build an admin dashboard.",
                "type": "fixed",
                "budget": {"minimum": 250, "maximum": 750},
                "currency": {"code": "USD", "sign": "$"},
                "jobs": [{"id": 95, "name": "Django"}],
                "owner_id": 77,
            }
        )
    if path == "/api/projects/0.1/projects/104/":
        return _ok(
            {
                "id": 104,
                "title": "Ongoing support",
                "type": "hourly",
                "budget": {"minimum": 15, "maximum": 25},
                "currency": {"code": "USD", "sign": "$"},
                "hourly_project_info": {"commitment": {"hours": 10, "interval": "week"}, "duration_enum": "weeks"},
                "jobs": [],
            }
        )
    if path == "/api/users/0.1/users/":
        return _ok(
            {
                "users": {
                    "77": {
                        "username": "acme",
                        "location": {"country": {"name": "Germany"}},
                        "status": {"payment_verified": True},
                        "employer_reputation": {"entire_history": {"overall": 4.9, "complete": 12}},
                    }
                }
            }
        )
    if path == "/api/projects/0.1/categories/":
        return _ok({"categories": [{"id": 3, "name": "Software Dev"}, {"id": 9, "name": "Design"}]})
    return httpx.Response(404, json={"status": "error"})


def _adapter(handler=_handler, token="tok"):
    return FreelancerAdapter(token=token, transport=httpx.MockTransport(handler))


def _filters(keywords=()):
    selected = Category(platform=Platform.FREELANCER, name="Software Dev", external_key="3", selected=True)
    return FilterSet(platform=Platform.FREELANCER, categories=(selected,), keywords=tuple(keywords))


async def _list(adapter, filters):
    async with adapter.session() as session:
        return await adapter.list_visible_jobs(session, filters)


async def _detail(adapter, summary):
    async with adapter.session() as session:
        return await adapter.fetch_job_detail(session, summary)


def test_listing_is_newest_first():
    summaries = asyncio.run(_list(_adapter(), _filters()))

    assert [s.id for s in summaries] == ["103", "102", "101"]
    assert summaries[0].locator == "https://www.freelancer.com/projects/django/django-dashboard"


def test_listing_applies_keywords():
    summaries = asyncio.run(_list(_adapter(), _filters(keywords=["python", "DJANGO"])))
    assert [s.id for s in summaries] == ["103", "101"]


def test_listing_without_selected_categories_makes_no_request():
    def _fail(request):
        raise AssertionError("no request expected")

    empty = FilterSet(platform=Platform.FREELANCER)
    assert asyncio.run(_list(_adapter(_fail), empty)) == []


def test_token_is_sent_on_every_request():
    seen = []

    def _handler_with_check(request):
        seen.append(request.headers.get("freelancer-oauth-v1"))
        return _handler(request)

    asyncio.run(_list(_adapter(_handler_with_check, token="secret"), _filters()))
    assert seen and set(seen) == {"secret"}


def test_fixed_project_detail():
    summary = JobSummary(id="103", locator="https://www.freelancer.com/projects/django/django-dashboard")
    detail = asyncio.run(_detail(_adapter(), summary))

    assert detail.title == "Django dashboard"
    assert detail.budget == FixedBudget(amount="$250 - $750 USD", type="Fixed Price")
    assert detail.skills == ("Django",)
    assert detail.employer.name == "acme"
    assert detail.employer.country == "Germany"
    assert detail.employer.paid == "Yes"
    assert detail.employer.paid_jobs == "12"


def test_hourly_project_detail():
    detail = asyncio.run(_detail(_adapter(), JobSummary(id="104", locator="x")))

    assert isinstance(detail.budget, HourlyBudget)
    assert detail.budget.rate == "$15 - $25 USD/hr"
    assert detail.budget.hours == "10 hrs/week"
    assert detail.url == "https://www.freelancer.com/projects/104"


def test_missing_project_raises_detail_fetch_failed():
    summary = JobSummary(id="999", locator="x")
    with pytest.raises(DetailFetchFailed) as exc_info:
        asyncio.run(_detail(_adapter(), summary))
    assert exc_info.value.summary is summary


def test_rejected_token_is_auth_failed():
    def _unauthorized(request):
        return httpx.Response(401, json={"status": "error"})

    with pytest.raises(AuthFailed):
        asyncio.run(_list(_adapter(_unauthorized), _filters()))


def test_network_error_is_source_unavailable():
    def _down(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SourceUnavailable):
        asyncio.run(_list(_adapter(_down), _filters()))


def test_missing_token_requires_auth():
    with pytest.raises(AuthRequired):
        asyncio.run(_list(_adapter(token=""), _filters()))


def test_fetch_categories():
    async def _run():
        adapter = _adapter()
        async with adapter.session() as session:
            return await adapter.fetch_categories(session)

    categories = asyncio.run(_run())
    assert [(c.name, c.external_key, c.selected) for c in categories] == [
        ("Software Dev", "3", False),
        ("Design", "9", False),
    ]


def test_format_amount():
    assert format_amount({"minimum": 1500, "maximum": 3000}, {"sign": "$", "code": "USD"}) == "$1,500 - $3,000 USD"
    assert format_amount({"minimum": 10}, {"sign": "€", "code": "EUR"}) == "€10+ EUR"
    assert format_amount({}, {}) == "Not specified"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"status": "error", "message": "bad"}),
    ],
)
def test_malformed_api_body_is_source_unavailable(response):
    with pytest.raises(SourceUnavailable):
        asyncio.run(_list(_adapter(lambda request: response), _filters()))
