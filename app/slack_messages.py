"""
Slack message payloads (legacy attachments + interactive buttons/dialogs).
"""
from __future__ import annotations

from typing import Dict, Iterable, List

from core.models import Category, FixedBudget, HourlyBudget, JobDetail
from core.platforms import Platform

ICON_URL = "https://goo.gl/ewa9YG"
COLOR_OK = "#36a64f"
COLOR_ERROR = "#d50200"

# Slack truncates long attachment fields; keep descriptions readable.
MAX_DESCRIPTION = 1500


def _budget_lines(job: JobDetail) -> str:
    budget = job.budget
    if isinstance(budget, HourlyBudget):
        lines = ["- Type: Hourly", f"- Rate: {budget.rate}"]
        if budget.hours:
            lines.append(f"- Hours: {budget.hours}")
        if budget.days:
            lines.append(f"- Duration: {budget.days}")
        return "\n".join(lines)
    if isinstance(budget, FixedBudget):
        return f"- Type: {budget.type}\n- Amount: {budget.amount}"
    return ""


def _truncate(text: str, limit: int = MAX_DESCRIPTION) -> str:
    text = text or ""
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def job_message(platform: Platform, job: JobDetail) -> Dict:
    """Message params for one job alert."""
    employer = job.employer
    fields = [
        {"title": "Description", "value": _truncate(job.description)},
        {"title": "Budget", "value": _budget_lines(job)},
    ]
    if job.skills:
        fields.append({"title": "Skills", "value": ", ".join(job.skills)})
    fields.append(
        {
            "title": "Employer",
            "value": (
                f"- Name: {employer.name}\n- Country: {employer.country}\n"
                f"- Feedback: {employer.feedback}\n- Paid: {employer.paid}\n"
                f"- Paid Jobs: {employer.paid_jobs}"
            ),
        }
    )
    return {
        "icon_url": ICON_URL,
        "username": platform.value,
        "text": "",
        "attachments": [
            {
                "fallback": job.title,
                "color": COLOR_OK,
                "title": job.title.upper(),
                "title_link": job.url,
                "fields": fields,
                "actions": [
                    {"type": "button", "text": "Open In Browser", "url": job.url},
                ],
            }
        ],
    }


def category_callback_id(platform: Platform) -> str:
    return f"{platform.slug}_category"


def keywords_callback_id(platform: Platform) -> str:
    return f"{platform.slug}_keywords"


def categories_message(platform: Platform, categories: Iterable[Category]) -> Dict:
    """One button per category; a check mark shows the selected ones."""
    attachments: List[Dict] = []
    for category in categories:
        mark = " ✔" if category.selected else ""
        attachments.append(
            {
                "title": "",
                "fallback": category.name,
                "color": COLOR_OK if category.selected else "#ffffff",
                "callback_id": category_callback_id(platform),
                "actions": [
                    {
                        "name": category.name,
                        "text": f"{category.name}{mark}",
                        "type": "button",
                        "value": category.external_key,
                    }
                ],
            }
        )
    text = "Click on a category to select/unselect it."
    if not attachments:
        text = f"No {platform.value} categories available yet."
    return {
        "icon_url": ICON_URL,
        "username": platform.value,
        "text": text,
        "attachments": attachments,
    }


def keywords_dialog(platform: Platform, keywords: Iterable[str]) -> Dict:
    return {
        "callback_id": keywords_callback_id(platform),
        "title": f"{platform.value} keywords",
        "submit_label": "Save",
        "elements": [
            {
                "type": "textarea",
                "label": "Keywords",
                "name": "keywords",
                "hint": "Separate keywords with commas. Leave empty to get every job.",
                "optional": True,
                "value": ", ".join(keywords),
            }
        ],
    }


def parse_keywords(raw: str | None) -> List[str]:
    """'python, django ,, scraping' -> ['python', 'django', 'scraping']"""
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def error_message(platform: Platform) -> Dict:
    return {
        "icon_url": ICON_URL,
        "username": platform.value,
        "text": "",
        "attachments": [
            {
                "fallback": "Something went wrong",
                "color": COLOR_ERROR,
                "title": "That didn't work",
                "text": f"Something went wrong while updating your {platform.value} settings. Please try again.",
            }
        ],
    }


__all__ = [
    "job_message",
    "categories_message",
    "keywords_dialog",
    "parse_keywords",
    "error_message",
    "category_callback_id",
    "keywords_callback_id",
]
