"""
What the Slack commands and buttons actually do.

Filter-store failures (NotFound, PersistenceError) stop here: they are logged
and the user gets a "that didn't work" message instead of a crash.
"""
from __future__ import annotations

import logging
from typing import Optional

from app.slack_messages import (
    categories_message,
    error_message,
    keywords_dialog,
    parse_keywords,
)
from app.slack_utils import SlackClient
from core.database import (
    flip_category_selection,
    get_categories,
    get_keywords,
    set_keywords,
)
from core.errors import NotFound, PersistenceError
from core.platforms import Platform

log = logging.getLogger("app.chat")


async def send_error_message(slack: SlackClient, platform: Platform, channel: Optional[str] = None) -> None:
    await slack.post_message(channel=channel, **error_message(platform))


async def send_categories(slack: SlackClient, platform: Platform, channel: Optional[str] = None) -> None:
    """Post the category picker for a platform."""
    try:
        categories = get_categories(platform)
    except PersistenceError:
        log.exception("Could not load categories", extra={"platform": platform.value})
        await send_error_message(slack, platform, channel)
        return
    await slack.post_message(channel=channel, **categories_message(platform, categories))


async def flip_category_selection_slack(
    slack: SlackClient,
    platform: Platform,
    channel_id: str,
    message_ts: str,
    external_key: str,
) -> None:
    """Toggle one category, then redraw the picker message the button lives in."""
    try:
        flip_category_selection(platform, external_key)
        categories = get_categories(platform)
    except (NotFound, PersistenceError):
        log.exception(
            "Could not flip category",
            extra={"platform": platform.value, "category": external_key},
        )
        await send_error_message(slack, platform, channel_id)
        return

    message = categories_message(platform, categories)
    await slack.update_message(
        channel_id,
        message_ts,
        message["text"],
        attachments=message["attachments"],
    )


async def open_keywords_dialog(slack: SlackClient, platform: Platform, trigger_id: str) -> None:
    """Open the keyword editor pre-filled with the current keywords."""
    try:
        keywords = get_keywords(platform)
    except PersistenceError:
        log.exception("Could not load keywords", extra={"platform": platform.value})
        await send_error_message(slack, platform)
        return
    await slack.open_dialog(trigger_id, keywords_dialog(platform, [k.value for k in keywords]))


async def submit_keywords(
    slack: SlackClient,
    platform: Platform,
    raw_keywords: Optional[str],
    channel: Optional[str] = None,
) -> None:
    """Replace the keyword set with what was typed in the dialog, then confirm."""
    try:
        keywords = set_keywords(platform, parse_keywords(raw_keywords))
    except PersistenceError:
        log.exception("Could not update keywords", extra={"platform": platform.value})
        await send_error_message(slack, platform, channel)
        return

    summary = ", ".join(k.value for k in keywords) if keywords else "none (every job in your categories)"
    await slack.post_message(
        f"{platform.value} keywords updated: {summary}",
        channel=channel,
        username=platform.value,
    )


__all__ = [
    "send_error_message",
    "send_categories",
    "flip_category_selection_slack",
    "open_keywords_dialog",
    "submit_keywords",
]
