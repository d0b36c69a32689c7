import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from fastapi.responses import PlainTextResponse, Response

from app import chat
from app.security import verify_slack_token
from app.slack_utils import SlackClient
from core.config import Settings, get_settings
from core.errors import UnknownPlatform
from core.platforms import Platform, parse_platform

router = APIRouter()
log = logging.getLogger("app.routes")


def get_slack_client(request: Request) -> SlackClient:
    return request.app.state.slack


def _forbidden() -> PlainTextResponse:
    return PlainTextResponse("Access forbidden", status_code=403)


def _unknown_platform(exc: UnknownPlatform) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=404)


@router.post("/categories/{platform}")
async def categories_command(
    platform: str,
    background_tasks: BackgroundTasks,
    token: str = Form(""),
    channel_id: str = Form(""),
    settings: Settings = Depends(get_settings),
    slack: SlackClient = Depends(get_slack_client),
):
    """Slash command: show the category picker."""
    if not verify_slack_token(settings.slack_verification_token, token):
        return _forbidden()
    try:
        resolved: Platform = parse_platform(platform)
    except UnknownPlatform as exc:
        return _unknown_platform(exc)

    background_tasks.add_task(chat.send_categories, slack, resolved, channel_id or None)
    return Response(status_code=200)


@router.post("/keywords/{platform}")
async def keywords_command(
    platform: str,
    background_tasks: BackgroundTasks,
    token: str = Form(""),
    trigger_id: str = Form(""),
    settings: Settings = Depends(get_settings),
    slack: SlackClient = Depends(get_slack_client),
):
    """Slash command: open the keyword editor dialog."""
    if not verify_slack_token(settings.slack_verification_token, token):
        return _forbidden()
    try:
        resolved = parse_platform(platform)
    except UnknownPlatform as exc:
        return _unknown_platform(exc)
    if not trigger_id:
        return PlainTextResponse("Missing trigger_id", status_code=400)

    background_tasks.add_task(chat.open_keywords_dialog, slack, resolved, trigger_id)
    return Response(status_code=200)


@router.post("/action")
async def interactive_action(
    background_tasks: BackgroundTasks,
    payload: str = Form(...),
    settings: Settings = Depends(get_settings),
    slack: SlackClient = Depends(get_slack_client),
):
    """
    Interactive callbacks:
      <platform>_category  - a category button was clicked
      <platform>_keywords  - the keyword dialog was submitted
    """
    try:
        data = json.loads(payload)
    except ValueError:
        return PlainTextResponse("Invalid payload", status_code=400)
    if not isinstance(data, dict):
        return PlainTextResponse("Invalid payload", status_code=400)

    if not verify_slack_token(settings.slack_verification_token, data.get("token")):
        return _forbidden()

    callback_id = data.get("callback_id") or ""
    try:
        platform = parse_platform(callback_id.split("_")[0])
    except UnknownPlatform as exc:
        return _unknown_platform(exc)

    channel_id = (data.get("channel") or {}).get("id")

    if callback_id.endswith("_category"):
        actions = data.get("actions") or []
        if not actions or not actions[0].get("value"):
            return PlainTextResponse("Missing category", status_code=400)
        message_ts = data.get("message_ts") or (data.get("original_message") or {}).get("ts")
        background_tasks.add_task(
            chat.flip_category_selection_slack,
            slack,
            platform,
            channel_id,
            message_ts,
            actions[0]["value"],
        )
        return Response(status_code=200)

    if callback_id.endswith("_keywords"):
        submission = data.get("submission") or {}
        background_tasks.add_task(chat.submit_keywords, slack, platform, submission.get("keywords"), channel_id)
        return Response(status_code=200)

    log.warning("Unhandled callback", extra={"callback_id": callback_id})
    return PlainTextResponse("Unknown action", status_code=400)
