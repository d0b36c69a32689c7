"""
Small Slack Web API client shared by routes and workers.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.slack_messages import job_message
from core.errors import NotificationFailed
from core.models import JobDetail
from core.platforms import Platform

SLACK_API_URL = "https://slack.com/api/"

log = logging.getLogger("app.slack")


class SlackClient:
    """
    Explicitly constructed by the process entry point and passed to whoever
    needs to post. Use as an async context manager (or call aclose()).
    """

    def __init__(
        self,
        token: str,
        channel: str,
        *,
        timeout_s: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.channel = channel
        self._client = httpx.AsyncClient(
            base_url=SLACK_API_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "SlackClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a Web API method; a non-ok answer raises NotificationFailed."""
        try:
            resp = await self._client.post(method, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationFailed(f"Slack {method} failed: {exc}") from exc

        data = resp.json()
        if not data.get("ok"):
            raise NotificationFailed(f"Slack {method} error: {data.get('error') or 'unknown'}")
        return data

    async def post_message(
        self,
        text: str = "",
        *,
        attachments: Optional[List[Dict]] = None,
        channel: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"channel": channel or self.channel, "text": text, **extra}
        if attachments is not None:
            payload["attachments"] = attachments
        return await self._call("chat.postMessage", payload)

    async def update_message(
        self,
        channel: str,
        ts: str,
        text: str = "",
        *,
        attachments: Optional[List[Dict]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"channel": channel, "ts": ts, "text": text}
        if attachments is not None:
            payload["attachments"] = attachments
        return await self._call("chat.update", payload)

    async def open_dialog(self, trigger_id: str, dialog: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("dialog.open", {"trigger_id": trigger_id, "dialog": dialog})

    async def send_job(self, platform: Platform, job: JobDetail) -> None:
        """Post one job alert to the alerts channel."""
        await self.post_message(**job_message(platform, job))
        log.info("Job sent", extra={"platform": platform.value, "job_id": job.id})


__all__ = ["SlackClient", "SLACK_API_URL"]
