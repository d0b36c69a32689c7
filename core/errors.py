"""
Error taxonomy shared by the worker, the stores and the Slack app.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.models import JobSummary


class JobsAlertError(Exception):
    """Base class for every error raised on purpose by this project."""


class UnknownPlatform(JobsAlertError, ValueError):
    def __init__(self, value: str):
        super().__init__(f"Unknown platform: {value!r}")
        self.value = value


class SourceUnavailable(JobsAlertError):
    """Network or navigation failure while talking to a job source."""


class AuthRequired(JobsAlertError):
    """The source wants a login (or a challenge) before it will answer."""


class AuthFailed(JobsAlertError):
    """Login or security-question step was attempted and rejected."""


class DetailFetchFailed(JobsAlertError):
    def __init__(self, summary: "JobSummary", reason: str = ""):
        message = f"Could not fetch details for job {summary.id} ({summary.locator})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.summary = summary


class NotFound(JobsAlertError, LookupError):
    """Filter-store lookup miss."""


class PersistenceError(JobsAlertError):
    """Database read/write failure."""


class NotificationFailed(JobsAlertError):
    """The chat platform refused or failed to accept a message."""


__all__ = [
    "JobsAlertError",
    "UnknownPlatform",
    "SourceUnavailable",
    "AuthRequired",
    "AuthFailed",
    "DetailFetchFailed",
    "NotFound",
    "PersistenceError",
    "NotificationFailed",
]
