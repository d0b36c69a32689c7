"""
Slack request verification.
"""
from __future__ import annotations

import hmac


def verify_slack_token(expected: str | None, submitted: str | None) -> bool:
    """
    Compare the verification token Slack sent with the configured one using
    constant-time compare. An unconfigured token never verifies.
    """
    expected = expected or ""
    submitted = submitted or ""
    if not expected or not submitted:
        return False
    return hmac.compare_digest(expected, submitted)


__all__ = ["verify_slack_token"]
