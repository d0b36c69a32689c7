"""
Last processed job per platform (the watermark).

Exactly one row per platform. The worker re-reads it at the start of every cycle
because scripts/reset_watermark.py may change it in between.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import psycopg

from core.db.base import get_conn
from core.errors import PersistenceError
from core.models import Watermark
from core.platforms import Platform

log = logging.getLogger("core.db")


def get_last_job_processed(platform: Platform) -> str:
    """Return the id of the last job delivered for this platform, or '' if none yet."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            "SELECT job_id FROM last_processed_jobs WHERE platform = ?",
            (platform.value,),
        )
        row = cur.fetchone()
    except psycopg.Error as exc:
        raise PersistenceError(f"Could not read {platform.value} watermark: {exc}") from exc
    finally:
        conn.close()
    return row["job_id"] if row else ""


def update_last_job_processed(platform: Platform, job_id: str) -> Watermark:
    """Upsert the watermark for this platform and return it."""
    job_id = (job_id or "").strip()
    if not job_id:
        raise PersistenceError("Refusing to store an empty watermark")

    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            INSERT INTO last_processed_jobs (platform, job_id, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT (platform) DO UPDATE
            SET job_id = EXCLUDED.job_id, updated_at = EXCLUDED.updated_at
            """,
            (platform.value, job_id, now),
        )
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not update {platform.value} watermark: {exc}") from exc
    finally:
        conn.close()

    log.info("Watermark advanced", extra={"platform": platform.value, "job_id": job_id})
    return Watermark(platform=platform, last_job_id=job_id)


def delete_last_job_processed(platform: Platform) -> Optional[str]:
    """Forget the watermark (next cycle is a cold start). Returns the removed id, if any."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            "DELETE FROM last_processed_jobs WHERE platform = ? RETURNING job_id",
            (platform.value,),
        )
        row = cur.fetchone()
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not delete {platform.value} watermark: {exc}") from exc
    finally:
        conn.close()
    return row["job_id"] if row else None


__all__ = [
    "get_last_job_processed",
    "update_last_job_processed",
    "delete_last_job_processed",
]
