"""
Keyword storage helpers (data-level only).
"""
from __future__ import annotations

import logging
from typing import Iterable, List

import psycopg

from core.db.base import get_conn
from core.errors import PersistenceError
from core.models import Keyword
from core.platforms import Platform

log = logging.getLogger("core.db")


def normalize_keywords(values: Iterable[str]) -> List[str]:
    """Strip, drop blanks and collapse duplicates while keeping the given order."""
    cleaned = [(v or "").strip() for v in values]
    return list(dict.fromkeys(v for v in cleaned if v))


def get_keywords(platform: Platform) -> List[Keyword]:
    """Return the platform's keywords, oldest first."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            "SELECT value FROM keywords WHERE platform = ? ORDER BY id",
            (platform.value,),
        )
        rows = cur.fetchall()
    except psycopg.Error as exc:
        raise PersistenceError(f"Could not read {platform.value} keywords: {exc}") from exc
    finally:
        conn.close()
    return [Keyword(platform=platform, value=r["value"]) for r in rows]


def add_keyword(platform: Platform, value: str) -> bool:
    """Add one keyword. Returns False when it was already stored."""
    value = (value or "").strip()
    if not value:
        return False

    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            INSERT INTO keywords (platform, value)
            VALUES (?, ?)
            ON CONFLICT (platform, value) DO NOTHING
            """,
            (platform.value, value),
        )
        inserted = cur.rowcount
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not add {platform.value} keyword {value!r}: {exc}") from exc
    finally:
        conn.close()
    return inserted > 0


def remove_keyword(platform: Platform, value: str) -> bool:
    """Remove one keyword. Returns False when there was nothing to remove."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            "DELETE FROM keywords WHERE platform = ? AND value = ?",
            (platform.value, (value or "").strip()),
        )
        removed = cur.rowcount
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not remove {platform.value} keyword {value!r}: {exc}") from exc
    finally:
        conn.close()
    return removed > 0


def set_keywords(platform: Platform, values: Iterable[str]) -> List[Keyword]:
    """
    Replace the platform's keywords with `values` in one transaction:
    keywords not in `values` are removed, new ones are added.
    Returns the resulting keywords in the given order.
    """
    wanted = normalize_keywords(values)

    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute("SELECT value FROM keywords WHERE platform = ?", (platform.value,))
        existing = {r["value"] for r in cur.fetchall()}

        for value in existing - set(wanted):
            cur.execute(
                "DELETE FROM keywords WHERE platform = ? AND value = ?",
                (platform.value, value),
            )
        for value in wanted:
            if value in existing:
                continue
            cur.execute(
                "INSERT INTO keywords (platform, value) VALUES (?, ?)",
                (platform.value, value),
            )
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not set {platform.value} keywords: {exc}") from exc
    finally:
        conn.close()

    log.info("Keywords replaced", extra={"platform": platform.value, "count": len(wanted)})
    return [Keyword(platform=platform, value=v) for v in wanted]


__all__ = [
    "normalize_keywords",
    "get_keywords",
    "add_keyword",
    "remove_keyword",
    "set_keywords",
]
