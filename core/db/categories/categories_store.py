"""
Category storage helpers.

A category is identified by (platform, external_key). external_key is the Guru
category slug or the Freelancer category id. `selected` is the only field that
changes after creation; it decides which jobs the user is told about.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

import psycopg

from core.db.base import get_conn
from core.errors import NotFound, PersistenceError
from core.models import Category
from core.platforms import Platform

log = logging.getLogger("core.db")


def _row_to_category(row: Dict) -> Category:
    return Category(
        platform=Platform(row["platform"]),
        name=row["name"],
        external_key=row["external_key"],
        selected=bool(row["selected"]),
    )


def get_categories(platform: Platform) -> List[Category]:
    """Return every stored category for the platform, ordered by name."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            SELECT platform, name, external_key, selected
            FROM categories
            WHERE platform = ?
            ORDER BY name, external_key
            """,
            (platform.value,),
        )
        rows = cur.fetchall()
    except psycopg.Error as exc:
        raise PersistenceError(f"Could not read {platform.value} categories: {exc}") from exc
    finally:
        conn.close()
    return [_row_to_category(r) for r in rows]


def get_selected_categories(platform: Platform) -> List[Category]:
    return [c for c in get_categories(platform) if c.selected]


def add_category(platform: Platform, name: str, external_key: str, selected: bool = False) -> Category:
    """
    Insert a category. A second insert with the same (platform, external_key)
    collapses onto the existing row, which is returned unchanged.
    """
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            INSERT INTO categories (platform, name, external_key, selected)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (platform, external_key) DO NOTHING
            """,
            (platform.value, name, external_key, bool(selected)),
        )
        cur.execute(
            """
            SELECT platform, name, external_key, selected
            FROM categories
            WHERE platform = ? AND external_key = ?
            """,
            (platform.value, external_key),
        )
        row = cur.fetchone()
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not add {platform.value} category {name!r}: {exc}") from exc
    finally:
        conn.close()
    return _row_to_category(row)


def flip_category_selection(platform: Platform, external_key: str) -> Category:
    """Toggle `selected` on one category. Raises NotFound when it doesn't exist."""
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            UPDATE categories
            SET selected = NOT selected
            WHERE platform = ? AND external_key = ?
            RETURNING platform, name, external_key, selected
            """,
            (platform.value, external_key),
        )
        row = cur.fetchone()
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not flip {platform.value} category {external_key!r}: {exc}") from exc
    finally:
        conn.close()

    if not row:
        raise NotFound(f"No {platform.value} category with key {external_key!r}")

    category = _row_to_category(row)
    log.info(
        "Category selection flipped",
        extra={"platform": platform.value, "category": category.name, "selected": category.selected},
    )
    return category


def replace_categories(platform: Platform, categories: Iterable[Category]) -> List[Category]:
    """
    Reconcile the stored categories with a freshly fetched catalogue, in one transaction.

    - `selected` is carried over by matching on name (keys may change between refreshes)
    - new categories start unselected
    - categories missing from the new catalogue are dropped
    - duplicate external keys in the input collapse to the first one
    """
    incoming = list(categories)
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            "SELECT name, selected FROM categories WHERE platform = ?",
            (platform.value,),
        )
        selected_by_name = {r["name"]: bool(r["selected"]) for r in cur.fetchall()}

        cur.execute("DELETE FROM categories WHERE platform = ?", (platform.value,))

        stored: List[Category] = []
        seen_keys = set()
        for category in incoming:
            if category.external_key in seen_keys:
                continue
            seen_keys.add(category.external_key)
            refreshed = Category(
                platform=platform,
                name=category.name,
                external_key=category.external_key,
                selected=selected_by_name.get(category.name, False),
            )
            cur.execute(
                """
                INSERT INTO categories (platform, name, external_key, selected)
                VALUES (?, ?, ?, ?)
                """,
                (platform.value, refreshed.name, refreshed.external_key, refreshed.selected),
            )
            stored.append(refreshed)
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not replace {platform.value} categories: {exc}") from exc
    finally:
        conn.close()

    log.info(
        "Categories replaced",
        extra={"platform": platform.value, "count": len(stored), "selected": sum(c.selected for c in stored)},
    )
    return stored


__all__ = [
    "get_categories",
    "get_selected_categories",
    "add_category",
    "flip_category_selection",
    "replace_categories",
]
