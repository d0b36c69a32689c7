"""
Schema helpers for Postgres.
"""
from __future__ import annotations

import psycopg

from core.db.base import get_conn
from core.errors import PersistenceError


def init_db() -> None:
    """Create the categories, keywords and last_processed_jobs tables if they don't exist."""
    conn = get_conn()
    cur = conn.cursor()

    try:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS categories(
                id SERIAL PRIMARY KEY,
                platform TEXT NOT NULL,
                name TEXT NOT NULL,
                external_key TEXT NOT NULL,
                selected BOOLEAN NOT NULL DEFAULT FALSE,
                UNIQUE(platform, external_key)
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS keywords(
                id SERIAL PRIMARY KEY,
                platform TEXT NOT NULL,
                value TEXT NOT NULL,
                UNIQUE(platform, value)
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS last_processed_jobs(
                platform TEXT PRIMARY KEY,
                job_id TEXT NOT NULL,
                updated_at TEXT
            )
            """
        )
        conn.commit()
    except psycopg.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Could not create tables: {exc}") from exc
    finally:
        conn.close()


__all__ = ["init_db"]
