"""
Low-level database helpers (Postgres-only).
"""
from __future__ import annotations

import os
from typing import Iterable

import psycopg
from psycopg.rows import dict_row

from core.errors import PersistenceError


def resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise PersistenceError("DATABASE_URL must be set for Postgres usage")
    if url.startswith("postgres://") or url.startswith("postgresql://"):
        return url
    raise PersistenceError("DATABASE_URL must start with postgres:// or postgresql://")


class _Cursor:
    """Lets the stores write `?` placeholders; psycopg wants `%s`."""

    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, sql: str, params: Iterable | None = None):
        return self._cursor.execute(sql.replace("?", "%s"), params)

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self):
        return self._cursor.fetchall()

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class _Connection:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def cursor(self) -> _Cursor:
        return _Cursor(self._conn.cursor())

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()

    def close(self):
        return self._conn.close()


def get_conn() -> _Connection:
    """
    Open a Postgres connection (DATABASE_URL required) with dict rows.
    Connection failures surface as PersistenceError.
    """
    try:
        conn = psycopg.connect(resolve_database_url(), row_factory=dict_row)
    except psycopg.Error as exc:
        raise PersistenceError(f"Could not connect to Postgres: {exc}") from exc
    return _Connection(conn)
