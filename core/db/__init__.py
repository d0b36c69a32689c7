"""
Postgres access: connection helpers and schema setup.
"""
from core.db.base import get_conn
from core.db.schema import init_db

__all__ = ["get_conn", "init_db"]
