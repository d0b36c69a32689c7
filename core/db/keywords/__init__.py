"""
Keyword storage re-exports.
"""
from core.db.keywords.keywords_store import (
    normalize_keywords,
    get_keywords,
    add_keyword,
    remove_keyword,
    set_keywords,
)

__all__ = [
    "normalize_keywords",
    "get_keywords",
    "add_keyword",
    "remove_keyword",
    "set_keywords",
]
