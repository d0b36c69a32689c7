"""
Single import point for everything persisted (used by the worker, the app and scripts).
"""
from __future__ import annotations

from core.db.categories import (
    add_category,
    flip_category_selection,
    get_categories,
    get_selected_categories,
    replace_categories,
)
from core.db.keywords import (
    add_keyword,
    get_keywords,
    normalize_keywords,
    remove_keyword,
    set_keywords,
)
from core.db.schema import init_db
from core.db.watermarks import (
    delete_last_job_processed,
    get_last_job_processed,
    update_last_job_processed,
)
from core.models import FilterSet
from core.platforms import Platform


def load_filter_set(platform: Platform) -> FilterSet:
    """Read the selected categories and keywords for one polling cycle."""
    return FilterSet(
        platform=platform,
        categories=tuple(get_selected_categories(platform)),
        keywords=tuple(k.value for k in get_keywords(platform)),
    )


__all__ = [
    "init_db",
    "add_category",
    "flip_category_selection",
    "get_categories",
    "get_selected_categories",
    "replace_categories",
    "add_keyword",
    "get_keywords",
    "normalize_keywords",
    "remove_keyword",
    "set_keywords",
    "delete_last_job_processed",
    "get_last_job_processed",
    "update_last_job_processed",
    "load_filter_set",
]
