"""
Category storage re-exports.
"""
from core.db.categories.categories_store import (
    get_categories,
    get_selected_categories,
    add_category,
    flip_category_selection,
    replace_categories,
)

__all__ = [
    "get_categories",
    "get_selected_categories",
    "add_category",
    "flip_category_selection",
    "replace_categories",
]
