"""
Fetch a platform's category catalogue and reconcile it with the database.

Selections survive the refresh as long as the category name is unchanged.

Usage:
  python -m scripts.update_categories guru
  python -m scripts.update_categories freelancer
"""
from __future__ import annotations

import argparse
import asyncio
from typing import List

from dotenv import load_dotenv

from core.config import load_settings
from core.database import init_db, replace_categories
from core.errors import JobsAlertError
from core.models import Category
from core.platforms import Platform, parse_platform
from worker.sources import build_adapter


async def refresh_categories(platform: Platform) -> List[Category]:
    adapter = build_adapter(platform, load_settings())
    async with adapter.session() as session:
        categories = await adapter.fetch_categories(session)
    if not categories:
        raise SystemExit(f"{platform.value} returned no categories; leaving the database unchanged.")
    return replace_categories(platform, categories)


def main():
    parser = argparse.ArgumentParser(description="Refresh the stored categories for a platform.")
    parser.add_argument("platform", help="guru or freelancer")
    args = parser.parse_args()

    load_dotenv(override=True)
    try:
        platform = parse_platform(args.platform)
        init_db()
        stored = asyncio.run(refresh_categories(platform))
    except JobsAlertError as exc:
        raise SystemExit(f"Something went wrong while updating the categories: {exc}") from exc

    selected = [c.name for c in stored if c.selected]
    print(f"[categories] {platform.value}: {len(stored)} stored, {len(selected)} selected.")
    for name in selected:
        print(f"  - {name}")


if __name__ == "__main__":
    main()
