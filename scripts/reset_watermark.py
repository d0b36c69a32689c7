"""
Manually move a platform's watermark (the last job the user was told about).

Without a job id the watermark is deleted, so the next cycle treats every
visible job as new and re-sends them.

Usage:
  python -m scripts.reset_watermark guru                 # forget the watermark
  python -m scripts.reset_watermark freelancer 38512345  # pretend 38512345 was the last one sent
"""
from __future__ import annotations

import argparse

from dotenv import load_dotenv

from core.database import (
    delete_last_job_processed,
    get_last_job_processed,
    init_db,
    update_last_job_processed,
)
from core.errors import JobsAlertError
from core.platforms import parse_platform


def main():
    parser = argparse.ArgumentParser(description="Reset or set the last processed job for a platform.")
    parser.add_argument("platform", help="guru or freelancer")
    parser.add_argument("job_id", nargs="?", default=None, help="New watermark (omit to delete it)")
    args = parser.parse_args()

    load_dotenv(override=True)
    try:
        platform = parse_platform(args.platform)
        init_db()
        before = get_last_job_processed(platform)
        if args.job_id:
            update_last_job_processed(platform, args.job_id)
        else:
            delete_last_job_processed(platform)
    except JobsAlertError as exc:
        raise SystemExit(f"Could not reset the watermark: {exc}") from exc

    print(f"[watermark] {platform.value}: {before or '<none>'} -> {args.job_id or '<none>'}")


if __name__ == "__main__":
    main()
