"""
Watermark storage re-exports.
"""
from core.db.watermarks.watermark_store import (
    get_last_job_processed,
    update_last_job_processed,
    delete_last_job_processed,
)

__all__ = [
    "get_last_job_processed",
    "update_last_job_processed",
    "delete_last_job_processed",
]
