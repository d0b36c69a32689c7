import pytest

from core.database import (
    delete_last_job_processed,
    get_last_job_processed,
    update_last_job_processed,
)
from core.errors import PersistenceError
from core.platforms import Platform


def test_missing_watermark_is_empty_string():
    assert get_last_job_processed(Platform.GURU) == ""


def test_update_is_an_upsert_per_platform():
    update_last_job_processed(Platform.GURU, "100")
    watermark = update_last_job_processed(Platform.GURU, "105")
    update_last_job_processed(Platform.FREELANCER, "9000")

    assert watermark.last_job_id == "105"
    assert get_last_job_processed(Platform.GURU) == "105"
    assert get_last_job_processed(Platform.FREELANCER) == "9000"


def test_empty_job_id_is_rejected():
    with pytest.raises(PersistenceError):
        update_last_job_processed(Platform.GURU, "  ")
    assert get_last_job_processed(Platform.GURU) == ""


def test_delete_resets_to_cold_start():
    update_last_job_processed(Platform.GURU, "100")

    assert delete_last_job_processed(Platform.GURU) == "100"
    assert get_last_job_processed(Platform.GURU) == ""
    assert delete_last_job_processed(Platform.GURU) is None
