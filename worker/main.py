import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple

from dotenv import load_dotenv
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_never,
    wait_exponential,
)

from app.slack_utils import SlackClient
from core.config import load_settings
from core.database import (
    get_last_job_processed,
    init_db,
    load_filter_set,
    update_last_job_processed,
)
from core.models import JobDetail
from core.platforms import Platform
from worker.resolver import diff_new, fetch_details, watermark_in_listing
from worker.sources import SourceAdapter, build_adapters

# Load `.env` for local/dev runs (override=True so updates take effect after restart).
load_dotenv(override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("worker")

Notifier = Callable[[Platform, JobDetail], Awaitable[None]]


def _may_advance(adapter: SourceAdapter, visible, watermark: str, newest: str) -> bool:
    """The watermark only ever moves forward."""
    if not watermark:
        return True
    verdict = adapter.newer_than(newest, watermark)
    if verdict is not None:
        return verdict
    return watermark_in_listing(visible, watermark)


async def run_cycle(platform: Platform, adapter: SourceAdapter, notify: Notifier) -> int:
    """
    Do one full cycle for one platform:
    - read the filters and the watermark (fresh, never cached)
    - log in, list visible jobs, keep only the new ones
    - fetch their details
    - notify oldest first
    - advance the watermark to the newest delivered job, never backwards
    Any exception leaves the watermark untouched. Returns the number of jobs delivered.
    """
    log.info("Checking for jobs...", extra={"platform": platform.value})

    filters = load_filter_set(platform)
    if not filters.selected_keys:
        log.info("No categories selected yet.", extra={"platform": platform.value})
        return 0

    watermark = get_last_job_processed(platform)

    async with adapter.session() as session:
        visible = await adapter.list_visible_jobs(session, filters)
        new_summaries = diff_new(visible, watermark, adapter.newer_than)
        log.info(
            "Listed jobs",
            extra={"platform": platform.value, "visible": len(visible), "new": len(new_summaries)},
        )
        if not new_summaries:
            log.info("No new jobs this cycle.", extra={"platform": platform.value})
            return 0

        details = await fetch_details(adapter, session, new_summaries)

        for job in reversed(details):
            await notify(platform, job)

        newest = details[0].id
        if _may_advance(adapter, visible, watermark, newest):
            update_last_job_processed(platform, newest)
        else:
            log.warning(
                "Keeping watermark, delivered jobs are not provably newer",
                extra={"platform": platform.value, "watermark": watermark, "newest": newest},
            )

    log.info("Cycle complete", extra={"platform": platform.value, "delivered": len(details)})
    return len(details)


async def run_cycle_with_retry(
    platform: Platform,
    adapter: SourceAdapter,
    notify: Notifier,
    *,
    retry_min: float,
    retry_max: float,
) -> int:
    """
    Run a cycle until one succeeds. A failed cycle is retried from scratch
    (new session, new listing) after an exponential wait capped at retry_max.
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(Exception),
        wait=wait_exponential(multiplier=1, min=retry_min, max=retry_max),
        stop=stop_never,
        before_sleep=before_sleep_log(log, logging.WARNING),
        reraise=True,
    )
    delivered = 0
    async for attempt in retrying:
        with attempt:
            try:
                delivered = await run_cycle(platform, adapter, notify)
            except Exception as e:
                log.exception("Error during cycle", extra={"platform": platform.value, "error": str(e)})
                raise
    return delivered


def next_tick_after(previous_tick: float, now: float, interval: float) -> Tuple[float, int]:
    """
    Next slot on the fixed schedule that is still in the future, and how many
    slots were missed because the last cycle overran.
    """
    next_tick = previous_tick + interval
    skipped = 0
    if now >= next_tick:
        skipped = int((now - next_tick) // interval) + 1
        next_tick += skipped * interval
    return next_tick, skipped


async def poll_platform(
    platform: Platform,
    adapter: SourceAdapter,
    notify: Notifier,
    *,
    interval: float,
    retry_min: float,
    retry_max: float,
    max_cycles: Optional[int] = None,
) -> None:
    """Run cycles for one platform on a fixed schedule; ticks missed while a cycle runs are skipped."""
    loop = asyncio.get_running_loop()
    next_tick = loop.time()
    cycles = 0

    while True:
        await run_cycle_with_retry(platform, adapter, notify, retry_min=retry_min, retry_max=retry_max)
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            return

        next_tick, skipped = next_tick_after(next_tick, loop.time(), interval)
        if skipped:
            log.warning("Cycle overran its interval, skipping ticks", extra={"platform": platform.value, "skipped": skipped})

        delay = max(0.0, next_tick - loop.time())
        log.info("Sleeping", extra={"platform": platform.value, "seconds": round(delay, 1)})
        await asyncio.sleep(delay)


async def main():
    settings = load_settings()
    init_db()

    adapters = build_adapters(settings)
    if not adapters:
        log.warning("No platforms enabled. Set ENABLED_PLATFORMS.")
        return

    async with SlackClient(settings.slack_token, settings.slack_channel) as slack:
        await asyncio.gather(
            *(
                poll_platform(
                    platform,
                    adapter,
                    slack.send_job,
                    interval=max(1, settings.check_interval),
                    retry_min=settings.retry_min_seconds,
                    retry_max=settings.retry_max_seconds,
                )
                for platform, adapter in adapters.items()
            )
        )


if __name__ == "__main__":
    asyncio.run(main())
