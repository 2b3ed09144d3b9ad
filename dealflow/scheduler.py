"""
Scheduler for the periodic deal jobs.

Usage:
    python -m dealflow.scheduler

Runs the idle deal scan and the callback reminder sweep on independent
cadences. Invocation is at-least-once: either job may also be run by cron
through /internal/scheduled/*, and overlapping runs are safe.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from dealflow.core.config import settings
from dealflow.core.structured_logging import build_log_context
from dealflow.db.session import SessionLocal
from dealflow.services import callback_reminder_service, idle_deal_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    interval_seconds: float
    handler: Callable[[Session], dict]


def default_jobs() -> list[ScheduledJob]:
    return [
        ScheduledJob(
            name="idle_deals",
            interval_seconds=settings.IDLE_SCAN_INTERVAL_SECONDS,
            handler=idle_deal_service.process_idle_deals,
        ),
        ScheduledJob(
            name="callback_reminders",
            interval_seconds=settings.CALLBACK_REMINDER_INTERVAL_SECONDS,
            handler=callback_reminder_service.process_callback_reminders,
        ),
    ]


def run_job(job: ScheduledJob) -> dict:
    """Run one job with its own session."""
    with SessionLocal() as db:
        return job.handler(db)


async def job_loop(job: ScheduledJob, iterations: int | None = None) -> None:
    """Run a job forever (or ``iterations`` times), sleeping between runs."""
    logger.info(f"Scheduling {job.name} every {job.interval_seconds}s")
    runs = 0
    while iterations is None or runs < iterations:
        try:
            stats = await asyncio.to_thread(run_job, job)
            logger.info(f"{job.name} finished: {stats}", extra=build_log_context(job=job.name))
        except Exception:
            logger.exception(f"{job.name} failed", extra=build_log_context(job=job.name))
        runs += 1
        if iterations is not None and runs >= iterations:
            break
        await asyncio.sleep(job.interval_seconds)


async def scheduler_loop(jobs: list[ScheduledJob] | None = None) -> None:
    """Run every job concurrently; each keeps its own cadence."""
    jobs = jobs if jobs is not None else default_jobs()
    await asyncio.gather(*(job_loop(job) for job in jobs))


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    configure_logging()
    try:
        asyncio.run(scheduler_loop())
    except KeyboardInterrupt:
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
