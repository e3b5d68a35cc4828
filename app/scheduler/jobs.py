"""APScheduler job definitions and scheduler management.

Runs the OTP expiry sweep on an ``IntervalTrigger`` and provides
start/shutdown/status helpers for the FastAPI lifespan.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.services.otp import OtpRegistry

logger = logging.getLogger(__name__)

# Module-level scheduler instance (singleton)
scheduler = BackgroundScheduler()

SWEEP_JOB_ID = "otp_sweep"


def sweep_expired_otps(registry: OtpRegistry) -> int:
    """Job body: purge expired entries and log how many went."""
    removed = registry.sweep()
    if removed:
        logger.info("otp_sweep_completed", extra={"removed": removed})
    return removed


def start_scheduler(registry: OtpRegistry) -> None:
    """Register the sweep job for ``registry`` and start the scheduler."""
    scheduler.add_job(
        sweep_expired_otps,
        IntervalTrigger(minutes=settings.OTP_SWEEP_INTERVAL_MINUTES),
        args=[registry],
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "scheduler_started",
        extra={
            "interval_minutes": settings.OTP_SWEEP_INTERVAL_MINUTES,
        },
    )


def shutdown_scheduler() -> None:
    """Shutdown the scheduler gracefully.

    Called during FastAPI lifespan cleanup.
    """
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def is_scheduler_running() -> bool:
    """Check if the scheduler is currently running."""
    return scheduler.running
