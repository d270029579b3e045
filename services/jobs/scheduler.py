"""
Background scheduler for periodic settings flushes.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from services.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)

_AUTOSAVE_JOB_ID = "settings_autosave"
_SCHEDULER: Optional[AsyncIOScheduler] = None


def start_scheduler(store: SettingsStore, interval_seconds: int) -> None:
    """Schedule periodic saves of ``store``; a non-positive interval disables them."""
    global _SCHEDULER
    if _SCHEDULER is not None:
        return
    if interval_seconds <= 0:
        logger.info("Settings autosave disabled.")
        return

    scheduler = AsyncIOScheduler(timezone=timezone.utc)
    scheduler.add_job(
        _autosave_job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[store],
        id=_AUTOSAVE_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    _SCHEDULER = scheduler
    logger.info("Settings autosave scheduled every %s seconds.", interval_seconds)


def shutdown_scheduler() -> None:
    """Stop the scheduler when the application shuts down."""
    global _SCHEDULER
    if _SCHEDULER is not None:
        _SCHEDULER.shutdown(wait=False)
        _SCHEDULER = None


def _autosave_job(store: SettingsStore) -> None:
    outcome = store.try_save()
    if not outcome.ok:
        logger.warning("Autosave failed (%s): %s", outcome.kind, outcome.message)
