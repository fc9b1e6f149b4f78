"""
Polling Scheduler

Uses APScheduler to run the poll cycle at a fixed interval.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import get_config
from ..models.topology import PollResult
from ..store import TopologyStore, topology_store
from .poller import run_poll_cycle

logger = logging.getLogger(__name__)


class PollingScheduler:
    """Manages the periodic poll job."""

    def __init__(self):
        self._scheduler: AsyncIOScheduler | None = None
        self._config = get_config()

    def start(self) -> None:
        """Start the polling scheduler."""
        self._scheduler = AsyncIOScheduler()

        interval = self._config.polling.interval
        self._scheduler.add_job(
            poll_topology,
            IntervalTrigger(seconds=interval),
            id="poll_topology",
            name="Poll all devices",
            replace_existing=True,
        )

        self._scheduler.start()
        logger.info("Polling scheduler started: interval=%ds", interval)

    async def stop(self) -> None:
        """Stop the polling scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Polling scheduler stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running


# ─────────────────────────────────────────────────────────────────────────────
# Polling Jobs
# ─────────────────────────────────────────────────────────────────────────────


async def poll_topology(store: TopologyStore | None = None) -> PollResult | None:
    """
    Run one poll cycle, fire-and-forget.

    Used by the interval job and by user actions that trigger a poll in
    the background. Errors are logged and never propagated.
    """
    try:
        result = await run_poll_cycle(store or topology_store)
    except Exception as e:
        logger.error("Failed to run poll cycle: %s", e)
        return None

    logger.debug("Polled %d devices", result.polled)
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Module-level scheduler instance
# ─────────────────────────────────────────────────────────────────────────────

scheduler = PollingScheduler()
