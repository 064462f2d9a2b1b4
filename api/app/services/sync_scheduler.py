"""Periodic Billetweb sync driven from the API process.

Invariants:
- At most one sync run executes at a time; overlapping triggers return a sentinel result.
- Ticks are fixed-rate from ``start()``; a tick landing on a running sync is skipped, not queued.
- Neither scheduled nor manual runs raise past this module.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from types import FrameType
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.services.availability_cache import AvailabilityCache, CacheStats
from app.services.billetweb_client import BilletwebClient, Clock, utc_now
from app.services.billetweb_sync_service import BilletwebSyncService, SyncResult
from app.services.bookable_provider import default_providers

logger = logging.getLogger("app.services.sync_scheduler")

ALREADY_RUNNING_ERROR = "Sync already in progress"
SHUTDOWN_GRACE_SECONDS = 10.0
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


@dataclass(frozen=True, slots=True)
class SchedulerStatus:
    is_running: bool = False
    last_run: datetime | None = None
    last_result: SyncResult | None = None
    last_error: str | None = None
    next_run: datetime | None = None
    run_count: int = 0


class SyncScheduler:
    """Own the sync timer, the in-progress guard and the run history."""

    def __init__(
        self,
        sync_service: BilletwebSyncService,
        *,
        interval_seconds: float | None = None,
        startup_delay_seconds: float | None = None,
        clock: Clock | None = None,
        install_signal_handlers: bool = True,
    ) -> None:
        self.sync_service = sync_service
        self.interval_seconds = float(interval_seconds or settings.billetweb_sync_interval_seconds)
        self.startup_delay_seconds = (
            startup_delay_seconds
            if startup_delay_seconds is not None
            else settings.billetweb_sync_startup_delay_seconds
        )
        self.clock = clock or utc_now
        self.install_signal_handlers = install_signal_handlers
        self._status = SchedulerStatus()
        self._sync_in_progress = False
        self._timer: asyncio.Task[None] | None = None
        self._runs: set[asyncio.Task[SyncResult]] = set()
        self._signals_registered = False

    @property
    def cache(self) -> AvailabilityCache:
        return self.sync_service.client.cache

    def is_configured(self) -> bool:
        return self.sync_service.is_configured()

    def is_running(self) -> bool:
        return self._status.is_running

    def get_status(self) -> SchedulerStatus:
        """Return a snapshot; later runs never mutate it."""
        return replace(self._status)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def invalidate_cache(self, billetweb_id: str | None = None) -> None:
        self.cache.invalidate(billetweb_id)
        logger.info("Billetweb cache invalidated (%s)", billetweb_id or "all events")

    def start(self) -> bool:
        """Start the timer; returns False when Billetweb is not configured."""
        if self._timer is not None and not self._timer.done():
            logger.info("Scheduler already running")
            return True
        if not self.is_configured():
            logger.warning("Billetweb API not configured, scheduler disabled")
            return False

        logger.info("Starting scheduler with %ss interval", int(self.interval_seconds))
        if self.install_signal_handlers:
            self._register_shutdown_handlers()
        self._status = replace(
            self._status,
            is_running=True,
            next_run=self.clock() + timedelta(seconds=self.startup_delay_seconds),
        )
        self._timer = asyncio.get_running_loop().create_task(self._run_timer(), name="billetweb-sync-timer")
        return True

    def stop(self) -> None:
        """Cancel the timer; safe to call repeatedly. An in-flight run finishes on its own."""
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        self._status = replace(self._status, is_running=False, next_run=None)
        logger.info("Scheduler stopped")

    async def shutdown(self, grace_seconds: float = SHUTDOWN_GRACE_SECONDS) -> None:
        """Stop the timer, give in-flight runs ``grace_seconds`` to finish, then cancel the rest."""
        self.stop()
        runs = set(self._runs)
        if not runs:
            return
        _, pending = await asyncio.wait(runs, timeout=grace_seconds)
        for run in pending:
            run.cancel()
        if pending:
            logger.warning("Cancelled %d sync run(s) still in progress at shutdown", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    async def trigger_sync(self) -> SyncResult:
        """Run a guarded sync now and wait for its result."""
        logger.info("Manual sync triggered")
        return await self._run_sync()

    async def _run_timer(self) -> None:
        loop = asyncio.get_running_loop()
        anchor = loop.time()
        anchor_wall = self.clock()
        await asyncio.sleep(self.startup_delay_seconds)
        logger.info("Running initial sync")
        self._spawn_run()

        tick = 1
        while True:
            due = anchor + tick * self.interval_seconds
            if due <= loop.time():
                # Catch up to the next tick that is still in the future.
                tick = int((loop.time() - anchor) // self.interval_seconds) + 1
                continue
            self._status = replace(
                self._status, next_run=anchor_wall + timedelta(seconds=tick * self.interval_seconds)
            )
            await asyncio.sleep(due - loop.time())
            self._spawn_run()
            tick += 1

    def _spawn_run(self) -> None:
        run = asyncio.get_running_loop().create_task(self._run_sync())
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)

    async def _run_sync(self) -> SyncResult:
        if self._sync_in_progress:
            logger.info("Sync already in progress, skipping")
            return SyncResult(synced=0, failed=0, errors=(ALREADY_RUNNING_ERROR,), duration=0)

        self._sync_in_progress = True
        started_at = self.clock()
        logger.info("Starting sync at %s", started_at.isoformat())
        try:
            result = await self.sync_service.sync_all_events()
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or type(exc).__name__
            self._status = replace(
                self._status, last_run=started_at, last_error=message, run_count=self._status.run_count + 1
            )
            logger.error("Sync failed at %s: %s (code=SYNC_SCHEDULER_ERROR)", self.clock().isoformat(), message)
            return SyncResult(
                synced=0,
                failed=1,
                errors=(message,),
                duration=(self.clock() - started_at).total_seconds() * 1000,
            )
        finally:
            self._sync_in_progress = False

        self._status = replace(
            self._status,
            last_run=started_at,
            last_result=result,
            last_error=None,
            run_count=self._status.run_count + 1,
        )
        duration_sec = f"{result.duration / 1000:.2f}s"
        if result.failed > 0:
            logger.warning(
                "Sync completed with errors: synced=%d failed=%d duration=%s errors=%s",
                result.synced,
                result.failed,
                duration_sec,
                result.errors,
            )
        else:
            logger.info("Sync completed successfully: synced=%d duration=%s", result.synced, duration_sec)
        return result

    def _register_shutdown_handlers(self) -> None:
        if self._signals_registered:
            return
        for signum in SHUTDOWN_SIGNALS:
            try:
                previous = signal.getsignal(signum)
                signal.signal(signum, self._shutdown_handler(previous))
            except ValueError:
                # signal.signal only works from the main thread.
                logger.debug("Cannot install %s handler outside the main thread", signal.Signals(signum).name)
                return
        self._signals_registered = True

    def _shutdown_handler(self, previous: Any) -> Callable[[int, FrameType | None], None]:
        def _handle(signum: int, frame: FrameType | None) -> None:
            logger.info("Received %s, stopping scheduler", signal.Signals(signum).name)
            self.stop()
            if callable(previous):
                previous(signum, frame)
            elif previous == signal.SIG_DFL:
                raise SystemExit(0)

        return _handle


def build_sync_scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    install_signal_handlers: bool = True,
) -> SyncScheduler:
    """Wire cache, client, providers and orchestrator into one scheduler."""
    cache = AvailabilityCache(ttl=timedelta(seconds=settings.billetweb_cache_ttl_seconds))
    client = BilletwebClient(cache=cache)
    sync_service = BilletwebSyncService(client, default_providers(session_factory))
    return SyncScheduler(sync_service, install_signal_handlers=install_signal_handlers)
