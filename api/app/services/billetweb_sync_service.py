"""Bulk Billetweb availability sync across every bookable collection.

Invariants:
- A failure on one entity never aborts the others; it is recorded in ``errors``.
- At most ``batch_size`` Billetweb requests are in flight; batches run sequentially.
- ``sync_all_events`` never raises; unexpected errors become a failed ``SyncResult``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Sequence

from app.core.config import settings
from app.services.billetweb_client import BilletwebClient
from app.services.bookable_provider import BookableEntityProvider, SyncTarget

logger = logging.getLogger("app.services.billetweb_sync")

NOT_CONFIGURED_ERROR = "Billetweb API not configured"
FETCH_FAILED_ERROR = "Failed to fetch places data"


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Aggregate outcome of one sync run; ``duration`` is in milliseconds."""
    synced: int
    failed: int
    errors: tuple[str, ...] = ()
    duration: float = 0.0


@dataclass(frozen=True, slots=True)
class EventSyncResult:
    billetweb_id: str
    entity_type: str
    entity_id: uuid.UUID
    success: bool
    places_total: int | None = None
    places_left: int | None = None
    error: str | None = None


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


class BilletwebSyncService:
    """Refresh ``places_total``/``places_left``/``is_full`` from Billetweb."""

    def __init__(
        self,
        client: BilletwebClient,
        providers: Sequence[BookableEntityProvider],
        *,
        batch_size: int | None = None,
        soft_target_seconds: float | None = None,
    ) -> None:
        self.client = client
        self.providers = list(providers)
        self.batch_size = batch_size or settings.billetweb_sync_batch_size
        self.soft_target_ms = (
            soft_target_seconds if soft_target_seconds is not None else settings.billetweb_sync_soft_target_seconds
        ) * 1000

    def is_configured(self) -> bool:
        return self.client.is_configured()

    async def _collect_tasks(self) -> list[tuple[BookableEntityProvider, SyncTarget]]:
        tasks: list[tuple[BookableEntityProvider, SyncTarget]] = []
        for provider in self.providers:
            for target in await provider.list_with_external_ref():
                tasks.append((provider, target))
        return tasks

    async def sync_all_events(self) -> SyncResult:
        """Sync every entity with a Billetweb id, ``batch_size`` requests at a time."""
        started = time.monotonic()
        results: list[EventSyncResult] = []
        errors: list[str] = []

        if not self.is_configured():
            logger.warning("Billetweb API not configured, skipping sync")
            return SyncResult(synced=0, failed=0, errors=(NOT_CONFIGURED_ERROR,), duration=_elapsed_ms(started))

        try:
            tasks = await self._collect_tasks()
            for offset in range(0, len(tasks), self.batch_size):
                batch = tasks[offset : offset + self.batch_size]
                batch_results = await asyncio.gather(
                    *(self._sync_entity(provider, target) for provider, target in batch)
                )
                for (provider, target), result in zip(batch, batch_results):
                    results.append(result)
                    if not result.success:
                        errors.append(f'{provider.label} "{target.titre}": {result.error}')

            synced = sum(1 for result in results if result.success)
            failed = len(results) - synced
            duration = _elapsed_ms(started)
            if duration > self.soft_target_ms:
                logger.warning(
                    json.dumps(
                        {
                            "event": "billetweb_sync_slow",
                            "duration_ms": round(duration, 2),
                            "target_ms": self.soft_target_ms,
                            "total_events": len(results),
                        }
                    )
                )
            return SyncResult(synced=synced, failed=failed, errors=tuple(errors), duration=duration)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                json.dumps(
                    {
                        "event": "billetweb_sync_error",
                        "code": "BILLETWEB_SYNC_ERROR",
                        "error_type": type(exc).__name__,
                    }
                )
            )
            synced = sum(1 for result in results if result.success)
            return SyncResult(
                synced=synced,
                failed=len(results) - synced + 1,
                errors=(*errors, str(exc) or type(exc).__name__),
                duration=_elapsed_ms(started),
            )

    async def _sync_entity(self, provider: BookableEntityProvider, target: SyncTarget) -> EventSyncResult:
        try:
            places = await self.client.get_event_places(target.billetweb_id)
            if places is None:
                return EventSyncResult(
                    billetweb_id=target.billetweb_id,
                    entity_type=target.entity_type,
                    entity_id=target.entity_id,
                    success=False,
                    error=FETCH_FAILED_ERROR,
                )
            await provider.apply_availability(
                target.entity_id, total=places.total, left=places.left, is_full=places.left == 0
            )
            return EventSyncResult(
                billetweb_id=target.billetweb_id,
                entity_type=target.entity_type,
                entity_id=target.entity_id,
                success=True,
                places_total=places.total,
                places_left=places.left,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                json.dumps(
                    {
                        "event": "billetweb_entity_sync_error",
                        "code": "BILLETWEB_ENTITY_SYNC_ERROR",
                        "entity_type": target.entity_type,
                        "entity_id": str(target.entity_id),
                        "error_type": type(exc).__name__,
                    }
                )
            )
            return EventSyncResult(
                billetweb_id=target.billetweb_id,
                entity_type=target.entity_type,
                entity_id=target.entity_id,
                success=False,
                error=str(exc) or type(exc).__name__,
            )
