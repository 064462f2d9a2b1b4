"""Billetweb seat availability client with stale-cache fallback.

Invariants:
- ``get_event_places`` never raises; it returns fresh data, stale data, or None.
- A fresh cache hit never touches the network.
- Only validated payloads are written to the cache.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.schema.billetweb import BilletwebEvent
from app.services.availability_cache import AvailabilityCache, AvailabilitySnapshot, CacheEntry

logger = logging.getLogger("app.services.billetweb")

Clock = Callable[[], datetime]


class BilletwebAPIError(Exception):
    """Raised for non-success responses and malformed payloads."""


@dataclass(frozen=True, slots=True)
class EventPlaces:
    total: int
    left: int


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _places_from(entry: CacheEntry) -> EventPlaces:
    return EventPlaces(total=entry.snapshot.places_total, left=entry.snapshot.places_remaining)


def _log_event(level: int, event: str, **fields: Any) -> None:
    logger.log(level, json.dumps({"event": event, **fields}))


class BilletwebClient:
    """Fetch seat counts for Billetweb events through a read-through cache."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        api_url: str | None = None,
        cache: AvailabilityCache | None = None,
        timeout: float | None = None,
        clock: Clock | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = settings.billetweb_api_key if api_key is None else api_key
        self.api_url = (api_url or settings.billetweb_api_url).rstrip("/")
        self.cache = cache if cache is not None else AvailabilityCache()
        self.timeout = timeout if timeout is not None else settings.billetweb_request_timeout_seconds
        self.clock = clock or utc_now
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}

    async def get_event_places(self, billetweb_id: str) -> EventPlaces | None:
        """Return seat counts for an event, degrading to cached data on any failure."""
        cached = self.cache.get(billetweb_id)
        if cached and cached.is_fresh(self.clock()):
            return _places_from(cached)

        if not self.is_configured():
            _log_event(logging.WARNING, "billetweb_not_configured", billetweb_id=billetweb_id)
            return None

        try:
            event = await self._fetch_event(billetweb_id)
        except Exception as exc:  # noqa: BLE001
            if cached:
                _log_event(
                    logging.WARNING,
                    "billetweb_stale_cache",
                    billetweb_id=billetweb_id,
                    error_type=type(exc).__name__,
                    fetched_at=cached.fetched_at.isoformat(),
                )
                return _places_from(cached)
            _log_event(
                logging.ERROR,
                "billetweb_fetch_failed",
                code="BILLETWEB_API_ERROR",
                billetweb_id=billetweb_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None

        snapshot = AvailabilitySnapshot(
            external_ref=billetweb_id,
            places_total=event.places_total,
            places_remaining=event.places_remaining,
        )
        entry = self.cache.put(billetweb_id, snapshot, self.clock())
        return _places_from(entry)

    async def _fetch_event(self, billetweb_id: str) -> BilletwebEvent:
        url = f"{self.api_url}/event/{billetweb_id}/places"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url, headers=self._headers())
        if not response.is_success:
            raise BilletwebAPIError(f"Billetweb API returned {response.status_code}")
        try:
            return BilletwebEvent.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise BilletwebAPIError(f"Malformed Billetweb payload for {billetweb_id}") from exc
