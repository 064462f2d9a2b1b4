"""In-memory cache of Billetweb availability snapshots.

Invariants:
- Entries are only removed by explicit invalidation; expiry is never enforced here.
- Lookups ignore expiry so callers can fall back to stale data when Billetweb fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

DEFAULT_TTL = timedelta(minutes=5)


@dataclass(frozen=True, slots=True)
class AvailabilitySnapshot:
    """Seat counts reported by Billetweb for one event."""
    external_ref: str
    places_total: int
    places_remaining: int


@dataclass(frozen=True, slots=True)
class CacheEntry:
    snapshot: AvailabilitySnapshot
    fetched_at: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    keys: list[str]


class AvailabilityCache:
    """Keyed store of the last successful snapshot per Billetweb event."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._entries: dict[str, CacheEntry] = {}

    def get(self, ref: str) -> CacheEntry | None:
        return self._entries.get(ref)

    def put(self, ref: str, snapshot: AvailabilitySnapshot, now: datetime) -> CacheEntry:
        entry = CacheEntry(snapshot=snapshot, fetched_at=now, expires_at=now + self.ttl)
        self._entries[ref] = entry
        return entry

    def invalidate(self, ref: str | None = None) -> None:
        """Drop one entry, or every entry when no ref is given."""
        if ref is None:
            self._entries.clear()
        else:
            self._entries.pop(ref, None)

    def stats(self) -> CacheStats:
        return CacheStats(size=len(self._entries), keys=list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
