"""Bulk sync tests against the test database and in-memory providers."""

from __future__ import annotations

import asyncio
import uuid

import httpx
import pytest

from app.models.activity import Formation, Stage
from app.services.availability_cache import AvailabilityCache
from app.services.billetweb_client import BilletwebClient, EventPlaces
from app.services.billetweb_sync_service import BilletwebSyncService
from app.services.bookable_provider import BookableEntityProvider, SyncTarget, default_providers
from app.tests.utils import FrozenClock, billetweb_transport, places_payload


class InMemoryProvider(BookableEntityProvider):
    entity_type = "formation"
    label = "Formation"

    def __init__(self, count: int) -> None:
        self.targets = [
            SyncTarget(entity_type=self.entity_type, entity_id=uuid.uuid4(), billetweb_id=f"EV-{i}", titre=f"F{i}")
            for i in range(count)
        ]
        self.applied: dict[uuid.UUID, tuple[int, int, bool]] = {}

    async def list_with_external_ref(self) -> list[SyncTarget]:
        return list(self.targets)

    async def apply_availability(self, entity_id, *, total, left, is_full) -> None:
        self.applied[entity_id] = (total, left, is_full)


class CountingClient:
    """Stands in for BilletwebClient and records peak concurrency."""

    def __init__(self, places: EventPlaces | None = EventPlaces(total=10, left=4)) -> None:
        self.places = places
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak = 0
        self.in_flight_at_start: list[int] = []
        self.cache = AvailabilityCache()

    def is_configured(self) -> bool:
        return True

    async def get_event_places(self, billetweb_id: str) -> EventPlaces | None:
        self.calls.append(billetweb_id)
        self.in_flight += 1
        self.in_flight_at_start.append(self.in_flight)
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return self.places


@pytest.mark.asyncio
async def test_twelve_tasks_run_in_batches_of_five():
    provider = InMemoryProvider(12)
    client = CountingClient()
    service = BilletwebSyncService(client, [provider], batch_size=5)

    result = await service.sync_all_events()

    # Each batch starts from zero in-flight requests: 5, then 5, then 2.
    assert client.in_flight_at_start == [1, 2, 3, 4, 5, 1, 2, 3, 4, 5, 1, 2]
    assert len(client.calls) == 12
    assert client.peak <= 5
    assert result.synced == 12
    assert result.failed == 0
    assert result.errors == ()
    assert all(values == (10, 4, False) for values in provider.applied.values())


@pytest.mark.asyncio
async def test_unconfigured_client_short_circuits():
    provider = InMemoryProvider(3)
    client = BilletwebClient(api_key="", cache=AvailabilityCache())
    service = BilletwebSyncService(client, [provider])

    result = await service.sync_all_events()

    assert result.synced == 0
    assert result.failed == 0
    assert result.errors == ("Billetweb API not configured",)
    assert provider.applied == {}


@pytest.mark.asyncio
async def test_enumeration_failure_becomes_failed_result():
    class BrokenProvider(InMemoryProvider):
        async def list_with_external_ref(self):
            raise RuntimeError("database unavailable")

    service = BilletwebSyncService(CountingClient(), [InMemoryProvider(0), BrokenProvider(0)])

    result = await service.sync_all_events()

    assert result.synced == 0
    assert result.failed == 1
    assert result.errors == ("database unavailable",)


@pytest.mark.asyncio
async def test_write_failure_is_isolated_to_its_entity():
    class FlakyProvider(InMemoryProvider):
        async def apply_availability(self, entity_id, *, total, left, is_full):
            if entity_id == self.targets[1].entity_id:
                raise RuntimeError("constraint violated")
            await super().apply_availability(entity_id, total=total, left=left, is_full=is_full)

    provider = FlakyProvider(3)
    service = BilletwebSyncService(CountingClient(), [provider])

    result = await service.sync_all_events()

    assert result.synced == 2
    assert result.failed == 1
    assert result.errors == ('Formation "F1": constraint violated',)
    assert provider.targets[1].entity_id not in provider.applied


@pytest.mark.asyncio
async def test_slow_run_logs_warning(caplog):
    service = BilletwebSyncService(CountingClient(), [InMemoryProvider(2)], soft_target_seconds=0)

    with caplog.at_level("WARNING", logger="app.services.billetweb_sync"):
        result = await service.sync_all_events()

    assert result.synced == 2
    assert any("billetweb_sync_slow" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_sync_updates_formations_and_isolates_failures(session, session_factory):
    full = Formation(titre="Herbier d'automne", billetweb_id="EV-FULL", places_total=20, places_left=8)
    broken = Formation(titre="Oiseaux des marais", billetweb_id="EV-BROKEN", places_total=15, places_left=6)
    unlinked = Formation(titre="Sans billetterie", billetweb_id=None)
    session.add_all([full, broken, unlinked])
    await session.commit()

    calls: list[str] = []
    client = BilletwebClient(
        api_key="secret",
        api_url="https://billetweb.test/api",
        cache=AvailabilityCache(),
        clock=FrozenClock(),
        transport=billetweb_transport(
            {
                "EV-FULL": httpx.Response(200, json=places_payload("EV-FULL", 20, 0)),
                "EV-BROKEN": httpx.ConnectError("unreachable"),
            },
            calls,
        ),
    )
    service = BilletwebSyncService(client, default_providers(session_factory))

    result = await service.sync_all_events()

    assert result.synced == 1
    assert result.failed == 1
    assert len(result.errors) == 1
    assert "Oiseaux des marais" in result.errors[0]
    assert result.duration > 0
    assert sorted(calls) == ["EV-BROKEN", "EV-FULL"]

    await session.refresh(full)
    await session.refresh(broken)
    assert full.is_full is True
    assert full.places_left == 0
    assert full.places_total == 20
    assert broken.is_full is False
    assert broken.places_left == 6
    assert broken.places_total == 15


@pytest.mark.asyncio
async def test_sync_covers_formations_and_stages(session, session_factory):
    formation = Formation(titre="Mycologie", billetweb_id="EV-F")
    stage = Stage(titre="Cabanes en forêt", billetweb_id="EV-S", places_total=12, places_left=12)
    session.add_all([formation, stage])
    await session.commit()

    client = BilletwebClient(
        api_key="secret",
        api_url="https://billetweb.test/api",
        cache=AvailabilityCache(),
        clock=FrozenClock(),
        transport=billetweb_transport(
            {
                "EV-F": httpx.Response(200, json=places_payload("EV-F", 18, 5)),
                "EV-S": httpx.Response(404, json={"error": "missing"}),
            }
        ),
    )
    service = BilletwebSyncService(client, default_providers(session_factory))

    result = await service.sync_all_events()

    assert result.synced == 1
    assert result.errors == ('Stage "Cabanes en forêt": Failed to fetch places data',)
    await session.refresh(formation)
    assert (formation.places_total, formation.places_left, formation.is_full) == (18, 5, False)
    assert client.cache.stats().keys == ["EV-F"]
