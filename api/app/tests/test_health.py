from __future__ import annotations

import pytest

from app.services.billetweb_sync_service import SyncResult


@pytest.mark.asyncio
async def test_health_reports_ok(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["billetweb"]["configured"] is False
    assert payload["billetweb"]["issues"] == []


@pytest.mark.asyncio
async def test_health_degrades_after_failed_sync(client, sync_scheduler, monkeypatch):
    async def _failing_sync() -> SyncResult:
        return SyncResult(synced=2, failed=1, errors=('Stage "X": Failed to fetch places data',), duration=12.5)

    monkeypatch.setattr(sync_scheduler.sync_service, "sync_all_events", _failing_sync)
    await sync_scheduler.trigger_sync()

    response = await client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["billetweb"]["issues"] == [{"reason": "entity_failures", "failed": 1}]
    assert payload["billetweb"]["run_count"] == 1
