"""Shared helpers for API and service tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
from httpx import AsyncClient

from app.models.admin import Admin

ADMIN_PASSWORD = "supersecret123"
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@dataclass(slots=True)
class FrozenClock:
    """Injectable clock that only moves when told to."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now


async def login_admin(client: AsyncClient, admin: Admin) -> str:
    """Log an admin in; the client keeps the session cookie."""
    res = await client.post("/api/auth/login", json={"email": admin.email, "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return res.json()["access_token"]


def places_payload(event_id: str, total: int, remaining: int) -> dict:
    return {"id": event_id, "name": f"Event {event_id}", "places_total": total, "places_remaining": remaining}


def billetweb_transport(responses: dict[str, httpx.Response | Exception], calls: list[str] | None = None):
    """MockTransport answering ``/event/{id}/places`` from a per-id table."""

    def _handler(request: httpx.Request) -> httpx.Response:
        parts = request.url.path.rstrip("/").split("/")
        event_id = parts[-2]
        if calls is not None:
            calls.append(event_id)
        outcome = responses.get(event_id, httpx.Response(404, json={"error": "not found"}))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.MockTransport(_handler)


async def settle() -> None:
    """Let already-scheduled tasks run to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)
