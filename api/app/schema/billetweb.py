"""Billetweb payloads and sync reporting schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schema.base import ORMModel


class BilletwebEvent(BaseModel):
    """Seat counts returned by ``GET /event/{id}/places``."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: str
    name: str | None = None
    places_total: int = Field(ge=0)
    places_remaining: int = Field(ge=0)

    @model_validator(mode="after")
    def _remaining_within_total(self) -> "BilletwebEvent":
        if self.places_remaining > self.places_total:
            raise ValueError("places_remaining cannot exceed places_total")
        return self


class SyncResultRead(ORMModel):
    """Aggregate outcome of one sync run."""
    synced: int = Field(ge=0)
    failed: int = Field(ge=0)
    errors: list[str] = Field(default_factory=list)
    duration: float = Field(ge=0, description="Run duration in milliseconds")


class SyncTriggerResponse(SyncResultRead):
    message: str


class SchedulerStatusRead(ORMModel):
    is_running: bool
    last_run: datetime | None = None
    last_result: SyncResultRead | None = None
    last_error: str | None = None
    next_run: datetime | None = None
    run_count: int = 0


class LastSyncRead(BaseModel):
    """Most recent completed or failed sync taken from the audit journal."""
    status: str
    timestamp: datetime
    details: dict | None = None


class SyncStatusResponse(BaseModel):
    configured: bool
    cache_size: int
    cached_events: list[str] = Field(default_factory=list)
    scheduler: SchedulerStatusRead
    last_sync: LastSyncRead | None = None


class CacheInvalidationResponse(BaseModel):
    message: str
