"""Admin endpoints for Billetweb availability sync.

Invariants:
- Every endpoint requires an authenticated admin.
- Manual runs go through the scheduler so they share its overlap guard.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db, get_sync_scheduler
from app.models.admin import Admin, AuditAction
from app.schema.billetweb import (
    CacheInvalidationResponse,
    LastSyncRead,
    SchedulerStatusRead,
    SyncStatusResponse,
    SyncTriggerResponse,
)
from app.services import audit_service
from app.services.sync_scheduler import SyncScheduler

router = APIRouter()

SYNC_ENTITY = "BilletwebSync"
MAX_LOGGED_ERRORS = 10


@router.post("/sync", response_model=SyncTriggerResponse)
async def trigger_sync(
    session: AsyncSession = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
    scheduler: SyncScheduler = Depends(get_sync_scheduler),
) -> SyncTriggerResponse:
    """Run a sync now and journal its outcome."""
    if not scheduler.is_configured():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Billetweb API non configurée")

    await audit_service.record(
        session,
        admin_id=current_admin.id,
        action=AuditAction.BILLETWEB_SYNC_STARTED,
        entity=SYNC_ENTITY,
        entity_id="manual",
        details={"triggeredBy": current_admin.email},
    )

    result = await scheduler.trigger_sync()

    await audit_service.record(
        session,
        admin_id=current_admin.id,
        action=AuditAction.BILLETWEB_SYNC_FAILED if result.failed > 0 else AuditAction.BILLETWEB_SYNC_COMPLETED,
        entity=SYNC_ENTITY,
        entity_id="manual",
        details={
            "synced": result.synced,
            "failed": result.failed,
            "duration": result.duration,
            "errors": list(result.errors[:MAX_LOGGED_ERRORS]),
        },
    )

    message = (
        f"Sync completed with {result.failed} errors"
        if result.failed > 0
        else f"Successfully synced {result.synced} events"
    )
    return SyncTriggerResponse(
        synced=result.synced,
        failed=result.failed,
        errors=list(result.errors),
        duration=result.duration,
        message=message,
    )


@router.get("/sync", response_model=SyncStatusResponse)
async def sync_status(
    session: AsyncSession = Depends(get_db),
    _: Admin = Depends(get_current_admin),
    scheduler: SyncScheduler = Depends(get_sync_scheduler),
) -> SyncStatusResponse:
    """Report configuration, cache contents, scheduler state and the last journaled sync."""
    stats = scheduler.cache_stats()
    last_entry = await audit_service.latest(
        session, [AuditAction.BILLETWEB_SYNC_COMPLETED, AuditAction.BILLETWEB_SYNC_FAILED]
    )
    last_sync = None
    if last_entry:
        last_sync = LastSyncRead(
            status="success" if last_entry.action == AuditAction.BILLETWEB_SYNC_COMPLETED.value else "failed",
            timestamp=last_entry.created_at,
            details=audit_service.parse_details(last_entry),
        )
    return SyncStatusResponse(
        configured=scheduler.is_configured(),
        cache_size=stats.size,
        cached_events=stats.keys,
        scheduler=SchedulerStatusRead.model_validate(scheduler.get_status()),
        last_sync=last_sync,
    )


@router.delete("/sync", response_model=CacheInvalidationResponse)
async def invalidate_cache(
    billetweb_id: str | None = Query(default=None, alias="billetwebId"),
    _: Admin = Depends(get_current_admin),
    scheduler: SyncScheduler = Depends(get_sync_scheduler),
) -> CacheInvalidationResponse:
    """Drop cached availability for one event, or for all events."""
    scheduler.invalidate_cache(billetweb_id or None)
    message = f"Cache invalidated for event {billetweb_id}" if billetweb_id else "All cache invalidated"
    return CacheInvalidationResponse(message=message)
