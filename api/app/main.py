"""FastAPI application entrypoint and sync scheduler lifecycle.

Invariants:
- The sync scheduler is built once per process at startup and stopped at shutdown.
- Health output never exposes Billetweb credentials.
"""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import async_session
from app.services.sync_scheduler import build_sync_scheduler

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def _start_sync_scheduler() -> None:
    """Build the Billetweb scheduler and start it when sync is enabled."""
    configure_logging(settings.log_level)
    scheduler = build_sync_scheduler(async_session)
    app.state.sync_scheduler = scheduler
    if settings.billetweb_sync_enabled and settings.environment.lower() != "test":
        scheduler.start()


@app.on_event("shutdown")
async def _stop_sync_scheduler() -> None:
    scheduler = getattr(app.state, "sync_scheduler", None)
    if scheduler is not None:
        await scheduler.shutdown()


def _summarize_sync(scheduler: Any) -> dict[str, Any]:
    """Condense scheduler state into health-friendly telemetry."""
    status = scheduler.get_status()
    issues: list[dict[str, Any]] = []
    if status.last_error:
        issues.append({"reason": "last_error", "error": status.last_error})
    if status.last_result and status.last_result.failed > 0:
        issues.append({"reason": "entity_failures", "failed": status.last_result.failed})
    return {
        "configured": scheduler.is_configured(),
        "is_running": status.is_running,
        "last_run": status.last_run.isoformat() if status.last_run else None,
        "next_run": status.next_run.isoformat() if status.next_run else None,
        "run_count": status.run_count,
        "issues": issues,
    }


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health() -> dict[str, Any]:
    """Return service health, degraded when the last sync reported problems."""
    scheduler = getattr(app.state, "sync_scheduler", None)
    if scheduler is None:
        return {"status": "ok"}
    sync = _summarize_sync(scheduler)
    return {"status": "degraded" if sync["issues"] else "ok", "billetweb": sync}
