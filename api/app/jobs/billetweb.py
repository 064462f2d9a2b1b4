"""One-shot Billetweb availability sync, for cron hosts or manual runs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Any

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import async_session, engine
from app.services.availability_cache import AvailabilityCache
from app.services.billetweb_client import BilletwebClient
from app.services.billetweb_sync_service import BilletwebSyncService
from app.services.bookable_provider import default_providers

logger = logging.getLogger("app.jobs.billetweb")


def run_billetweb_sync_job() -> dict[str, Any]:
    """Sync every bookable activity once and return the result as a dict."""

    async def _run() -> dict[str, Any]:
        service = BilletwebSyncService(BilletwebClient(cache=AvailabilityCache()), default_providers(async_session))
        try:
            result = await service.sync_all_events()
        finally:
            await engine.dispose()
        return asdict(result)

    summary = asyncio.run(_run())
    logger.info(
        "Billetweb sync job complete (synced=%d failed=%d)", summary["synced"], summary["failed"]
    )
    return summary


def main() -> None:
    configure_logging(settings.log_level)
    summary = run_billetweb_sync_job()
    for error in summary["errors"]:
        logger.warning("Sync error: %s", error)


if __name__ == "__main__":
    main()
