"""Admin audit journal helpers."""

from __future__ import annotations

import json
import uuid
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditAction, AuditLog


async def record(
    session: AsyncSession,
    *,
    admin_id: uuid.UUID | None,
    action: AuditAction,
    entity: str,
    entity_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLog:
    """Persist one audit entry and commit it immediately."""
    entry = AuditLog(
        admin_id=admin_id,
        action=action.value,
        entity=entity,
        entity_id=entity_id,
        details=json.dumps(details) if details is not None else None,
    )
    session.add(entry)
    await session.commit()
    return entry


async def latest(session: AsyncSession, actions: Iterable[AuditAction]) -> AuditLog | None:
    """Return the newest entry among the given actions."""
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.action.in_([action.value for action in actions]))
        .order_by(AuditLog.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


def parse_details(entry: AuditLog) -> dict[str, Any] | None:
    if not entry.details:
        return None
    try:
        parsed = json.loads(entry.details)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None
