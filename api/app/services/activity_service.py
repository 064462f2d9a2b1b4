"""Public catalog queries decorated with status badges."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity import Animation, Formation, Stage
from app.schema.activity import AnimationRead, BadgeRead, FormationRead, StageRead
from app.services import badge_service


async def _newest_first(session: AsyncSession, model) -> Sequence:
    """Published rows only; drafts stay in the back office."""
    result = await session.execute(
        select(model).where(model.published.is_(True)).order_by(model.created_at.desc())
    )
    return result.scalars().all()


def _with_badges(schema, entity, now: datetime | None):
    badges = badge_service.all_badges(entity, True, now=now)
    return schema.model_validate(entity).model_copy(
        update={
            "badge": badges[0].type if badges else None,
            "badges": [BadgeRead.model_validate(badge) for badge in badges],
        }
    )


async def list_formations(session: AsyncSession, *, now: datetime | None = None) -> list[FormationRead]:
    return [_with_badges(FormationRead, item, now) for item in await _newest_first(session, Formation)]


async def list_stages(session: AsyncSession, *, now: datetime | None = None) -> list[StageRead]:
    return [_with_badges(StageRead, item, now) for item in await _newest_first(session, Stage)]


async def list_animations(session: AsyncSession, *, now: datetime | None = None) -> list[AnimationRead]:
    """Animations only ever show ``nouveau``."""
    return [
        AnimationRead.model_validate(item).model_copy(
            update={"badge": badge_service.animation_badge(item.created_at, now=now)}
        )
        for item in await _newest_first(session, Animation)
    ]
