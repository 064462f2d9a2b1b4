"""Storage adapters for activities whose seats are sold through Billetweb."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.activity import Formation, Stage


@dataclass(frozen=True, slots=True)
class SyncTarget:
    """One bookable entity linked to a Billetweb event."""
    entity_type: str
    entity_id: uuid.UUID
    billetweb_id: str
    titre: str


class BookableEntityProvider:
    """Read/write interface the sync orchestrator uses for one collection."""
    entity_type: str
    label: str

    async def list_with_external_ref(self) -> list[SyncTarget]:
        """Return every entity that has a Billetweb event configured."""
        raise NotImplementedError

    async def apply_availability(self, entity_id: uuid.UUID, *, total: int, left: int, is_full: bool) -> None:
        """Persist synced capacity fields for a single entity."""
        raise NotImplementedError


class ModelBookableProvider(BookableEntityProvider):
    """Provider backed by an ORM model carrying the bookable columns.

    Each call opens its own session so writes from concurrent tasks never share one.
    """
    model: Any

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def list_with_external_ref(self) -> list[SyncTarget]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.model.id, self.model.billetweb_id, self.model.titre)
                .where(self.model.billetweb_id.is_not(None))
                .order_by(self.model.created_at)
            )
            return [
                SyncTarget(entity_type=self.entity_type, entity_id=row.id, billetweb_id=row.billetweb_id, titre=row.titre)
                for row in result.all()
                if row.billetweb_id
            ]

    async def apply_availability(self, entity_id: uuid.UUID, *, total: int, left: int, is_full: bool) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(self.model)
                .where(self.model.id == entity_id)
                .values(places_total=total, places_left=left, is_full=is_full)
            )
            await session.commit()


class FormationProvider(ModelBookableProvider):
    model = Formation
    entity_type = "formation"
    label = "Formation"


class StageProvider(ModelBookableProvider):
    model = Stage
    entity_type = "stage"
    label = "Stage"


def default_providers(session_factory: async_sessionmaker[AsyncSession]) -> list[BookableEntityProvider]:
    return [FormationProvider(session_factory), StageProvider(session_factory)]
