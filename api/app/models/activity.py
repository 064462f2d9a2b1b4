"""Activity catalog models: bookable formations and stages, plus animations."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class _CatalogMixin(_TimestampMixin):
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)


class _BookableMixin(_CatalogMixin):
    """Registration and capacity fields synced from Billetweb."""
    billetweb_id: Mapped[str | None] = mapped_column(String(120), index=True)
    billetweb_url: Mapped[str | None] = mapped_column(String(1024))
    places_total: Mapped[int | None] = mapped_column(Integer)
    places_left: Mapped[int | None] = mapped_column(Integer)
    is_full: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


def _capacity_constraints() -> tuple[CheckConstraint, ...]:
    return (
        CheckConstraint("places_total IS NULL OR places_total >= 0", name="places_total_non_negative"),
        CheckConstraint("places_left IS NULL OR places_left >= 0", name="places_left_non_negative"),
        CheckConstraint(
            "places_left IS NULL OR places_total IS NULL OR places_left <= places_total",
            name="places_left_within_total",
        ),
    )


class Formation(_BookableMixin, Base):
    """Adult course with paid registration."""
    __tablename__ = "formations"
    __table_args__ = _capacity_constraints()

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    titre: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)


class Stage(_BookableMixin, Base):
    """Holiday camp with paid registration."""
    __tablename__ = "stages"
    __table_args__ = _capacity_constraints()

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    titre: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    age_min: Mapped[int | None] = mapped_column(Integer)
    age_max: Mapped[int | None] = mapped_column(Integer)


class Animation(_CatalogMixin, Base):
    """School programme; booked offline, so it carries no capacity fields."""
    __tablename__ = "animations"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    titre: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
