"""Public catalog schemas with computed status badges."""

from __future__ import annotations

from pydantic import Field

from app.schema.base import ORMModel, Timestamped
from app.services.badge_service import BadgeType


class BadgeRead(ORMModel):
    type: BadgeType
    label: str
    priority: int


class AnimationRead(Timestamped):
    titre: str
    description: str | None = None
    badge: BadgeType | None = None


class BookableRead(Timestamped):
    """Shared fields for formations and stages."""
    titre: str
    description: str | None = None
    billetweb_url: str | None = None
    places_total: int | None = None
    places_left: int | None = None
    is_full: bool = False
    badge: BadgeType | None = None
    badges: list[BadgeRead] = Field(default_factory=list)


class FormationRead(BookableRead):
    pass


class StageRead(BookableRead):
    age_min: int | None = None
    age_max: int | None = None
