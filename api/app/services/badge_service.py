"""Status badge rules for listed activities.

Invariants:
- Pure and deterministic: every rule reads only the entity and the ``now`` it is given.
- Capacity badges are mutually exclusive (complet, then dernieres-places, then
  inscriptions-bientot); ``nouveau`` is evaluated independently of them.
- Display order is fixed by ``priority``: complet < dernieres-places < nouveau < inscriptions-bientot.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

NOUVEAU_DAYS = 7
DERNIERES_PLACES_THRESHOLD = 5

_SECONDS_PER_DAY = 24 * 60 * 60


class BadgeType(str, enum.Enum):
    """Badge codes understood by the front-end."""
    COMPLET = "complet"
    DERNIERES_PLACES = "dernieres-places"
    NOUVEAU = "nouveau"
    INSCRIPTIONS_BIENTOT = "inscriptions-bientot"


@dataclass(frozen=True, slots=True)
class BadgeInfo:
    type: BadgeType
    label: str
    priority: int


BADGE_DEFINITIONS: dict[BadgeType, BadgeInfo] = {
    BadgeType.COMPLET: BadgeInfo(BadgeType.COMPLET, "Complet", 1),
    BadgeType.DERNIERES_PLACES: BadgeInfo(BadgeType.DERNIERES_PLACES, "Dernières places", 2),
    BadgeType.NOUVEAU: BadgeInfo(BadgeType.NOUVEAU, "Nouveau", 3),
    BadgeType.INSCRIPTIONS_BIENTOT: BadgeInfo(BadgeType.INSCRIPTIONS_BIENTOT, "Inscriptions bientôt", 4),
}


class Badgeable(Protocol):
    """Attributes read by the rules; ORM rows and plain objects both qualify."""
    created_at: datetime


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _resolve_now(now: datetime | None) -> datetime:
    return _as_utc(now) if now is not None else datetime.now(timezone.utc)


def is_new(created_at: datetime, *, now: datetime | None = None) -> bool:
    """Return True while fewer than NOUVEAU_DAYS whole days have elapsed since creation."""
    elapsed = _resolve_now(now) - _as_utc(created_at)
    days_since_created = int(elapsed.total_seconds() // _SECONDS_PER_DAY)
    return days_since_created < NOUVEAU_DAYS


def is_full(entity: object) -> bool:
    """A full flag or zero places left both mean no availability."""
    return getattr(entity, "is_full", False) is True or getattr(entity, "places_left", None) == 0


def has_last_spots(entity: object) -> bool:
    places_left = getattr(entity, "places_left", None)
    return places_left is not None and 0 < places_left <= DERNIERES_PLACES_THRESHOLD


def is_registration_coming_soon(entity: object) -> bool:
    """No public registration link yet, whether or not a Billetweb event is linked."""
    return not getattr(entity, "billetweb_url", None)


def all_badges(entity: Badgeable, has_capacity_info: bool = True, *, now: datetime | None = None) -> list[BadgeInfo]:
    """Return every applicable badge sorted by display priority."""
    badges: list[BadgeInfo] = []

    if has_capacity_info:
        if is_full(entity):
            badges.append(BADGE_DEFINITIONS[BadgeType.COMPLET])
        elif has_last_spots(entity):
            badges.append(BADGE_DEFINITIONS[BadgeType.DERNIERES_PLACES])
        elif is_registration_coming_soon(entity):
            badges.append(BADGE_DEFINITIONS[BadgeType.INSCRIPTIONS_BIENTOT])

    if is_new(entity.created_at, now=now):
        badges.append(BADGE_DEFINITIONS[BadgeType.NOUVEAU])

    return sorted(badges, key=lambda badge: badge.priority)


def primary_badge(
    entity: Badgeable, has_capacity_info: bool = True, *, now: datetime | None = None
) -> BadgeType | None:
    """Return the single highest-priority badge, or None."""
    badges = all_badges(entity, has_capacity_info, now=now)
    return badges[0].type if badges else None


def animation_badge(created_at: datetime, *, now: datetime | None = None) -> BadgeType | None:
    """Animations carry no capacity data, so only ``nouveau`` can apply."""
    return BadgeType.NOUVEAU if is_new(created_at, now=now) else None


def formation_or_stage_badge(entity: Badgeable, *, now: datetime | None = None) -> BadgeType | None:
    return primary_badge(entity, True, now=now)
