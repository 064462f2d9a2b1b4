"""Public catalog listings carry computed badges."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.models.activity import Animation, Formation, Stage


@pytest.mark.asyncio
async def test_formations_listing_includes_badges(client, session):
    now = datetime.now(timezone.utc)
    session.add_all(
        [
            Formation(
                titre="Dernières places",
                published=True,
                billetweb_url="https://www.billetweb.fr/a",
                places_total=20,
                places_left=3,
                created_at=now - timedelta(days=2),
            ),
            Formation(
                titre="Complète",
                published=True,
                billetweb_url="https://www.billetweb.fr/b",
                places_total=10,
                places_left=0,
                is_full=True,
                created_at=now - timedelta(days=30),
            ),
            Formation(titre="Bientôt", published=True, created_at=now - timedelta(days=40)),
        ]
    )
    await session.commit()

    response = await client.get("/api/formations")

    assert response.status_code == 200
    items = {item["titre"]: item for item in response.json()}
    assert [item["titre"] for item in response.json()] == ["Dernières places", "Complète", "Bientôt"]
    assert items["Dernières places"]["badge"] == "dernieres-places"
    assert [badge["type"] for badge in items["Dernières places"]["badges"]] == ["dernieres-places", "nouveau"]
    assert items["Dernières places"]["badges"][0]["label"] == "Dernières places"
    assert items["Complète"]["badge"] == "complet"
    assert items["Bientôt"]["badge"] == "inscriptions-bientot"


@pytest.mark.asyncio
async def test_stages_listing(client, session):
    session.add(
        Stage(
            titre="Cabane",
            published=True,
            billetweb_url="https://www.billetweb.fr/c",
            places_total=12,
            places_left=12,
        )
    )
    await session.commit()

    response = await client.get("/api/stages")

    assert response.status_code == 200
    (item,) = response.json()
    assert item["badge"] == "nouveau"
    assert [badge["type"] for badge in item["badges"]] == ["nouveau"]


@pytest.mark.asyncio
async def test_animations_only_show_nouveau(client, session):
    now = datetime.now(timezone.utc)
    session.add_all(
        [
            Animation(titre="Mare pédagogique", published=True, created_at=now - timedelta(days=1)),
            Animation(titre="Compost", published=True, created_at=now - timedelta(days=8)),
        ]
    )
    await session.commit()

    response = await client.get("/api/animations")

    assert response.status_code == 200
    badges = {item["titre"]: item["badge"] for item in response.json()}
    assert badges == {"Mare pédagogique": "nouveau", "Compost": None}


@pytest.mark.asyncio
async def test_unpublished_drafts_are_hidden(client, session):
    session.add_all(
        [
            Formation(titre="Publiée", published=True, billetweb_url="https://www.billetweb.fr/p"),
            Formation(titre="Brouillon", billetweb_url="https://www.billetweb.fr/d"),
            Stage(titre="Stage brouillon", published=False),
            Animation(titre="Animation brouillon"),
        ]
    )
    await session.commit()

    formations = await client.get("/api/formations")
    stages = await client.get("/api/stages")
    animations = await client.get("/api/animations")

    assert [item["titre"] for item in formations.json()] == ["Publiée"]
    assert stages.json() == []
    assert animations.json() == []
