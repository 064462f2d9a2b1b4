"""Public catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.schema.activity import AnimationRead, FormationRead, StageRead
from app.services import activity_service

router = APIRouter()


@router.get("/formations", response_model=list[FormationRead])
async def list_formations(session: AsyncSession = Depends(get_db)) -> list[FormationRead]:
    return await activity_service.list_formations(session)


@router.get("/stages", response_model=list[StageRead])
async def list_stages(session: AsyncSession = Depends(get_db)) -> list[StageRead]:
    return await activity_service.list_stages(session)


@router.get("/animations", response_model=list[AnimationRead])
async def list_animations(session: AsyncSession = Depends(get_db)) -> list[AnimationRead]:
    return await activity_service.list_animations(session)
