from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import read_admin_token
from app.db.session import get_session
from app.models.admin import Admin
from app.services import admin_service
from app.services.sync_scheduler import SyncScheduler

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login", auto_error=False)

ACCESS_COOKIE_NAME = "admin_token"


async def get_db() -> AsyncSession:
    async for session in get_session():
        yield session


async def get_current_admin(
    session: AsyncSession = Depends(get_db),
    token: str | None = Depends(oauth2_scheme),
    access_token_cookie: str | None = Cookie(default=None, alias=ACCESS_COOKIE_NAME),
) -> Admin:
    candidate = token or access_token_cookie
    if not candidate:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Non authentifié")

    claims = read_admin_token(candidate)
    if not claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    admin = await admin_service.get_admin_by_id(session, claims["sub"])
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return admin


def get_sync_scheduler(request: Request) -> SyncScheduler:
    scheduler: SyncScheduler | None = getattr(request.app.state, "sync_scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Sync scheduler not initialised")
    return scheduler
