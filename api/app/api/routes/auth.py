from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import ACCESS_COOKIE_NAME, get_current_admin, get_db
from app.core.config import settings
from app.core.security import create_admin_token
from app.models.admin import Admin
from app.schema.auth import AdminLogin, AdminRead, AdminSession
from app.services import admin_service

router = APIRouter()


def set_auth_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE_NAME,
        access_token,
        max_age=settings.access_token_expires_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment.lower() == "production",
        path="/",
    )


@router.post("/login", response_model=AdminSession)
async def login(payload: AdminLogin, response: Response, session: AsyncSession = Depends(get_db)) -> AdminSession:
    """Exchange admin credentials for a session token."""
    admin = await admin_service.authenticate(session, payload.email, payload.password)
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Identifiants invalides")
    token = create_admin_token(str(admin.id), admin.email)
    set_auth_cookie(response, token)
    return AdminSession(access_token=token, admin=AdminRead.model_validate(admin))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, response_model=None)
async def logout(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE_NAME, path="/")


@router.get("/me", response_model=AdminRead)
async def me(current_admin: Admin = Depends(get_current_admin)) -> AdminRead:
    return AdminRead.model_validate(current_admin)
