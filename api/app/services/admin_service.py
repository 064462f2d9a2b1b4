"""Back-office account lookups and authentication."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password, verify_password
from app.models.admin import Admin


async def get_admin_by_id(session: AsyncSession, admin_id: uuid.UUID | str) -> Admin | None:
    try:
        key = admin_id if isinstance(admin_id, uuid.UUID) else uuid.UUID(str(admin_id))
    except ValueError:
        return None
    return await session.get(Admin, key)


async def get_admin_by_email(session: AsyncSession, email: str) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.email == email.strip().lower()))
    return result.scalars().first()


async def authenticate(session: AsyncSession, email: str, password: str) -> Admin | None:
    """Return the admin when the credentials match, otherwise None."""
    admin = await get_admin_by_email(session, email)
    if not admin or not verify_password(password, admin.hashed_password):
        return None
    return admin


async def create_admin(session: AsyncSession, *, email: str, password: str, name: str | None = None) -> Admin:
    admin = Admin(email=email.strip().lower(), hashed_password=hash_password(password), name=name)
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    return admin
