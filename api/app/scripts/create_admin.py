"""Create or reset a back-office admin account."""

from __future__ import annotations

import argparse
import asyncio
import getpass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password
from app.db.session import async_session, engine
from app.services import admin_service

MIN_PASSWORD_LENGTH = 12


async def ensure_admin(session: AsyncSession, *, email: str, password: str, name: str | None = None) -> bool:
    """Create the admin, or reset its password if it exists. Returns True when created."""
    existing = await admin_service.get_admin_by_email(session, email)
    if existing:
        existing.hashed_password = hash_password(password)
        if name:
            existing.name = name
        await session.commit()
        return False
    await admin_service.create_admin(session, email=email, password=password, name=name)
    return True


async def _run(email: str, password: str, name: str | None) -> bool:
    try:
        async with async_session() as session:
            return await ensure_admin(session, email=email, password=password, name=name)
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or reset a back-office admin")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return 1
    if getpass.getpass("Confirm password: ") != password:
        print("Passwords do not match.")
        return 1

    created = asyncio.run(_run(args.email, password, args.name))
    print(f"{'Created' if created else 'Updated'} admin {args.email.strip().lower()}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
