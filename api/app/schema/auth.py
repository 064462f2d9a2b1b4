"""Admin login payloads."""

from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.schema.base import ORMModel


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class AdminRead(ORMModel):
    id: UUID
    email: str
    name: str | None = None


class AdminSession(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminRead
