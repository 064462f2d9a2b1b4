"""Back-office accounts and the admin action journal."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditAction(str, enum.Enum):
    """Actions recorded in the audit journal."""
    BILLETWEB_SYNC_STARTED = "billetweb.sync_started"
    BILLETWEB_SYNC_COMPLETED = "billetweb.sync_completed"
    BILLETWEB_SYNC_FAILED = "billetweb.sync_failed"


class Admin(Base):
    """Back-office account allowed to manage content and trigger syncs."""
    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    audit_logs: Mapped[list["AuditLog"]] = relationship(back_populates="admin")


class AuditLog(Base):
    """One admin action; ``details`` holds a JSON document."""
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admin_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admins.id", ondelete="SET NULL"), index=True
    )
    action: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    entity: Mapped[str] = mapped_column(String(120), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(120))
    details: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)

    admin: Mapped[Admin | None] = relationship(back_populates="audit_logs")
