"""SQLAlchemy ORM models for the back-office API."""

from app.models.activity import Animation, Formation, Stage
from app.models.admin import Admin, AuditAction, AuditLog

__all__ = [
    "Admin",
    "Animation",
    "AuditAction",
    "AuditLog",
    "Formation",
    "Stage",
]
