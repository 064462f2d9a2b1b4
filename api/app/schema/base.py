"""Shared schema base classes for API responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ORMModel(BaseModel):
    """Base model that reads attributes straight off SQLAlchemy rows."""

    model_config = {"from_attributes": True}


class Timestamped(ORMModel):
    """Common identity and timestamps for catalog resources."""
    id: UUID
    created_at: datetime
    updated_at: datetime
