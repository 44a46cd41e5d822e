"""
Declarative base and shared columns for all models.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


Base = declarative_base()


class BaseModel(Base):
    """Abstract model with surrogate key and audit timestamps."""
    __abstract__ = True
    
    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
