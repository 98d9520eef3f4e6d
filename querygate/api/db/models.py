"""SQLAlchemy models for the service's own state database."""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from querygate.api.db.base import Base


class PersistedRecord(Base):
    """A named, expiring value.

    Connection profiles and the active profile id are each stored as one
    record holding JSON text.
    """
    __tablename__ = "persisted_records"

    name = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
