"""SQLAlchemy models for locally persisted campaign sessions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CampaignSessionRecord(Base):
    """A campaign session document stored as a JSON blob."""

    __tablename__ = "campaign_sessions"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(100), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False, default="")
    session_state = Column(String(50), nullable=False, default="active")
    resolution_type = Column(String(50), nullable=True)
    data = Column(Text, nullable=False)  # CampaignSession.to_dict() as JSON
    save_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
