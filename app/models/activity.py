"""
Activity model for volunteer events.
"""
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Index
from datetime import datetime, timezone
from ..database import Base


class ActivityStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class ActivityCategory(str, Enum):
    EDUCATION = "Giáo dục"
    ENVIRONMENT = "Môi trường"
    HEALTH = "Y tế"
    SOCIAL = "Xã hội"
    OTHER = "Khác"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_status_date", "status", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # when the activity takes place
    location = Column(String(300), nullable=False)
    participants = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=ActivityStatus.UPCOMING.value)
    category = Column(String(50), nullable=False, index=True)
    images = Column(JSON, default=list)
    videos = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
