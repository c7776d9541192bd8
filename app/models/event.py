"""Islamic calendar event model"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Text
from app.database import Base
from app.utils.time_utils import utc_now


class IslamicEvent(Base):
    """Islamic calendar event with an estimated Gregorian date"""

    __tablename__ = "islamic_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date_hijri = Column(String(100), nullable=False)  # e.g. "1 Muharram 1447"
    estimated_gregorian = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<IslamicEvent(id={self.id}, name={self.name})>"
