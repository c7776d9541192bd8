"""Prayer times cache model"""
from sqlalchemy import Column, Integer, String, Date, DateTime
from app.database import Base
from app.utils.time_utils import utc_now


class PrayerCache(Base):
    """Daily prayer clock-times, one row per local calendar date"""

    __tablename__ = "prayer_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, unique=True, index=True)

    # "HH:MM" local clock-times
    fajr = Column(String(16), nullable=False)
    dhuhr = Column(String(16), nullable=False)
    asr = Column(String(16), nullable=False)
    maghrib = Column(String(16), nullable=False)
    isha = Column(String(16), nullable=False)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<PrayerCache(date={self.date})>"
