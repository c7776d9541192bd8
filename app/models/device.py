"""Device registration model"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, JSON
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class DeviceToken(Base):
    """Push token of an installed app instance with its notification preferences"""

    __tablename__ = "device_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # FCM registration token
    token = Column(String(500), nullable=False, unique=True, index=True)

    # Device information
    device_id = Column(String(255), nullable=True)
    platform = Column(String(50), nullable=True)  # android, ios, web

    # Last known location (both set or both null)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    timezone = Column(String(64), nullable=True)

    # Preferences
    enable_prayer_notifications = Column(Boolean, default=True, nullable=False)
    enable_event_notifications = Column(Boolean, default=True, nullable=False)
    notify_before_prayer = Column(Integer, default=5, nullable=False)  # minutes
    enabled_prayers = Column(JSON, nullable=True)  # {"fajr": true, "asr": false, ...}

    # Timestamps
    last_active_at = Column(DateTime, default=utc_now, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    scheduled_notifications = relationship(
        "ScheduledNotification",
        back_populates="device_token",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self):
        return f"<DeviceToken(id={self.id}, platform={self.platform}, device={self.device_id})>"
