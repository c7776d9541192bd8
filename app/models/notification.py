"""Scheduled notification model"""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON, Enum
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class NotificationType(str, enum.Enum):
    """Notification kind; ordinary kinds double as FCM topic names"""

    AZAN = "AZAN"  # per-device prayer reminder
    GENERAL = "GENERAL"
    EVENT = "EVENT"
    ANNOUNCEMENT = "ANNOUNCEMENT"

    @classmethod
    def broadcast_types(cls):
        return [t for t in cls if t is not cls.AZAN]


class ScheduledNotification(Base):
    """Pending or delivered notification with a fixed due time"""

    __tablename__ = "notification_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Enum(NotificationType, name="notification_type"), nullable=False, index=True)

    # Content
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    meta = Column(JSON, nullable=True)

    # Delivery state
    schedule_at = Column(DateTime, nullable=False, index=True)  # naive UTC, never updated
    sent = Column(Boolean, default=False, nullable=False, index=True)
    sent_at = Column(DateTime, nullable=True)
    claimed_until = Column(DateTime, nullable=True)  # delivery lease held by a sweep

    # Recipient (prayer reminders only)
    device_token_id = Column(
        Integer,
        ForeignKey("device_tokens.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    device_token = relationship("DeviceToken", back_populates="scheduled_notifications")

    def __repr__(self):
        return f"<ScheduledNotification(id={self.id}, type={self.type}, schedule_at={self.schedule_at}, sent={self.sent})>"
