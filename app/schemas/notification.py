"""Notification schemas"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.notification import NotificationType


class SendNotificationRequest(BaseModel):
    """Broadcast a notification to the topic named by its type"""
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1, max_length=1000)
    meta: Optional[Dict[str, Any]] = Field(None, description="Additional data payload")

    @field_validator("type")
    @classmethod
    def check_broadcast_type(cls, value: NotificationType) -> NotificationType:
        if value is NotificationType.AZAN:
            raise ValueError("AZAN notifications are scheduled per device, not broadcast")
        return value


class ScheduleNotificationRequest(SendNotificationRequest):
    """Schedule a broadcast; naive timestamps are read as APP_TIMEZONE local time"""
    schedule_at: datetime


class SendNotificationResponse(BaseModel):
    """Notification send result"""
    success: bool
    message: str
    topic: str


class ScheduledNotificationResponse(BaseModel):
    """Scheduled notification details (schedule_at is UTC)"""
    id: int
    type: NotificationType
    title: str
    body: str
    meta: Optional[Dict[str, Any]] = None
    schedule_at: datetime
    sent: bool
    sent_at: Optional[datetime] = None
    device_token_id: Optional[int] = None

    class Config:
        from_attributes = True


class ScheduledNotificationListResponse(BaseModel):
    """Upcoming scheduled notifications"""
    notifications: List[ScheduledNotificationResponse]
    total: int
