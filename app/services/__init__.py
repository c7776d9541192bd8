"""Business logic services"""
from app.services.device_service import DeviceService
from app.services.fcm_service import FCMService
from app.services.notification_service import NotificationService
from app.services.prayer_notification_service import PrayerNotificationService
from app.services.prayer_service import PrayerService

__all__ = [
    "DeviceService",
    "FCMService",
    "NotificationService",
    "PrayerNotificationService",
    "PrayerService",
]
