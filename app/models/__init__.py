"""Database models"""
from app.models.device import DeviceToken
from app.models.notification import NotificationType, ScheduledNotification
from app.models.prayer import PrayerCache
from app.models.event import IslamicEvent
from app.models.location import LocationCache
from app.models.quran import Surah, Ayah

__all__ = [
    "DeviceToken",
    "NotificationType",
    "ScheduledNotification",
    "PrayerCache",
    "IslamicEvent",
    "LocationCache",
    "Surah",
    "Ayah",
]
