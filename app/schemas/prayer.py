"""Prayer times schemas"""
from pydantic import BaseModel


class PrayerTimesResponse(BaseModel):
    """Today's prayer clock-times ("HH:MM", local)"""
    date: str
    fajr: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str
