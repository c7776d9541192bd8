"""Time helpers.

Timestamps are stored as naive UTC. Prayer clock-times are wall-clock values
in a local timezone and are converted here.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from app.config import settings

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(name: Optional[str] = None) -> ZoneInfo:
    """Resolve an IANA timezone label, falling back to APP_TIMEZONE"""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{name}', using {settings.APP_TIMEZONE}")
    return ZoneInfo(settings.APP_TIMEZONE)


def to_local(value: datetime, zone: ZoneInfo) -> datetime:
    """Naive UTC -> aware local"""
    return value.replace(tzinfo=timezone.utc).astimezone(zone)


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetime -> naive UTC"""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_today(now_utc: datetime, zone: ZoneInfo) -> date:
    """Calendar date in `zone` at the given naive UTC instant"""
    return to_local(now_utc, zone).date()


def parse_clock_time(value: str) -> time:
    """
    Parse an "HH:MM" clock-time.

    Some sources append a zone suffix ("05:10 (WIB)"); only the leading token
    is read.

    Raises:
        ValueError: If the value is not a valid clock-time
    """
    token = value.strip().split(" ")[0] if value else ""
    parts = token.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid clock time: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Clock time out of range: {value!r}")
    return time(hour=hours, minute=minutes)
