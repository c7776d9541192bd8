"""Daily prayer times with a date-keyed cache"""
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Callable, Dict, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import UpstreamError
from app.models.prayer import PrayerCache
from app.utils.http import http_get_json
from app.utils.time_utils import get_zone, local_today, utc_now

logger = logging.getLogger(__name__)

# Fixed order used everywhere prayers are iterated
PRAYER_KEYS = ("fajr", "dhuhr", "asr", "maghrib", "isha")


@dataclass
class PrayerTimes:
    """Five local "HH:MM" clock-times for one calendar date"""
    date: date
    fajr: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str

    def as_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_cache(cls, row: PrayerCache) -> "PrayerTimes":
        return cls(
            date=row.date,
            fajr=row.fajr,
            dhuhr=row.dhuhr,
            asr=row.asr,
            maghrib=row.maghrib,
            isha=row.isha,
        )


class AladhanClient:
    """Prayer times source backed by the Aladhan timings API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        method: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = (base_url or settings.PRAYER_API_BASE).rstrip("/")
        self.method = method if method is not None else settings.PRAYER_CALCULATION_METHOD
        self.timeout = timeout

    def fetch_timings(self, day: date, latitude: float, longitude: float) -> Dict[str, str]:
        """
        Fetch the five timings for a date and location

        Raises:
            UpstreamError: If the API is unreachable or the payload is incomplete
        """
        payload = http_get_json(
            f"{self.base_url}/timings/{day.strftime('%d-%m-%Y')}",
            params={"latitude": latitude, "longitude": longitude, "method": self.method},
            timeout=self.timeout,
        )

        try:
            timings = payload["data"]["timings"]
            return {key: timings[key.capitalize()] for key in PRAYER_KEYS}
        except (KeyError, TypeError) as e:
            raise UpstreamError(f"Unexpected prayer times payload: missing {e}") from e


class PrayerService:
    """
    Prayer times provider.

    The cache is keyed by local calendar date only: every caller on the same
    date shares one snapshot regardless of coordinates. This assumes a single
    timezone audience and is a known limitation.
    """

    def __init__(
        self,
        db: Session,
        source: Optional[AladhanClient] = None,
        clock: Callable = utc_now
    ):
        self.db = db
        self.source = source or AladhanClient()
        self.clock = clock

    def _today(self) -> date:
        return local_today(self.clock(), get_zone(settings.APP_TIMEZONE))

    def get_today_prayer_times(self, latitude: float, longitude: float) -> PrayerTimes:
        """
        Get today's prayer times, fetching and caching them on first use

        Raises:
            UpstreamError: If the source is unreachable and nothing is cached
        """
        today = self._today()

        cached = self.db.query(PrayerCache).filter(PrayerCache.date == today).first()
        if cached:
            logger.debug(f"Returning cached prayer times for {today}")
            return PrayerTimes.from_cache(cached)

        logger.info(f"Fetching prayer times for {today} ({latitude}, {longitude})")
        timings = self.source.fetch_timings(today, latitude, longitude)

        row = PrayerCache(date=today, **timings)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # Another worker cached the same date first
            self.db.rollback()
            row = self.db.query(PrayerCache).filter(PrayerCache.date == today).one()
        else:
            self.db.refresh(row)
            logger.info(f"Prayer times cached for {today}")

        return PrayerTimes.from_cache(row)

    def clean_old_cache(self) -> int:
        """Delete cached snapshots older than yesterday"""
        cutoff = self._today() - timedelta(days=1)

        deleted = self.db.query(PrayerCache).filter(
            PrayerCache.date < cutoff
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.info(f"Deleted {deleted} old prayer cache entries")
        return deleted
