"""Reverse geocoding through LocationIQ with a coordinate-keyed cache"""
from datetime import timedelta
from typing import Any, Callable, Dict, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import UpstreamError
from app.models.location import LocationCache
from app.utils.http import http_get_json
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def build_address(components: Dict[str, Any]) -> str:
    """Road, suburb, city and state joined into one line"""
    parts = [components.get(key) for key in ("road", "suburb", "city", "state")]
    return ", ".join(p for p in parts if p) or "Unknown Address"


class LocationService:
    """Service for reverse geocoding coordinates"""

    def __init__(
        self,
        db: Session,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        clock: Callable = utc_now
    ):
        self.db = db
        self.api_key = api_key if api_key is not None else settings.LOCATIONIQ_API_KEY
        self.base_url = (base_url or settings.LOCATIONIQ_API_BASE).rstrip("/")
        self.clock = clock

    @staticmethod
    def _to_dict(row: LocationCache) -> Dict[str, Any]:
        return {
            "lat": row.lat,
            "lon": row.lon,
            "address": row.address,
            "city": row.city,
            "state": row.state,
            "country": row.country,
            "country_code": row.country_code,
            "postal_code": row.postal_code,
            "display_name": row.display_name,
        }

    def _fetch(self, lat: float, lon: float) -> Dict[str, Any]:
        if not self.api_key:
            raise UpstreamError("LOCATIONIQ_API_KEY is not configured")

        return http_get_json(
            f"{self.base_url}/reverse",
            params={"key": self.api_key, "lat": lat, "lon": lon, "format": "json"},
        )

    def reverse_geocode(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Resolve coordinates to an address, cached per coordinates rounded to 6 decimals

        Raises:
            UpstreamError: If LocationIQ is not configured or unreachable
        """
        lat = round(lat, 6)
        lon = round(lon, 6)

        cached = self.db.query(LocationCache).filter(
            LocationCache.lat == lat,
            LocationCache.lon == lon
        ).first()
        if cached:
            logger.debug(f"Returning cached location for ({lat}, {lon})")
            return self._to_dict(cached)

        logger.info(f"Fetching location data for ({lat}, {lon}) from LocationIQ")
        response = self._fetch(lat, lon)
        address = response.get("address") or {}
        country_code = address.get("country_code")

        row = LocationCache(
            lat=lat,
            lon=lon,
            address=build_address(address),
            city=address.get("city") or address.get("county") or address.get("suburb"),
            state=address.get("state"),
            country=address.get("country"),
            country_code=country_code.upper() if country_code else None,
            postal_code=address.get("postcode"),
            display_name=response.get("display_name") or build_address(address),
            created_at=self.clock(),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            row = self.db.query(LocationCache).filter(
                LocationCache.lat == lat,
                LocationCache.lon == lon
            ).one()

        return self._to_dict(row)

    def clean_old_cache(self, days: Optional[int] = None) -> int:
        """Delete cache entries older than LOCATION_CACHE_DAYS"""
        days = days if days is not None else settings.LOCATION_CACHE_DAYS
        cutoff = self.clock() - timedelta(days=days)

        deleted = self.db.query(LocationCache).filter(
            LocationCache.created_at < cutoff
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.info(f"Deleted {deleted} old location cache entries")
        return deleted
