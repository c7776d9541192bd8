"""Reverse geocoding cache model"""
from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint
from app.database import Base
from app.utils.time_utils import utc_now


class LocationCache(Base):
    """Reverse geocoding result keyed by coordinates rounded to 6 decimals"""

    __tablename__ = "location_cache"
    __table_args__ = (UniqueConstraint("lat", "lon", name="uq_location_cache_lat_lon"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)

    address = Column(String(500), nullable=False)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    country_code = Column(String(8), nullable=True)
    postal_code = Column(String(32), nullable=True)
    display_name = Column(String(1000), nullable=False)

    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
