"""Reverse geocoding schemas"""
from pydantic import BaseModel
from typing import Optional


class LocationResponse(BaseModel):
    lat: float
    lon: float
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    postal_code: Optional[str] = None
    display_name: str
