"""Device registration schemas"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime


class EnabledPrayers(BaseModel):
    """Per-prayer switches; an omitted prayer stays enabled"""
    fajr: Optional[bool] = None
    dhuhr: Optional[bool] = None
    asr: Optional[bool] = None
    maghrib: Optional[bool] = None
    isha: Optional[bool] = None


class CoordinatesMixin(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_coordinates_pair(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class RegisterDeviceRequest(CoordinatesMixin):
    """Register or refresh a device push token"""
    token: str = Field(..., min_length=1, max_length=500)
    device_id: Optional[str] = Field(None, max_length=255)
    platform: Optional[str] = Field(None, pattern="^(android|ios|web)$")
    timezone: Optional[str] = Field(None, max_length=64)


class UpdateDevicePreferencesRequest(CoordinatesMixin):
    """Partial preference update, only fields that are sent are changed"""
    enable_prayer_notifications: Optional[bool] = None
    enable_event_notifications: Optional[bool] = None
    notify_before_prayer: Optional[int] = Field(None, ge=0, le=180)
    timezone: Optional[str] = Field(None, max_length=64)
    enabled_prayers: Optional[EnabledPrayers] = None

    @field_validator("enable_prayer_notifications", "enable_event_notifications", "notify_before_prayer")
    @classmethod
    def reject_null(cls, value):
        # Stored columns are NOT NULL; omit the field to keep the current value
        if value is None:
            raise ValueError("must not be null")
        return value


class DeviceResponse(BaseModel):
    """Device details"""
    id: int
    token: str
    device_id: Optional[str] = None
    platform: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    enable_prayer_notifications: bool
    enable_event_notifications: bool
    notify_before_prayer: int
    enabled_prayers: Optional[dict] = None
    last_active_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class DeviceRegisterResponse(BaseModel):
    """Registration result; scheduling is best-effort"""
    device: DeviceResponse
    scheduled_notifications: int
    scheduling_error: Optional[str] = None


class PushTestRequest(BaseModel):
    """Send a test push to one token"""
    token: str = Field(..., min_length=1, max_length=500)
