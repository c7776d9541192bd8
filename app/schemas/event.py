"""Islamic event schemas"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime


class EventCreate(BaseModel):
    """Schema for creating an event"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    date_hijri: str = Field(..., min_length=1, max_length=100)
    estimated_gregorian: Optional[date] = None


class EventUpdate(BaseModel):
    """Schema for updating an event (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    date_hijri: Optional[str] = Field(None, min_length=1, max_length=100)
    estimated_gregorian: Optional[date] = None


class EventResponse(BaseModel):
    """Schema for event response"""
    id: int
    name: str
    description: Optional[str] = None
    date_hijri: str
    estimated_gregorian: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EventListResponse(BaseModel):
    events: List[EventResponse]
    total: int
