"""API routes"""
from fastapi import APIRouter, Depends

from app.core.dependencies import verify_api_key
from app.api.v1 import devices, events, location, notifications, prayer, quran

api_router = APIRouter(dependencies=[Depends(verify_api_key)])

api_router.include_router(quran.router)
api_router.include_router(prayer.router)
api_router.include_router(location.router)
api_router.include_router(events.router)
api_router.include_router(notifications.router)
api_router.include_router(devices.router)
