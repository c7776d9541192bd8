"""FastAPI dependencies: API key check and service wiring"""
import secrets

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.fcm_service import FCMService
from app.services.notification_service import NotificationService
from app.services.prayer_notification_service import PrayerNotificationService
from app.services.prayer_service import AladhanClient, PrayerService


def verify_api_key(x_api_key: str = Header(None, alias="X-API-Key")):
    """Reject requests without the shared public API key"""
    if not x_api_key or not settings.PUBLIC_API_KEY or not secrets.compare_digest(
        x_api_key, settings.PUBLIC_API_KEY
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )


def get_gateway() -> FCMService:
    return FCMService()


def get_prayer_source() -> AladhanClient:
    return AladhanClient()


def get_prayer_service(
    db: Session = Depends(get_db),
    source: AladhanClient = Depends(get_prayer_source)
) -> PrayerService:
    return PrayerService(db, source=source)


def get_notification_service(
    db: Session = Depends(get_db),
    gateway: FCMService = Depends(get_gateway)
) -> NotificationService:
    return NotificationService(db, gateway=gateway)


def get_prayer_notification_service(
    db: Session = Depends(get_db),
    prayer_service: PrayerService = Depends(get_prayer_service),
    notification_service: NotificationService = Depends(get_notification_service)
) -> PrayerNotificationService:
    return PrayerNotificationService(
        db,
        prayer_service=prayer_service,
        notification_service=notification_service,
    )
