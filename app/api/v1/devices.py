"""Device registration API endpoints"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.dependencies import get_gateway, get_prayer_notification_service
from app.core.exceptions import NotFoundError, ValidationError
from app.services.device_service import DeviceService
from app.services.fcm_service import FCMService
from app.services.prayer_notification_service import PrayerNotificationService
from app.schemas.device import (
    RegisterDeviceRequest,
    UpdateDevicePreferencesRequest,
    DeviceResponse,
    DeviceRegisterResponse,
    PushTestRequest
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/device", tags=["devices"])


def _reschedule(scheduler: PrayerNotificationService, device):
    """Best-effort reminder computation; never fails the surrounding request"""
    try:
        return scheduler.schedule_for_device(device), None
    except Exception as e:
        scheduler.db.rollback()
        logger.error(f"Scheduling after device update failed for device {device.id}: {e}")
        return 0, str(e)


@router.post("/register", response_model=DeviceRegisterResponse, status_code=status.HTTP_201_CREATED)
def register_device(
    data: RegisterDeviceRequest,
    db: Session = Depends(get_db),
    scheduler: PrayerNotificationService = Depends(get_prayer_notification_service)
):
    """
    Register or refresh a device push token

    - **token**: FCM registration token
    - **device_id**, **platform**, **timezone**: optional device details
    - **latitude** / **longitude**: optional, must be sent together

    Today's prayer reminders are scheduled right away when the device has a
    location. Scheduling is best-effort: the registration succeeds even if it fails.
    """
    try:
        device = DeviceService(db).register_device(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error registering device: {str(e)}"
        )

    scheduled, error = _reschedule(scheduler, device)
    db.refresh(device)

    return DeviceRegisterResponse(
        device=DeviceResponse.model_validate(device),
        scheduled_notifications=scheduled,
        scheduling_error=error
    )


@router.put("/{token}/preferences", response_model=DeviceRegisterResponse)
def update_device_preferences(
    data: UpdateDevicePreferencesRequest,
    token: str = Path(..., description="FCM token"),
    db: Session = Depends(get_db),
    scheduler: PrayerNotificationService = Depends(get_prayer_notification_service)
):
    """
    Update notification preferences and location

    Today's reminders for the device are replaced to reflect the new settings.
    Turning prayer notifications off removes the device's pending reminders.
    """
    try:
        device = DeviceService(db).update_preferences(token, data)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating device preferences: {str(e)}"
        )

    if device.enable_prayer_notifications and device.has_location:
        scheduled, error = _reschedule(scheduler, device)
    else:
        scheduler.clear_pending_for_device(device.id, scheduler.clock())
        db.commit()
        scheduled, error = 0, None
    db.refresh(device)

    return DeviceRegisterResponse(
        device=DeviceResponse.model_validate(device),
        scheduled_notifications=scheduled,
        scheduling_error=error
    )


@router.get("/{token}", response_model=DeviceResponse)
def get_device_info(
    token: str = Path(..., description="FCM token"),
    db: Session = Depends(get_db)
):
    """Get a registered device"""
    device = DeviceService(db).get_device_by_token(token)
    if not device:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Device not found"
        )
    return DeviceResponse.model_validate(device)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
def unregister_device(
    token: str = Path(..., description="FCM token"),
    db: Session = Depends(get_db)
):
    """
    Unregister a device

    Pending reminders for the device are removed with it.
    """
    try:
        DeviceService(db).unregister_device(token)
        return None

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error unregistering device: {str(e)}"
        )


@router.post("/test", response_model=dict)
def send_test_notification(
    data: PushTestRequest,
    gateway: FCMService = Depends(get_gateway)
):
    """Send a test notification to one token to verify delivery"""
    sent = gateway.send_to_device(
        data.token,
        "Tes Notifikasi",
        "Ini adalah tes notifikasi dari server untuk memastikan koneksi berhasil.",
        {"type": "TEST"}
    )
    if not sent:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send test notification"
        )
    return {"success": True, "message": "Notification sent"}
