"""Device registry: push tokens, locations and notification preferences"""
from datetime import timedelta
from typing import Callable, Iterator, Optional
import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.device import DeviceToken
from app.schemas.device import RegisterDeviceRequest, UpdateDevicePreferencesRequest
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

NON_NULLABLE_PREFERENCES = ("enable_prayer_notifications", "enable_event_notifications", "notify_before_prayer")


class DeviceService:
    """Service for managing registered devices"""

    def __init__(self, db: Session, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def _check_coordinates(self, device: DeviceToken):
        if (device.latitude is None) != (device.longitude is None):
            self.db.rollback()
            raise ValidationError("latitude and longitude must both be set or both be empty")

    def register_device(self, data: RegisterDeviceRequest) -> DeviceToken:
        """
        Register a device or refresh an existing registration (upsert by token)

        Fields that are not sent keep their stored value.
        """
        fields = data.model_dump(exclude_unset=True, exclude={"token"})
        now = self.clock()

        device = self.db.query(DeviceToken).filter(DeviceToken.token == data.token).first()

        if device:
            for key, value in fields.items():
                setattr(device, key, value)
            device.last_active_at = now
            self._check_coordinates(device)
            self.db.commit()
            self.db.refresh(device)

            logger.info(f"Updated device {device.id}")
            return device

        device = DeviceToken(
            token=data.token,
            notify_before_prayer=settings.DEFAULT_NOTIFY_BEFORE_MINUTES,
            last_active_at=now,
            created_at=now,
            **fields
        )
        self._check_coordinates(device)

        self.db.add(device)
        self.db.commit()
        self.db.refresh(device)

        logger.info(f"Registered new device {device.id} ({device.platform or 'unknown platform'})")
        return device

    def update_preferences(self, token: str, data: UpdateDevicePreferencesRequest) -> DeviceToken:
        """
        Update notification preferences and location of a device

        Raises:
            NotFoundError: If the token is not registered
            ValidationError: If the result would leave half a coordinate pair
        """
        device = self.get_device_by_token(token)
        if not device:
            raise NotFoundError("Device not found")

        fields = data.model_dump(exclude_unset=True)
        for key in NON_NULLABLE_PREFERENCES:
            if key in fields and fields[key] is None:
                del fields[key]
        if "enabled_prayers" in fields and fields["enabled_prayers"] is not None:
            fields["enabled_prayers"] = {
                key: value for key, value in fields["enabled_prayers"].items() if value is not None
            }

        for key, value in fields.items():
            setattr(device, key, value)
        device.last_active_at = self.clock()

        self._check_coordinates(device)
        if device.notify_before_prayer is None or device.notify_before_prayer < 0:
            self.db.rollback()
            raise ValidationError("notify_before_prayer must be zero or more minutes")

        self.db.commit()
        self.db.refresh(device)

        logger.info(f"Device preferences updated: {device.id}")
        return device

    def get_device_by_token(self, token: str) -> Optional[DeviceToken]:
        return self.db.query(DeviceToken).filter(DeviceToken.token == token).first()

    def unregister_device(self, token: str) -> bool:
        """
        Delete a device and its pending reminders

        Raises:
            NotFoundError: If the token is not registered
        """
        device = self.get_device_by_token(token)
        if not device:
            raise NotFoundError("Device not found")

        self.db.delete(device)
        self.db.commit()

        logger.info(f"Device unregistered: {token[:16]}...")
        return True

    def get_devices_with_prayer_notifications(self, batch_size: int = 500) -> Iterator[DeviceToken]:
        """
        Yield every device with prayer notifications on and both coordinates set

        Rows are read in id-ordered pages so the caller may commit between
        devices without invalidating an open cursor.
        """
        last_id = 0
        while True:
            batch = self.db.query(DeviceToken).filter(
                DeviceToken.enable_prayer_notifications == True,  # noqa: E712
                DeviceToken.latitude.isnot(None),
                DeviceToken.longitude.isnot(None),
                DeviceToken.id > last_id
            ).order_by(DeviceToken.id).limit(batch_size).all()

            if not batch:
                return

            last_id = batch[-1].id
            for device in batch:
                yield device

    def clean_inactive_devices(self, days: Optional[int] = None) -> int:
        """Remove devices with no activity for `days` (default INACTIVE_DEVICE_DAYS)"""
        days = days if days is not None else settings.INACTIVE_DEVICE_DAYS
        cutoff = self.clock() - timedelta(days=days)

        inactive = self.db.query(DeviceToken).filter(
            DeviceToken.last_active_at < cutoff
        ).all()

        count = len(inactive)
        for device in inactive:
            self.db.delete(device)
        self.db.commit()

        logger.info(f"Cleaned up {count} inactive devices")
        return count
