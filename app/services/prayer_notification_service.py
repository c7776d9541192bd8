"""Prayer reminder scheduling and delivery"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Event
from typing import Callable, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import ValidationError
from app.models.device import DeviceToken
from app.models.notification import NotificationType, ScheduledNotification
from app.services.device_service import DeviceService
from app.services.fcm_service import FCMService
from app.services.notification_service import NotificationService
from app.services.prayer_service import PRAYER_KEYS, PrayerService
from app.utils.time_utils import get_zone, parse_clock_time, to_naive_utc, utc_now

logger = logging.getLogger(__name__)

# key -> (display name, emoji)
PRAYER_LABELS = {
    "fajr": ("Fajr", "🌅"),
    "dhuhr": ("Dhuhr", "☀️"),
    "asr": ("Asr", "🌤️"),
    "maghrib": ("Maghrib", "🌆"),
    "isha": ("Isha", "🌙"),
}


@dataclass
class DeviceScheduleResult:
    """Outcome of scheduling one device during the daily run"""
    device_id: int
    scheduled: int = 0
    error: Optional[str] = None


@dataclass
class DeliveryResult:
    """Outcome of one due reminder during a sweep"""
    notification_id: int
    delivered: bool
    error: Optional[str] = None


def build_reminder_text(prayer_key: str, prayer_time: str, notify_before_minutes: int):
    """Title and body of a prayer reminder"""
    name, emoji = PRAYER_LABELS[prayer_key]
    title = f"{emoji} Waktu {name}"
    if notify_before_minutes == 0:
        body = f"Sekarang masuk waktu {name} ({prayer_time})"
    else:
        body = f"{notify_before_minutes} menit lagi masuk waktu {name} ({prayer_time})"
    return title, body


class PrayerNotificationService:
    """
    Computes per-device prayer reminders and dispatches them when due.

    Recomputing a device first deletes its future unsent reminders, so calling
    it again after a preference change replaces the day's reminders instead of
    duplicating them.
    """

    def __init__(
        self,
        db: Session,
        prayer_service: Optional[PrayerService] = None,
        notification_service: Optional[NotificationService] = None,
        device_service: Optional[DeviceService] = None,
        gateway: Optional[FCMService] = None,
        clock: Callable = utc_now
    ):
        self.db = db
        self.clock = clock
        self.gateway = gateway or (notification_service.gateway if notification_service else FCMService())
        self.prayer_service = prayer_service or PrayerService(db, clock=clock)
        self.notification_service = notification_service or NotificationService(
            db, gateway=self.gateway, clock=clock
        )
        self.device_service = device_service or DeviceService(db, clock=clock)

    def clear_pending_for_device(self, device_id: int, now: datetime) -> int:
        """Delete the device's unsent reminders that are still in the future"""
        return self.db.query(ScheduledNotification).filter(
            ScheduledNotification.type == NotificationType.AZAN,
            ScheduledNotification.device_token_id == device_id,
            ScheduledNotification.sent == False,  # noqa: E712
            ScheduledNotification.schedule_at > now
        ).delete(synchronize_session=False)

    def schedule_prayer_notifications_for_device(
        self,
        device_id: int,
        device_token: str,
        latitude: float,
        longitude: float,
        notify_before_minutes: Optional[int] = None,
        enabled_prayers: Optional[Dict[str, bool]] = None,
        timezone: Optional[str] = None
    ) -> int:
        """
        Schedule today's remaining prayer reminders for one device

        Args:
            device_id: Owning device row id
            device_token: Push token, used for logging only
            latitude: Device latitude
            longitude: Device longitude
            notify_before_minutes: Lead time before each prayer (0 = at prayer time)
            enabled_prayers: Per-prayer switches; a missing key means enabled
            timezone: IANA label the clock-times are read in (default APP_TIMEZONE)

        Returns:
            Number of reminders scheduled

        Raises:
            ValidationError: If the lead time is negative
            UpstreamError: If prayer times cannot be fetched
        """
        if notify_before_minutes is None:
            notify_before_minutes = settings.DEFAULT_NOTIFY_BEFORE_MINUTES
        if notify_before_minutes < 0:
            raise ValidationError("notify_before_minutes must be zero or more")

        prayer_times = self.prayer_service.get_today_prayer_times(latitude, longitude)
        timings = prayer_times.as_dict()
        zone = get_zone(timezone)
        now = self.clock()

        cleared = self.clear_pending_for_device(device_id, now)
        if cleared:
            logger.debug(f"Cleared {cleared} pending reminders for device {device_id}")

        scheduled = 0
        for key in PRAYER_KEYS:
            name = PRAYER_LABELS[key][0]

            if enabled_prayers and enabled_prayers.get(key) is False:
                logger.debug(f"Skipping {name} for device {device_id} - disabled by user")
                continue

            try:
                clock_time = parse_clock_time(timings[key])
            except ValueError as e:
                logger.error(f"Skipping {name} for device {device_id}: {e}")
                continue

            prayer_at = datetime.combine(prayer_times.date, clock_time, tzinfo=zone)
            notify_at = to_naive_utc(prayer_at - timedelta(minutes=notify_before_minutes))

            # Past reminders are dropped; no back-fill, no roll-over to tomorrow
            if notify_at <= now:
                logger.debug(f"Skipped {name} for device {device_id}, {notify_at} UTC has passed")
                continue

            title, body = build_reminder_text(key, timings[key], notify_before_minutes)
            self.db.add(ScheduledNotification(
                type=NotificationType.AZAN,
                title=title,
                body=body,
                schedule_at=notify_at,
                device_token_id=device_id,
                created_at=now,
                meta={
                    "prayerName": name,
                    "prayerTime": timings[key],
                    "notifyBeforeMinutes": notify_before_minutes,
                },
            ))
            scheduled += 1

        self.db.commit()

        logger.info(f"Scheduled {scheduled} prayer notifications for device {device_id} ({device_token[:16]}...)")
        return scheduled

    def schedule_for_device(self, device: DeviceToken) -> int:
        """Schedule reminders for a device row; 0 when it is not eligible"""
        if not device.enable_prayer_notifications or not device.has_location:
            return 0

        return self.schedule_prayer_notifications_for_device(
            device.id,
            device.token,
            device.latitude,
            device.longitude,
            device.notify_before_prayer,
            device.enabled_prayers,
            device.timezone,
        )

    def schedule_daily_prayer_notifications_detailed(self) -> List[DeviceScheduleResult]:
        """
        Schedule reminders for every eligible device, isolating failures

        A device whose computation fails is rolled back and reported with its
        error; the run continues with the next device.
        """
        results = []

        for device in self.device_service.get_devices_with_prayer_notifications():
            device_id = device.id
            try:
                scheduled = self.schedule_prayer_notifications_for_device(
                    device_id,
                    device.token,
                    device.latitude,
                    device.longitude,
                    device.notify_before_prayer,
                    device.enabled_prayers,
                    device.timezone,
                )
                results.append(DeviceScheduleResult(device_id=device_id, scheduled=scheduled))
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to schedule notifications for device {device_id}: {e}")
                results.append(DeviceScheduleResult(device_id=device_id, error=str(e)))

        return results

    def schedule_daily_prayer_notifications(self) -> int:
        """
        Daily run over all eligible devices

        Returns:
            Total reminders scheduled
        """
        logger.info("📅 Scheduling daily prayer notifications...")

        results = self.schedule_daily_prayer_notifications_detailed()
        total = sum(r.scheduled for r in results)
        failed = sum(1 for r in results if r.error)

        logger.info(
            f"✅ Scheduled {total} prayer notifications for {len(results)} devices ({failed} failed)"
        )
        return total

    def process_pending_prayer_notifications_detailed(
        self,
        stop_event: Optional[Event] = None
    ) -> List[DeliveryResult]:
        """
        Dispatch every due, unsent reminder to its device

        Each row is leased before sending and marked sent with a conditional
        update afterwards. A failed send releases the lease so the row is
        retried on the next sweep.
        """
        now = self.clock()
        pending = self.notification_service.get_due_notifications([NotificationType.AZAN], now)
        if not pending:
            return []

        logger.info(f"📬 Processing {len(pending)} pending prayer notifications")

        # Plain values, rows expire on every commit below
        batch = [
            (n.id, n.device_token.token if n.device_token else None, n.title, n.body, n.meta)
            for n in pending
        ]

        results = []
        for notification_id, token, title, body, meta in batch:
            if stop_event is not None and stop_event.is_set():
                logger.info("Stop requested, leaving remaining prayer notifications for the next sweep")
                break

            if token is None:
                logger.warning(f"Prayer notification {notification_id} has no device, skipping")
                continue

            claimed = False
            try:
                if not self.notification_service.claim(notification_id, now):
                    continue
                claimed = True

                if not self.gateway.send_to_device(token, title, body, meta):
                    logger.warning(f"Failed to send prayer notification {notification_id}, will retry")
                    self.notification_service.release(notification_id)
                    results.append(DeliveryResult(notification_id, False, "gateway rejected message"))
                    continue

                self.notification_service.mark_sent(notification_id, self.clock())
                results.append(DeliveryResult(notification_id, True))

            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to send notification {notification_id}: {e}", exc_info=True)
                if claimed:
                    self.notification_service.release_quietly(notification_id)
                results.append(DeliveryResult(notification_id, False, str(e)))

        return results

    def process_pending_prayer_notifications(self, stop_event: Optional[Event] = None) -> int:
        """
        Returns:
            Number of reminders delivered
        """
        results = self.process_pending_prayer_notifications_detailed(stop_event)
        sent = sum(1 for r in results if r.delivered)
        if results:
            logger.info(f"✅ Sent {sent}/{len(results)} prayer notifications")
        return sent

    def clean_old_notifications(self) -> int:
        """Purge reminders delivered more than the retention window ago"""
        return self.notification_service.clean_old_notifications()
