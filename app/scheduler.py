"""Background scheduler for periodic tasks"""
from threading import Event
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.config import settings
from app.database import SessionLocal
from app.services.device_service import DeviceService
from app.services.location_service import LocationService
from app.services.notification_service import NotificationService
from app.services.prayer_notification_service import PrayerNotificationService
from app.services.prayer_service import PrayerService

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(
    timezone=settings.APP_TIMEZONE,
    job_defaults={"max_instances": 1, "coalesce": True, "misfire_grace_time": 60},
)

# Set on shutdown; sweeps stop after the record they are sending
stop_event = Event()


def start_scheduler():
    """Start the background scheduler"""
    try:
        stop_event.clear()
        scheduler.start()
        logger.info("✅ Scheduler started successfully")
    except Exception as e:
        logger.error(f"❌ Failed to start scheduler: {e}")


def stop_scheduler():
    """Stop the background scheduler, letting running jobs finish their current record"""
    try:
        stop_event.set()
        scheduler.shutdown(wait=True)
        logger.info("✅ Scheduler stopped successfully")
    except Exception as e:
        logger.error(f"❌ Failed to stop scheduler: {e}")


@scheduler.scheduled_job('cron', hour=0, minute=0, id="clean_caches")
def clean_caches():
    """
    Delete stale prayer and location cache entries
    Runs daily at midnight
    """
    db = SessionLocal()
    try:
        logger.info("🧹 Running daily cache cleanup...")
        prayer_deleted = PrayerService(db).clean_old_cache()
        location_deleted = LocationService(db).clean_old_cache()
        logger.info(f"✅ Cache cleanup complete: {prayer_deleted} prayer, {location_deleted} location entries")
    except Exception as e:
        logger.error(f"❌ Error during cache cleanup: {e}")
    finally:
        db.close()


@scheduler.scheduled_job('cron', hour=1, minute=0, id="schedule_daily_prayer_notifications")
def schedule_daily_prayer_notifications():
    """
    Compute today's prayer reminders for every eligible device
    Runs daily at 1 AM
    """
    db = SessionLocal()
    try:
        scheduled = PrayerNotificationService(db).schedule_daily_prayer_notifications()
        logger.info(f"✅ Scheduled {scheduled} prayer notifications")
    except Exception as e:
        logger.error(f"❌ Failed to schedule prayer notifications: {e}")
    finally:
        db.close()


@scheduler.scheduled_job('cron', minute='*', id="process_prayer_notifications")
def process_prayer_notifications():
    """
    Send due prayer reminders
    Runs every minute
    """
    db = SessionLocal()
    try:
        sent = PrayerNotificationService(db).process_pending_prayer_notifications(stop_event)
        if sent > 0:
            logger.info(f"📬 Sent {sent} prayer notifications")
    except Exception as e:
        logger.error(f"❌ Failed to process prayer notifications: {e}")
    finally:
        db.close()


@scheduler.scheduled_job('cron', minute='*', id="process_pending_notifications")
def process_pending_notifications():
    """
    Send due broadcast notifications
    Runs every minute
    """
    db = SessionLocal()
    try:
        processed = NotificationService(db).process_pending_notifications(stop_event)
        if processed > 0:
            logger.info(f"📬 Processed {processed} pending notifications")
    except Exception as e:
        logger.error(f"❌ Failed to process notifications: {e}")
    finally:
        db.close()


@scheduler.scheduled_job('cron', day_of_week='sun', hour=2, minute=0, id="clean_inactive_devices")
def clean_inactive_devices():
    """
    Remove devices inactive for INACTIVE_DEVICE_DAYS
    Runs weekly on Sunday at 2 AM
    """
    db = SessionLocal()
    try:
        logger.info("🧹 Cleaning inactive devices...")
        cleaned = DeviceService(db).clean_inactive_devices()
        logger.info(f"✅ Cleaned {cleaned} inactive devices")
    except Exception as e:
        logger.error(f"❌ Failed to clean inactive devices: {e}")
    finally:
        db.close()


@scheduler.scheduled_job('cron', hour=3, minute=0, id="clean_old_notifications")
def clean_old_notifications():
    """
    Purge delivered notifications past the retention window
    Runs daily at 3 AM
    """
    db = SessionLocal()
    try:
        logger.info("🧹 Cleaning old notifications...")
        cleaned = PrayerNotificationService(db).clean_old_notifications()
        logger.info(f"✅ Cleaned {cleaned} old notifications")
    except Exception as e:
        logger.error(f"❌ Failed to clean old notifications: {e}")
    finally:
        db.close()
