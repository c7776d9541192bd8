"""Notification schedule store and broadcast delivery"""
from datetime import datetime, timedelta
from threading import Event
from typing import Callable, List, Optional, Sequence
import logging

from sqlalchemy import or_, update
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.core.exceptions import NotFoundError, UpstreamError, ValidationError
from app.models.notification import NotificationType, ScheduledNotification
from app.schemas.notification import ScheduleNotificationRequest, SendNotificationRequest
from app.services.fcm_service import FCMService
from app.utils.time_utils import get_zone, to_naive_utc, utc_now

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Durable queue of scheduled notifications.

    Delivery is guarded by a short lease (`claimed_until`) taken with a single
    conditional UPDATE, so two concurrent sweeps never dispatch the same row.
    The lease is released on a failed send and simply expires if the process
    dies mid-delivery, which makes delivery at-least-once.
    """

    def __init__(
        self,
        db: Session,
        gateway: Optional[FCMService] = None,
        clock: Callable = utc_now,
        lease_seconds: Optional[int] = None
    ):
        self.db = db
        self.gateway = gateway or FCMService()
        self.clock = clock
        self.lease_seconds = lease_seconds if lease_seconds is not None else settings.DELIVERY_LEASE_SECONDS

    # -- store primitives -------------------------------------------------

    def get_due_notifications(
        self,
        types: Sequence[NotificationType],
        now: datetime
    ) -> List[ScheduledNotification]:
        """Unsent rows of the given types that are due and not leased"""
        return self.db.query(ScheduledNotification).options(
            joinedload(ScheduledNotification.device_token)
        ).filter(
            ScheduledNotification.type.in_(list(types)),
            ScheduledNotification.schedule_at <= now,
            ScheduledNotification.sent == False,  # noqa: E712
            or_(
                ScheduledNotification.claimed_until.is_(None),
                ScheduledNotification.claimed_until < now
            )
        ).order_by(ScheduledNotification.schedule_at, ScheduledNotification.id).all()

    def claim(self, notification_id: int, now: datetime) -> bool:
        """Take the delivery lease; False if another sweep holds it or the row is gone"""
        result = self.db.execute(
            update(ScheduledNotification)
            .where(
                ScheduledNotification.id == notification_id,
                ScheduledNotification.sent == False,  # noqa: E712
                or_(
                    ScheduledNotification.claimed_until.is_(None),
                    ScheduledNotification.claimed_until < now
                )
            )
            .values(claimed_until=now + timedelta(seconds=self.lease_seconds))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def release(self, notification_id: int):
        """Drop the lease so the next sweep retries the row"""
        self.db.execute(
            update(ScheduledNotification)
            .where(
                ScheduledNotification.id == notification_id,
                ScheduledNotification.sent == False  # noqa: E712
            )
            .values(claimed_until=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def release_quietly(self, notification_id: int):
        """Release after a failed delivery without masking the original error"""
        try:
            self.release(notification_id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to release notification {notification_id}: {e}")

    def mark_sent(self, notification_id: int, now: datetime) -> bool:
        """Flip sent false -> true; never reverts"""
        result = self.db.execute(
            update(ScheduledNotification)
            .where(
                ScheduledNotification.id == notification_id,
                ScheduledNotification.sent == False  # noqa: E712
            )
            .values(sent=True, sent_at=now, claimed_until=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    # -- ad-hoc broadcasts ------------------------------------------------

    def send_to_topic(self, data: SendNotificationRequest) -> str:
        """
        Broadcast immediately to the topic named by the notification type

        Returns:
            Topic name

        Raises:
            UpstreamError: If the gateway rejects the message
        """
        topic = data.type.value
        if not self.gateway.send_to_topic(topic, data.title, data.body, data.meta):
            raise UpstreamError(f"Failed to send notification to topic {topic}")
        return topic

    def _normalize_schedule_at(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=get_zone(settings.APP_TIMEZONE))
        return to_naive_utc(value)

    def schedule_notification(self, data: ScheduleNotificationRequest) -> ScheduledNotification:
        """
        Store a broadcast for later delivery

        Raises:
            ValidationError: If schedule_at is not in the future
        """
        schedule_at = self._normalize_schedule_at(data.schedule_at)
        if schedule_at <= self.clock():
            raise ValidationError("schedule_at must be in the future")

        notification = ScheduledNotification(
            type=data.type,
            title=data.title,
            body=data.body,
            meta=data.meta or {},
            schedule_at=schedule_at,
            created_at=self.clock(),
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)

        logger.info(f"Notification scheduled: {notification.id} at {schedule_at} UTC")
        return notification

    def get_scheduled_notifications(self) -> List[ScheduledNotification]:
        """Unsent notifications that are not yet due, soonest first"""
        return self.db.query(ScheduledNotification).filter(
            ScheduledNotification.schedule_at >= self.clock(),
            ScheduledNotification.sent == False  # noqa: E712
        ).order_by(ScheduledNotification.schedule_at.asc()).all()

    def delete_scheduled_notification(self, notification_id: int) -> bool:
        """
        Raises:
            NotFoundError: If the notification does not exist
        """
        notification = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.id == notification_id
        ).first()
        if not notification:
            raise NotFoundError("Scheduled notification not found")

        self.db.delete(notification)
        self.db.commit()

        logger.info(f"Scheduled notification deleted: {notification_id}")
        return True

    def process_pending_notifications(self, stop_event: Optional[Event] = None) -> int:
        """
        Send every due broadcast to its topic and delete it afterwards

        A failed send leaves the row in place for the next sweep.

        Returns:
            Number of notifications sent
        """
        now = self.clock()
        pending = self.get_due_notifications(NotificationType.broadcast_types(), now)
        if not pending:
            return 0

        logger.info(f"Processing {len(pending)} pending notifications")

        # Plain values, rows expire on every commit below
        batch = [(n.id, n.type.value, n.title, n.body, n.meta) for n in pending]

        sent = 0
        for notification_id, topic, title, body, meta in batch:
            if stop_event is not None and stop_event.is_set():
                logger.info("Stop requested, leaving remaining notifications for the next sweep")
                break

            claimed = False
            try:
                if not self.claim(notification_id, now):
                    continue
                claimed = True

                if not self.gateway.send_to_topic(topic, title, body, meta):
                    logger.warning(f"Failed to send notification {notification_id}, will retry")
                    self.release(notification_id)
                    continue

                self.db.execute(
                    ScheduledNotification.__table__.delete().where(
                        ScheduledNotification.id == notification_id
                    )
                )
                self.db.commit()
                sent += 1
                logger.info(f"Sent and deleted notification {notification_id}")

            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to send notification {notification_id}: {e}", exc_info=True)
                if claimed:
                    self.release_quietly(notification_id)

        return sent

    def clean_old_notifications(self, days: Optional[int] = None) -> int:
        """Delete delivered notifications older than the retention window"""
        days = days if days is not None else settings.SENT_NOTIFICATION_RETENTION_DAYS
        cutoff = self.clock() - timedelta(days=days)

        deleted = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.sent == True,  # noqa: E712
            ScheduledNotification.sent_at < cutoff
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.info(f"Cleaned {deleted} old notifications")
        return deleted
