"""Islamic calendar events"""
from typing import Callable, List
import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import NotFoundError
from app.models.event import IslamicEvent
from app.schemas.event import EventCreate, EventUpdate
from app.utils.time_utils import get_zone, local_today, utc_now

logger = logging.getLogger(__name__)


class EventService:
    """CRUD for Islamic calendar events"""

    def __init__(self, db: Session, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def get_all_events(self) -> List[IslamicEvent]:
        return self.db.query(IslamicEvent).order_by(IslamicEvent.created_at.desc()).all()

    def get_event_by_id(self, event_id: int) -> IslamicEvent:
        """
        Raises:
            NotFoundError: If the event does not exist
        """
        event = self.db.query(IslamicEvent).filter(IslamicEvent.id == event_id).first()
        if not event:
            raise NotFoundError("Event not found")
        return event

    def create_event(self, data: EventCreate) -> IslamicEvent:
        now = self.clock()
        event = IslamicEvent(**data.model_dump(), created_at=now, updated_at=now)

        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        logger.info(f"Event created: {event.name}")
        return event

    def update_event(self, event_id: int, data: EventUpdate) -> IslamicEvent:
        event = self.get_event_by_id(event_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(event, key, value)

        self.db.commit()
        self.db.refresh(event)

        logger.info(f"Event updated: {event.name}")
        return event

    def delete_event(self, event_id: int) -> bool:
        event = self.get_event_by_id(event_id)

        self.db.delete(event)
        self.db.commit()

        logger.info(f"Event deleted: {event_id}")
        return True

    def get_upcoming_events(self) -> List[IslamicEvent]:
        """Events estimated for today or later, soonest first"""
        today = local_today(self.clock(), get_zone(settings.APP_TIMEZONE))

        return self.db.query(IslamicEvent).filter(
            IslamicEvent.estimated_gregorian >= today
        ).order_by(IslamicEvent.estimated_gregorian.asc()).all()
