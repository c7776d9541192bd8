"""Islamic events API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import NotFoundError
from app.services.event_service import EventService
from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=EventListResponse)
def get_all_events(db: Session = Depends(get_db)):
    """List all events, newest first"""
    events = EventService(db).get_all_events()
    return EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=len(events)
    )


@router.get("/upcoming", response_model=EventListResponse)
def get_upcoming_events(db: Session = Depends(get_db)):
    """List events estimated for today or later, soonest first"""
    events = EventService(db).get_upcoming_events()
    return EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=len(events)
    )


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: int = Path(..., ge=1, description="Event ID"),
    db: Session = Depends(get_db)
):
    """Get a single event"""
    try:
        return EventResponse.model_validate(EventService(db).get_event_by_id(event_id))

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db)
):
    """
    Create an event

    - **name**: event name
    - **date_hijri**: Hijri date label, e.g. "1 Muharram 1447"
    - **estimated_gregorian**: optional estimated Gregorian date
    """
    try:
        return EventResponse.model_validate(EventService(db).create_event(event_data))

    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating event: {str(e)}"
        )


@router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_data: EventUpdate,
    event_id: int = Path(..., ge=1, description="Event ID"),
    db: Session = Depends(get_db)
):
    """Update an event (only fields that are sent change)"""
    try:
        return EventResponse.model_validate(EventService(db).update_event(event_id, event_data))

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating event: {str(e)}"
        )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int = Path(..., ge=1, description="Event ID"),
    db: Session = Depends(get_db)
):
    """Delete an event"""
    try:
        EventService(db).delete_event(event_id)
        return None

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting event: {str(e)}"
        )
