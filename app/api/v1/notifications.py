"""Notifications API endpoints (FCM topics)"""
from fastapi import APIRouter, Depends, HTTPException, status, Path

from app.core.dependencies import get_notification_service
from app.core.exceptions import NotFoundError, UpstreamError, ValidationError
from app.services.notification_service import NotificationService
from app.schemas.notification import (
    SendNotificationRequest,
    SendNotificationResponse,
    ScheduleNotificationRequest,
    ScheduledNotificationResponse,
    ScheduledNotificationListResponse
)

router = APIRouter(prefix="/notification", tags=["notifications"])


@router.post("/send", response_model=SendNotificationResponse, status_code=status.HTTP_201_CREATED)
def send_notification(
    notification_data: SendNotificationRequest,
    service: NotificationService = Depends(get_notification_service)
):
    """
    Broadcast a notification now

    - **type**: GENERAL, EVENT or ANNOUNCEMENT; also the FCM topic name
    - **title** / **body**: notification content
    - **meta**: optional data payload, values are sent as strings

    **Note**: In development mode (without FCM credentials), notifications are logged only.
    """
    try:
        topic = service.send_to_topic(notification_data)
        return SendNotificationResponse(
            success=True,
            message="Notification sent successfully",
            topic=topic
        )

    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error sending notification: {str(e)}"
        )


@router.post("/schedule", response_model=ScheduledNotificationResponse, status_code=status.HTTP_201_CREATED)
def schedule_notification(
    notification_data: ScheduleNotificationRequest,
    service: NotificationService = Depends(get_notification_service)
):
    """
    Schedule a broadcast for later

    - **schedule_at**: must be in the future; without an offset it is read
      in the app timezone

    Sent by the minute sweep and deleted once delivered.
    """
    try:
        notification = service.schedule_notification(notification_data)
        return ScheduledNotificationResponse.model_validate(notification)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error scheduling notification: {str(e)}"
        )


@router.get("/scheduled", response_model=ScheduledNotificationListResponse)
def get_scheduled_notifications(
    service: NotificationService = Depends(get_notification_service)
):
    """List upcoming unsent notifications, soonest first"""
    try:
        notifications = service.get_scheduled_notifications()
        return ScheduledNotificationListResponse(
            notifications=[ScheduledNotificationResponse.model_validate(n) for n in notifications],
            total=len(notifications)
        )

    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching scheduled notifications: {str(e)}"
        )


@router.delete("/scheduled/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scheduled_notification(
    notification_id: int = Path(..., ge=1, description="Scheduled notification ID"),
    service: NotificationService = Depends(get_notification_service)
):
    """Cancel a scheduled notification"""
    try:
        service.delete_scheduled_notification(notification_id)
        return None

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting scheduled notification: {str(e)}"
        )
