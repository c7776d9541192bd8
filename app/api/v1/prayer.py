"""Prayer times API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status, Query

from app.core.dependencies import get_prayer_service
from app.core.exceptions import UpstreamError
from app.services.prayer_service import PrayerService
from app.schemas.prayer import PrayerTimesResponse

router = APIRouter(prefix="/prayer", tags=["prayer"])


@router.get("/today", response_model=PrayerTimesResponse)
def get_today_prayer_times(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    service: PrayerService = Depends(get_prayer_service)
):
    """
    Get today's prayer times

    Times are cached per calendar date and shared by all callers that day.
    """
    try:
        prayer_times = service.get_today_prayer_times(lat, lon)
        return PrayerTimesResponse(**prayer_times.as_dict())

    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch prayer times: {str(e)}"
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching prayer times: {str(e)}"
        )
