"""Reverse geocoding API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import UpstreamError
from app.services.location_service import LocationService
from app.schemas.location import LocationResponse

router = APIRouter(prefix="/location", tags=["location"])


@router.get("/reverse", response_model=LocationResponse)
def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    db: Session = Depends(get_db)
):
    """Resolve coordinates to an address (cached per rounded coordinates)"""
    try:
        return LocationResponse(**LocationService(db).reverse_geocode(lat, lon))

    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to reverse geocode: {str(e)}"
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error in reverse geocoding: {str(e)}"
        )
