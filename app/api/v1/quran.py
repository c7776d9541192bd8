"""Quran API endpoints"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import NotFoundError
from app.services.quran_service import QuranService, SURAH_COUNT
from app.schemas.quran import SurahResponse, SurahDetailResponse, AyahDetailResponse

router = APIRouter(prefix="/quran", tags=["quran"])


@router.get("/surah", response_model=List[SurahResponse])
def get_all_surahs(db: Session = Depends(get_db)):
    """List all surahs"""
    return [SurahResponse.model_validate(s) for s in QuranService(db).get_all_surahs()]


@router.get("/surah/{surah_id}", response_model=SurahDetailResponse)
def get_surah(
    surah_id: int = Path(..., ge=1, le=SURAH_COUNT, description="Surah number"),
    db: Session = Depends(get_db)
):
    """Get a surah with all its verses"""
    try:
        return SurahDetailResponse.model_validate(QuranService(db).get_surah_by_id(surah_id))

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.get("/ayah/{surah_id}/{ayah_number}", response_model=AyahDetailResponse)
def get_ayah(
    surah_id: int = Path(..., ge=1, le=SURAH_COUNT, description="Surah number"),
    ayah_number: int = Path(..., ge=1, description="Verse number within the surah"),
    db: Session = Depends(get_db)
):
    """Get a single verse"""
    try:
        return AyahDetailResponse.model_validate(QuranService(db).get_ayah(surah_id, ayah_number))

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
