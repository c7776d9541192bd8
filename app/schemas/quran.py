"""Quran schemas"""
from pydantic import BaseModel
from typing import Optional, List


class SurahResponse(BaseModel):
    """Surah metadata"""
    id: int
    name: str
    english_name: str
    number_of_ayahs: int
    revelation_type: str

    class Config:
        from_attributes = True


class AyahResponse(BaseModel):
    """Single verse"""
    id: int
    surah_id: int
    number_in_surah: int
    juz: Optional[int] = None
    page: Optional[int] = None
    text_arabic: str
    text_latin: Optional[str] = None
    text_translation: Optional[str] = None

    class Config:
        from_attributes = True


class SurahDetailResponse(SurahResponse):
    """Surah with its verses"""
    ayahs: List[AyahResponse]


class AyahDetailResponse(AyahResponse):
    """Verse with its surah"""
    surah: SurahResponse
