"""Quran text cached locally from alquran.cloud"""
from typing import Any, Dict, List, Optional
import logging
import time

from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.core.exceptions import NotFoundError
from app.models.quran import Ayah, Surah
from app.utils.http import http_get_json

logger = logging.getLogger(__name__)

SURAH_COUNT = 114

# Editions fetched per surah
ARABIC_EDITION = "quran-simple"
LATIN_EDITION = "en.transliteration"
TRANSLATION_EDITION = "id.indonesian"


class QuranService:
    """Service for reading Quran text and filling the local cache"""

    def __init__(self, db: Session, base_url: Optional[str] = None, request_delay: float = 0.1):
        self.db = db
        self.base_url = (base_url or settings.QURAN_API_BASE).rstrip("/")
        self.request_delay = request_delay

    def _fetch_surah(self, number: int, edition: str) -> Dict[str, Any]:
        payload = http_get_json(f"{self.base_url}/surah/{number}/{edition}")
        return payload["data"]

    def _cache_surah(self, number: int):
        arabic = self._fetch_surah(number, ARABIC_EDITION)
        latin = self._fetch_surah(number, LATIN_EDITION)
        translation = self._fetch_surah(number, TRANSLATION_EDITION)

        surah = self.db.query(Surah).filter(Surah.id == arabic["number"]).first()
        if not surah:
            surah = Surah(
                id=arabic["number"],
                name=arabic["name"],
                english_name=arabic["englishName"],
                number_of_ayahs=arabic["numberOfAyahs"],
                revelation_type=arabic["revelationType"],
            )
            self.db.add(surah)

        latin_ayahs = latin.get("ayahs") or []
        translation_ayahs = translation.get("ayahs") or []

        for index, item in enumerate(arabic.get("ayahs") or []):
            ayah = self.db.query(Ayah).filter(Ayah.id == item["number"]).first()
            if not ayah:
                ayah = Ayah(
                    id=item["number"],
                    surah_id=arabic["number"],
                    number_in_surah=item["numberInSurah"],
                    juz=item.get("juz"),
                    page=item.get("page"),
                )
                self.db.add(ayah)

            ayah.text_arabic = item["text"]
            ayah.text_latin = latin_ayahs[index]["text"] if index < len(latin_ayahs) else None
            ayah.text_translation = translation_ayahs[index]["text"] if index < len(translation_ayahs) else None

        self.db.commit()
        logger.info(f"Cached Surah {number}/{SURAH_COUNT}: {arabic['englishName']}")

    def initialize_quran_cache(self) -> bool:
        """
        Download all surahs unless the cache is already complete

        Returns:
            True if the cache was (re)filled, False if it was already complete
        """
        if self.db.query(Surah).count() == SURAH_COUNT:
            logger.info("Quran cache already initialized")
            return False

        logger.info("📖 Initializing Quran cache...")
        for number in range(1, SURAH_COUNT + 1):
            self._cache_surah(number)
            if self.request_delay:
                time.sleep(self.request_delay)

        logger.info("✅ Quran cache initialization completed")
        return True

    def recache_quran(self) -> bool:
        """Drop cached text and download everything again"""
        logger.info("Deleting cached Quran text...")
        self.db.query(Ayah).delete(synchronize_session=False)
        self.db.query(Surah).delete(synchronize_session=False)
        self.db.commit()
        return self.initialize_quran_cache()

    def get_all_surahs(self) -> List[Surah]:
        return self.db.query(Surah).order_by(Surah.id.asc()).all()

    def get_surah_by_id(self, surah_id: int) -> Surah:
        """
        Raises:
            NotFoundError: If the surah is not cached
        """
        surah = self.db.query(Surah).options(
            joinedload(Surah.ayahs)
        ).filter(Surah.id == surah_id).first()
        if not surah:
            raise NotFoundError("Surah not found")
        return surah

    def get_ayah(self, surah_id: int, number_in_surah: int) -> Ayah:
        """
        Raises:
            NotFoundError: If the ayah is not cached
        """
        ayah = self.db.query(Ayah).options(
            joinedload(Ayah.surah)
        ).filter(
            Ayah.surah_id == surah_id,
            Ayah.number_in_surah == number_in_surah
        ).first()
        if not ayah:
            raise NotFoundError("Ayah not found")
        return ayah
