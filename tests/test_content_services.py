"""Tests for the Quran cache, reverse geocoding and the events calendar."""
from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

from app.core.exceptions import NotFoundError, UpstreamError
from app.models.location import LocationCache
from app.models.quran import Ayah, Surah
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_service import EventService
from app.services.location_service import LocationService, build_address
from app.services.quran_service import QuranService


def surah_payload(edition):
    texts = {
        "quran-simple": ["قُلْ هُوَ اللَّهُ أَحَدٌ", "اللَّهُ الصَّمَدُ"],
        "en.transliteration": ["Qul huwal laahu ahad", "Allah hus-samad"],
        "id.indonesian": ["Katakanlah: Dialah Allah, Yang Maha Esa.", "Allah tempat meminta segala sesuatu."],
    }[edition]
    return {
        "number": 112,
        "name": "سورة الإخلاص",
        "englishName": "Al-Ikhlaas",
        "numberOfAyahs": 2,
        "revelationType": "Meccan",
        "ayahs": [
            {"number": 6222 + i, "numberInSurah": i + 1, "juz": 30, "page": 604, "text": text}
            for i, text in enumerate(texts)
        ],
    }


class TestQuranService:

    def test_cache_surah_combines_editions(self, db):
        service = QuranService(db, request_delay=0)

        with patch.object(service, "_fetch_surah", side_effect=lambda number, edition: surah_payload(edition)):
            service._cache_surah(112)

        surah = service.get_surah_by_id(112)
        assert surah.english_name == "Al-Ikhlaas"
        assert [a.number_in_surah for a in surah.ayahs] == [1, 2]

        ayah = service.get_ayah(112, 2)
        assert ayah.text_latin == "Allah hus-samad"
        assert ayah.text_translation.startswith("Allah tempat")
        assert ayah.surah.id == 112

    def test_recaching_updates_in_place(self, db):
        service = QuranService(db, request_delay=0)

        with patch.object(service, "_fetch_surah", side_effect=lambda number, edition: surah_payload(edition)):
            service._cache_surah(112)
            service._cache_surah(112)

        assert db.query(Surah).count() == 1
        assert db.query(Ayah).count() == 2

    def test_complete_cache_is_not_refetched(self, db):
        for number in range(1, 115):
            db.add(Surah(id=number, name="-", english_name=f"S{number}", number_of_ayahs=1, revelation_type="Meccan"))
        db.commit()
        service = QuranService(db, request_delay=0)

        with patch.object(service, "_cache_surah") as cache_surah:
            assert service.initialize_quran_cache() is False

        cache_surah.assert_not_called()

    def test_missing_surah_and_ayah(self, db):
        service = QuranService(db)

        with pytest.raises(NotFoundError):
            service.get_surah_by_id(1)
        with pytest.raises(NotFoundError):
            service.get_ayah(1, 1)


class TestLocationService:

    RESPONSE = {
        "display_name": "Jalan Medan Merdeka, Gambir, Jakarta Pusat, DKI Jakarta, 10110, Indonesia",
        "address": {
            "road": "Jalan Medan Merdeka",
            "suburb": "Gambir",
            "county": "Jakarta Pusat",
            "state": "DKI Jakarta",
            "postcode": "10110",
            "country": "Indonesia",
            "country_code": "id",
        },
    }

    def test_build_address(self):
        assert build_address({"road": "Jl. A", "city": "Bandung"}) == "Jl. A, Bandung"
        assert build_address({}) == "Unknown Address"

    def test_fetch_and_cache(self, db, clock):
        service = LocationService(db, api_key="key", base_url="https://geo.test/v1", clock=clock)

        with patch("app.services.location_service.http_get_json", return_value=self.RESPONSE) as get:
            first = service.reverse_geocode(-6.1753924, 106.8271528)
            second = service.reverse_geocode(-6.17539241, 106.82715279)

        assert get.call_count == 1
        assert get.call_args.kwargs["params"]["key"] == "key"
        assert first == second
        assert first["city"] == "Jakarta Pusat"
        assert first["country_code"] == "ID"
        assert first["address"] == "Jalan Medan Merdeka, Gambir, DKI Jakarta"

    def test_no_api_key(self, db):
        service = LocationService(db, api_key="")

        with pytest.raises(UpstreamError):
            service.reverse_geocode(1.0, 2.0)

    def test_clean_old_cache(self, db, clock):
        db.add(LocationCache(lat=1.0, lon=1.0, address="a", display_name="a", created_at=clock() - timedelta(days=40)))
        db.add(LocationCache(lat=2.0, lon=2.0, address="b", display_name="b", created_at=clock() - timedelta(days=2)))
        db.commit()

        assert LocationService(db, api_key="key", clock=clock).clean_old_cache() == 1
        assert db.query(LocationCache).count() == 1


class TestEventService:

    def test_upcoming_uses_local_date(self, db, clock):
        # 2026-10-19 00:30 in Jakarta
        clock.now = datetime(2026, 10, 18, 17, 30)
        service = EventService(db, clock=clock)
        service.create_event(EventCreate(name="Kemarin", date_hijri="6 Rabiul Akhir 1448", estimated_gregorian=date(2026, 10, 18)))
        service.create_event(EventCreate(name="Hari ini", date_hijri="7 Rabiul Akhir 1448", estimated_gregorian=date(2026, 10, 19)))
        service.create_event(EventCreate(name="Tanpa tanggal", date_hijri="-"))

        assert [e.name for e in service.get_upcoming_events()] == ["Hari ini"]

    def test_update_only_sent_fields(self, db, clock):
        service = EventService(db, clock=clock)
        event = service.create_event(EventCreate(name="Nuzulul Quran", date_hijri="17 Ramadhan 1448"))

        updated = service.update_event(event.id, EventUpdate(estimated_gregorian=date(2027, 2, 23)))

        assert updated.name == "Nuzulul Quran"
        assert updated.estimated_gregorian == date(2027, 2, 23)

    def test_missing_event(self, db):
        with pytest.raises(NotFoundError):
            EventService(db).get_event_by_id(42)
