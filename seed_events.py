"""
Seed script to populate the Islamic events calendar for 1447 H.
Run with: python seed_events.py

Events that already exist (same name) are left untouched.
"""
import sys
from datetime import date
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

from app.database import SessionLocal, init_db
from app.models.event import IslamicEvent
from app.schemas.event import EventCreate
from app.services.event_service import EventService


EVENTS = [
    EventCreate(
        name="Tahun Baru Islam 1447 H",
        description="Peringatan Tahun Baru Hijriah 1447",
        date_hijri="1 Muharram 1447",
        estimated_gregorian=date(2025, 7, 7),
    ),
    EventCreate(
        name="Maulid Nabi Muhammad SAW",
        description="Peringatan kelahiran Nabi Muhammad SAW",
        date_hijri="12 Rabiul Awal 1447",
        estimated_gregorian=date(2025, 9, 16),
    ),
    EventCreate(
        name="Isra Mi'raj",
        description="Peringatan perjalanan Isra Mi'raj Nabi Muhammad SAW",
        date_hijri="27 Rajab 1447",
        estimated_gregorian=date(2026, 1, 27),
    ),
    EventCreate(
        name="Nuzulul Quran",
        description="Peringatan turunnya Al-Quran",
        date_hijri="17 Ramadan 1447",
        estimated_gregorian=date(2026, 3, 18),
    ),
    EventCreate(
        name="Idul Fitri 1447 H",
        description="Hari Raya Idul Fitri",
        date_hijri="1 Syawal 1447",
        estimated_gregorian=date(2026, 4, 1),
    ),
    EventCreate(
        name="Hari Arafah",
        description="Hari Arafah dalam ibadah haji",
        date_hijri="9 Dzulhijjah 1447",
        estimated_gregorian=date(2026, 6, 7),
    ),
    EventCreate(
        name="Idul Adha 1447 H",
        description="Hari Raya Idul Adha",
        date_hijri="10 Dzulhijjah 1447",
        estimated_gregorian=date(2026, 6, 8),
    ),
]


def main():
    print("🌱 Seeding Islamic events...")

    init_db()
    db = SessionLocal()
    try:
        service = EventService(db)
        created = 0
        for event in EVENTS:
            if db.query(IslamicEvent).filter(IslamicEvent.name == event.name).first():
                print(f"[SKIP] {event.name}")
                continue
            service.create_event(event)
            created += 1
            print(f"[OK] {event.name}")

        print(f"✅ Created {created} events")
    finally:
        db.close()


if __name__ == "__main__":
    main()
