"""
Script to drop the cached Quran text and download it again.
Run with: python recache_quran.py
"""
import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

from app.database import SessionLocal, init_db
from app.services.quran_service import QuranService


def main():
    print("=" * 70)
    print("Quran re-cache")
    print("=" * 70)

    init_db()
    db = SessionLocal()
    try:
        QuranService(db).recache_quran()
        print("[OK] Quran re-cache completed successfully")
    except Exception as e:
        print(f"[ERROR] Re-cache failed: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
