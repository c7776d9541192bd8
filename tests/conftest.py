"""Shared fixtures: in-memory database, fake gateway, fake prayer source and a settable clock."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PUBLIC_API_KEY"] = "test-api-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "Asia/Jakarta"
os.environ["FCM_CREDENTIALS_PATH"] = "/nonexistent/firebase-admin-sdk.json"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.core import dependencies  # noqa: E402
from app.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.models.device import DeviceToken  # noqa: E402
from app.services.device_service import DeviceService  # noqa: E402
from app.services.notification_service import NotificationService  # noqa: E402
from app.services.prayer_notification_service import PrayerNotificationService  # noqa: E402
from app.services.prayer_service import PrayerService  # noqa: E402

API_KEY = "test-api-key"

# 2026-10-19 04:00 in Asia/Jakarta (UTC+7)
DEFAULT_NOW = datetime(2026, 10, 18, 21, 0)

DEFAULT_TIMINGS = {
    "fajr": "04:30",
    "dhuhr": "11:50",
    "asr": "15:10",
    "maghrib": "17:55",
    "isha": "19:05",
}


class FakeClock:
    """Naive UTC clock the test moves by hand"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class FakeGateway:
    """Records every send; fails for configured tokens/topics"""

    def __init__(self):
        self.device_calls = []
        self.topic_calls = []
        self.failing_tokens = set()
        self.failing_topics = set()

    def send_to_device(self, token, title, body, data=None):
        self.device_calls.append({"token": token, "title": title, "body": body, "data": data})
        return token not in self.failing_tokens

    def send_to_topic(self, topic, title, body, data=None):
        self.topic_calls.append({"topic": topic, "title": title, "body": body, "data": data})
        return topic not in self.failing_topics


class FakePrayerSource:
    """Returns fixed timings and counts calls"""

    def __init__(self, timings=None):
        self.timings = dict(timings or DEFAULT_TIMINGS)
        self.calls = []
        self.error = None

    def fetch_timings(self, day, latitude, longitude):
        self.calls.append((day, latitude, longitude))
        if self.error is not None:
            raise self.error
        return dict(self.timings)


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock(DEFAULT_NOW)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def prayer_source():
    return FakePrayerSource()


@pytest.fixture
def prayer_service(db, prayer_source, clock):
    return PrayerService(db, source=prayer_source, clock=clock)


@pytest.fixture
def notification_service(db, gateway, clock):
    return NotificationService(db, gateway=gateway, clock=clock, lease_seconds=120)


@pytest.fixture
def device_service(db, clock):
    return DeviceService(db, clock=clock)


@pytest.fixture
def scheduler(db, prayer_service, notification_service, device_service, gateway, clock):
    return PrayerNotificationService(
        db,
        prayer_service=prayer_service,
        notification_service=notification_service,
        device_service=device_service,
        gateway=gateway,
        clock=clock,
    )


@pytest.fixture
def make_device(db, clock):
    """Factory for stored devices"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "token": f"token-{counter['n']:04d}-abcdefghijklmnop",
            "platform": "android",
            "latitude": -6.2,
            "longitude": 106.8,
            "enable_prayer_notifications": True,
            "notify_before_prayer": 5,
            "last_active_at": clock(),
            "created_at": clock(),
        }
        values.update(overrides)
        device = DeviceToken(**values)
        db.add(device)
        db.commit()
        db.refresh(device)
        return device

    return _make


@pytest.fixture
def client(db, gateway, prayer_source, prayer_service, notification_service, scheduler):
    from app.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[dependencies.get_gateway] = lambda: gateway
    app.dependency_overrides[dependencies.get_prayer_source] = lambda: prayer_source
    app.dependency_overrides[dependencies.get_prayer_service] = lambda: prayer_service
    app.dependency_overrides[dependencies.get_notification_service] = lambda: notification_service
    app.dependency_overrides[dependencies.get_prayer_notification_service] = lambda: scheduler

    test_client = TestClient(app)
    test_client.headers.update({"X-API-Key": API_KEY})
    yield test_client

    app.dependency_overrides.clear()
