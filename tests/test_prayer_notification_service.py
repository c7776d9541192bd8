"""Tests for prayer reminder scheduling and the delivery sweep."""
from datetime import datetime, timedelta
from threading import Event

import pytest

from app.core.exceptions import UpstreamError, ValidationError
from app.models.notification import NotificationType, ScheduledNotification
from app.services.prayer_notification_service import build_reminder_text


def local(hour, minute, day=19):
    """Asia/Jakarta wall-clock on 2026-10-<day> as naive UTC"""
    return datetime(2026, 10, day, hour, minute) - timedelta(hours=7)


def reminders(db, device_id=None):
    query = db.query(ScheduledNotification).filter(
        ScheduledNotification.type == NotificationType.AZAN
    )
    if device_id is not None:
        query = query.filter(ScheduledNotification.device_token_id == device_id)
    return query.order_by(ScheduledNotification.schedule_at).all()


def by_prayer(rows):
    return {row.meta["prayerName"]: row for row in rows}


class TestBuildReminderText:
    """Reminder title and body."""

    def test_lead_time_in_body(self):
        title, body = build_reminder_text("fajr", "04:30", 10)

        assert "Fajr" in title
        assert body == "10 menit lagi masuk waktu Fajr (04:30)"

    def test_zero_lead_time_says_now(self):
        title, body = build_reminder_text("isha", "19:05", 0)

        assert "Isha" in title
        assert body == "Sekarang masuk waktu Isha (19:05)"


class TestScheduleForDevice:
    """Per-device reminder computation."""

    def test_all_future_prayers_scheduled(self, db, scheduler, make_device):
        device = make_device()

        count = scheduler.schedule_for_device(device)

        assert count == 5
        names = [row.meta["prayerName"] for row in reminders(db, device.id)]
        assert names == ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]

    def test_fajr_due_at_prayer_minus_lead(self, db, scheduler, make_device, prayer_source, clock):
        prayer_source.timings["fajr"] = "05:10"
        clock.now = local(4, 55)
        device = make_device(latitude=-6.2, longitude=106.8, notify_before_prayer=10)

        scheduler.schedule_for_device(device)

        fajr = [row for row in reminders(db, device.id) if row.meta["prayerName"] == "Fajr"]
        assert len(fajr) == 1
        assert fajr[0].schedule_at == local(5, 0)
        assert "Fajr" in fajr[0].title
        assert fajr[0].sent is False
        assert fajr[0].sent_at is None

    def test_passed_prayer_is_skipped(self, db, scheduler, make_device, prayer_source, clock):
        prayer_source.timings["dhuhr"] = "12:00"
        clock.now = local(13, 0)
        device = make_device(notify_before_prayer=10)

        count = scheduler.schedule_for_device(device)

        assert count == 3
        assert set(by_prayer(reminders(db, device.id))) == {"Asr", "Maghrib", "Isha"}

    def test_reminder_due_exactly_now_is_skipped(self, db, scheduler, make_device, prayer_source, clock):
        prayer_source.timings["fajr"] = "05:10"
        clock.now = local(5, 0)
        device = make_device(notify_before_prayer=10)

        scheduler.schedule_for_device(device)

        assert "Fajr" not in by_prayer(reminders(db, device.id))

    def test_disabled_prayer_never_scheduled(self, db, scheduler, make_device):
        device = make_device(enabled_prayers={"asr": False})

        count = scheduler.schedule_for_device(device)

        assert count == 4
        assert "Asr" not in by_prayer(reminders(db, device.id))

    def test_missing_key_in_enable_map_means_enabled(self, db, scheduler, make_device):
        device = make_device(enabled_prayers={"fajr": True})

        assert scheduler.schedule_for_device(device) == 5

    def test_every_reminder_precedes_its_prayer_by_lead(self, db, scheduler, make_device, prayer_source):
        device = make_device(notify_before_prayer=15)

        scheduler.schedule_for_device(device)

        for row in reminders(db, device.id):
            hour, minute = map(int, row.meta["prayerTime"].split(":"))
            assert local(hour, minute) - row.schedule_at == timedelta(minutes=15)
            assert row.meta["notifyBeforeMinutes"] == 15

    def test_zero_lead_time_due_at_prayer_time(self, db, scheduler, make_device):
        device = make_device(notify_before_prayer=0)

        scheduler.schedule_for_device(device)

        isha = by_prayer(reminders(db, device.id))["Isha"]
        assert isha.schedule_at == local(19, 5)
        assert isha.body.startswith("Sekarang")

    def test_negative_lead_time_rejected(self, db, scheduler, make_device):
        device = make_device()

        with pytest.raises(ValidationError):
            scheduler.schedule_prayer_notifications_for_device(
                device.id, device.token, device.latitude, device.longitude, notify_before_minutes=-1
            )
        assert reminders(db, device.id) == []

    def test_malformed_time_skips_only_that_prayer(self, db, scheduler, make_device, prayer_source):
        prayer_source.timings["asr"] = "not-a-time"
        device = make_device()

        count = scheduler.schedule_for_device(device)

        assert count == 4
        assert "Asr" not in by_prayer(reminders(db, device.id))

    def test_zone_suffix_is_ignored(self, db, scheduler, make_device, prayer_source):
        prayer_source.timings["maghrib"] = "17:55 (WIB)"
        device = make_device(notify_before_prayer=0)

        scheduler.schedule_for_device(device)

        assert by_prayer(reminders(db, device.id))["Maghrib"].schedule_at == local(17, 55)

    def test_device_timezone_used_for_clock_times(self, db, scheduler, make_device):
        # Asia/Makassar is UTC+8
        device = make_device(notify_before_prayer=0, timezone="Asia/Makassar")

        scheduler.schedule_for_device(device)

        isha = by_prayer(reminders(db, device.id))["Isha"]
        assert isha.schedule_at == datetime(2026, 10, 19, 11, 5)

    def test_recompute_replaces_pending_reminders(self, db, scheduler, make_device):
        device = make_device(notify_before_prayer=5)
        scheduler.schedule_for_device(device)

        device.notify_before_prayer = 20
        db.commit()
        scheduler.schedule_for_device(device)

        rows = reminders(db, device.id)
        assert len(rows) == 5
        assert all(row.meta["notifyBeforeMinutes"] == 20 for row in rows)

    def test_recompute_keeps_sent_reminders(self, db, scheduler, make_device, clock):
        device = make_device()
        scheduler.schedule_for_device(device)

        clock.now = local(4, 30)
        assert scheduler.process_pending_prayer_notifications() == 1

        scheduler.schedule_for_device(device)

        rows = reminders(db, device.id)
        assert len(rows) == 5
        assert [row.meta["prayerName"] for row in rows if row.sent] == ["Fajr"]

    def test_ineligible_device_schedules_nothing(self, db, scheduler, make_device, prayer_source):
        no_location = make_device(latitude=None, longitude=None)
        disabled = make_device(enable_prayer_notifications=False)

        assert scheduler.schedule_for_device(no_location) == 0
        assert scheduler.schedule_for_device(make_device(latitude=None)) == 0
        assert scheduler.schedule_for_device(make_device(longitude=None)) == 0
        assert scheduler.schedule_for_device(disabled) == 0
        assert prayer_source.calls == []

    def test_upstream_failure_propagates(self, db, scheduler, make_device, prayer_source):
        prayer_source.error = UpstreamError("timings unavailable")
        device = make_device()

        with pytest.raises(UpstreamError):
            scheduler.schedule_for_device(device)
        assert reminders(db) == []

    def test_clear_pending_for_device(self, db, scheduler, make_device, clock):
        device = make_device()
        other = make_device()
        scheduler.schedule_for_device(device)
        scheduler.schedule_for_device(other)

        cleared = scheduler.clear_pending_for_device(device.id, clock())
        db.commit()

        assert cleared == 5
        assert reminders(db, device.id) == []
        assert len(reminders(db, other.id)) == 5


class TestDailyRun:
    """Bulk scheduling across devices."""

    def test_schedules_every_eligible_device(self, db, scheduler, make_device, prayer_source):
        first = make_device()
        second = make_device(enabled_prayers={"isha": False})
        make_device(latitude=None, longitude=None)
        no_latitude = make_device(latitude=None)
        no_longitude = make_device(longitude=None)
        make_device(enable_prayer_notifications=False)

        total = scheduler.schedule_daily_prayer_notifications()

        assert total == 9
        assert reminders(db, no_latitude.id) == []
        assert reminders(db, no_longitude.id) == []
        assert len(reminders(db, first.id)) == 5
        assert len(reminders(db, second.id)) == 4
        assert len(prayer_source.calls) == 1

    def test_half_located_devices_get_no_compute_call(self, db, scheduler, make_device, prayer_source):
        make_device(latitude=None)
        make_device(longitude=None)

        assert scheduler.schedule_daily_prayer_notifications_detailed() == []
        assert prayer_source.calls == []

    def test_failing_device_does_not_stop_the_run(self, db, scheduler, make_device, monkeypatch):
        first = make_device()
        broken = make_device()
        last = make_device()

        original = scheduler.schedule_prayer_notifications_for_device

        def flaky(device_id, *args, **kwargs):
            if device_id == broken.id:
                raise UpstreamError("boom")
            return original(device_id, *args, **kwargs)

        monkeypatch.setattr(scheduler, "schedule_prayer_notifications_for_device", flaky)

        results = scheduler.schedule_daily_prayer_notifications_detailed()

        outcome = {r.device_id: r for r in results}
        assert outcome[first.id].scheduled == 5
        assert outcome[last.id].scheduled == 5
        assert outcome[broken.id].scheduled == 0
        assert outcome[broken.id].error == "boom"
        assert reminders(db, broken.id) == []

    def test_running_twice_does_not_duplicate(self, db, scheduler, make_device):
        device = make_device()

        scheduler.schedule_daily_prayer_notifications()
        scheduler.schedule_daily_prayer_notifications()

        assert len(reminders(db, device.id)) == 5


class TestDeliverySweep:
    """Dispatch of due prayer reminders."""

    def test_empty_due_set_does_nothing(self, db, scheduler, make_device, gateway):
        device = make_device()
        scheduler.schedule_for_device(device)
        before = [(row.id, row.sent, row.claimed_until) for row in reminders(db)]

        assert scheduler.process_pending_prayer_notifications() == 0

        assert gateway.device_calls == []
        db.expire_all()
        assert [(row.id, row.sent, row.claimed_until) for row in reminders(db)] == before

    def test_due_reminder_sent_once(self, db, scheduler, make_device, gateway, clock):
        device = make_device()
        scheduler.schedule_for_device(device)

        clock.now = local(4, 26)
        assert scheduler.process_pending_prayer_notifications() == 1
        assert scheduler.process_pending_prayer_notifications() == 0

        assert len(gateway.device_calls) == 1
        call = gateway.device_calls[0]
        assert call["token"] == device.token
        assert "Fajr" in call["title"]
        assert call["data"]["prayerName"] == "Fajr"

        db.expire_all()
        fajr = by_prayer(reminders(db, device.id))["Fajr"]
        assert fajr.sent is True
        assert fajr.sent_at == local(4, 26)
        assert fajr.claimed_until is None

    def test_several_due_reminders_in_one_sweep(self, db, scheduler, make_device, gateway, clock):
        first = make_device()
        second = make_device()
        scheduler.schedule_daily_prayer_notifications()

        clock.now = local(12, 0)
        results = scheduler.process_pending_prayer_notifications_detailed()

        assert len(results) == 4
        assert all(r.delivered for r in results)
        assert {c["token"] for c in gateway.device_calls} == {first.token, second.token}

    def test_failed_send_is_retried_next_sweep(self, db, scheduler, make_device, gateway, clock):
        device = make_device()
        scheduler.schedule_for_device(device)
        gateway.failing_tokens.add(device.token)

        clock.now = local(4, 26)
        results = scheduler.process_pending_prayer_notifications_detailed()

        assert len(results) == 1
        assert results[0].delivered is False
        db.expire_all()
        fajr = by_prayer(reminders(db, device.id))["Fajr"]
        assert fajr.sent is False
        assert fajr.claimed_until is None

        gateway.failing_tokens.clear()
        clock.now = local(4, 27)
        assert scheduler.process_pending_prayer_notifications() == 1

    def test_raising_gateway_releases_lease(self, db, scheduler, make_device, gateway, clock, monkeypatch):
        device = make_device()
        scheduler.schedule_for_device(device)
        record_send = gateway.send_to_device
        outcomes = [ConnectionError("FCM unreachable")]

        def flaky_send(token, title, body, data=None):
            if outcomes:
                raise outcomes.pop()
            return record_send(token, title, body, data)

        monkeypatch.setattr(gateway, "send_to_device", flaky_send)

        clock.now = local(4, 26)
        results = scheduler.process_pending_prayer_notifications_detailed()

        assert len(results) == 1
        assert results[0].delivered is False
        assert "FCM unreachable" in results[0].error
        db.expire_all()
        fajr = by_prayer(reminders(db, device.id))["Fajr"]
        assert fajr.sent is False
        assert fajr.claimed_until is None

        clock.now = local(4, 27)
        assert scheduler.process_pending_prayer_notifications() == 1
        assert len(gateway.device_calls) == 1

    def test_leased_reminder_is_skipped(self, db, scheduler, make_device, gateway, clock):
        device = make_device()
        scheduler.schedule_for_device(device)
        clock.now = local(4, 26)
        fajr = by_prayer(reminders(db, device.id))["Fajr"]
        fajr.claimed_until = clock.now + timedelta(seconds=60)
        db.commit()

        assert scheduler.process_pending_prayer_notifications() == 0
        assert gateway.device_calls == []

        clock.now = local(4, 28)
        assert scheduler.process_pending_prayer_notifications() == 1

    def test_lost_claim_is_not_sent(self, db, scheduler, make_device, gateway, clock, monkeypatch):
        device = make_device()
        scheduler.schedule_for_device(device)
        clock.now = local(4, 26)
        monkeypatch.setattr(scheduler.notification_service, "claim", lambda notification_id, now: False)

        assert scheduler.process_pending_prayer_notifications_detailed() == []
        assert gateway.device_calls == []

    def test_stop_event_halts_sweep(self, db, scheduler, make_device, gateway, clock):
        make_device()
        make_device()
        scheduler.schedule_daily_prayer_notifications()
        clock.now = local(4, 26)
        stop = Event()
        stop.set()

        assert scheduler.process_pending_prayer_notifications(stop) == 0
        assert gateway.device_calls == []

    def test_unregistered_device_reminders_disappear(self, db, scheduler, make_device, device_service, gateway, clock):
        device = make_device()
        scheduler.schedule_for_device(device)

        device_service.unregister_device(device.token)

        clock.now = local(20, 0)
        assert scheduler.process_pending_prayer_notifications() == 0
        assert reminders(db) == []
        assert gateway.device_calls == []

    def test_broadcasts_are_not_picked_up(self, db, scheduler, gateway, clock):
        db.add(ScheduledNotification(
            type=NotificationType.GENERAL,
            title="Info",
            body="Kajian malam ini",
            schedule_at=clock.now - timedelta(minutes=1),
        ))
        db.commit()

        assert scheduler.process_pending_prayer_notifications() == 0
        assert gateway.device_calls == []


class TestCleanOldNotifications:

    def test_only_old_sent_reminders_removed(self, db, scheduler, make_device, clock):
        device = make_device()
        scheduler.schedule_for_device(device)
        clock.now = local(4, 26)
        scheduler.process_pending_prayer_notifications()

        clock.now = local(4, 26) + timedelta(days=8)
        deleted = scheduler.clean_old_notifications()

        assert deleted == 1
        assert len(reminders(db, device.id)) == 4
