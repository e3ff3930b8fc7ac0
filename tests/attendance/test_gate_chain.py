from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.geo_attendance.geo_attendance.attendance.factory import AttendanceRepositoryFactory
from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord, new_record_id
from src.geo_attendance.geo_attendance.attendance.service import AttendanceService
from src.geo_attendance.geo_attendance.capabilities.biometric import BiometricResult, ReportedBiometric
from src.geo_attendance.geo_attendance.capabilities.broadcast import InMemoryLiveStatusBoard, WidgetTimelineBoard
from src.geo_attendance.geo_attendance.capabilities.location import ReportedLocation
from src.geo_attendance.geo_attendance.capabilities.reminders import (
    CHECK_IN_REMINDER,
    InMemoryReminderScheduler,
)
from src.geo_attendance.geo_attendance.core.enums import AttemptState, BiometricOutcome, DataSource
from src.geo_attendance.geo_attendance.core.exceptions import (
    BiometricFailed,
    GuestLimitExceeded,
    LocationUnauthorized,
    LocationUnavailable,
    NotFoundError,
    OutsideOfficeArea,
    PersistenceError,
    ValidationError,
)
from src.geo_attendance.geo_attendance.location.model import Coordinate
from src.geo_attendance.geo_attendance.preferences.service import PreferencesService
from src.geo_attendance.geo_attendance.users.model import Identity

OFFICE = Coordinate(41.311081, 69.240562)
FAR_AWAY = Coordinate(41.356, 69.240562)  # ~5 km north

GUEST = Identity(owner_id="guest-1", is_anonymous=True)
MEMBER = Identity(owner_id="u1", name="Aziz")


class InMemoryPreferences:
    def __init__(self):
        self.values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def get_all(self) -> dict[str, str]:
        return dict(self.values)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def clear(self) -> None:
        self.values.clear()


class InMemoryAttendance:
    def __init__(self, clock):
        self._clock = clock
        self.by_key: dict[tuple[Optional[str], date], AttendanceRecord] = {}
        self.fail_with: Optional[Exception] = None
        self.fail_count = False
        self.writes = 0

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def fetch_today(self, owner):
        self._maybe_fail()
        return self.by_key.get((owner, self._clock().date()))

    def fetch_history(self, owner, start_date, end_date):
        self._maybe_fail()
        items = [r for (o, d), r in self.by_key.items() if o == owner and start_date <= d <= end_date]
        return sorted(items, key=lambda r: r.work_date, reverse=True)

    def fetch_by_id(self, owner, record_id):
        return next((r for r in self.by_key.values() if r.record_id == record_id and r.owner_id == owner), None)

    def check_in(self, owner, *, time, manual, latitude, longitude):
        self._maybe_fail()
        self.writes += 1
        key = (owner, self._clock().date())
        existing = self.by_key.get(key) or AttendanceRecord(
            record_id=new_record_id(), owner_id=owner, work_date=key[1]
        )
        rec = replace(existing, check_in_time=time, check_in_manual=manual, latitude=latitude, longitude=longitude)
        self.by_key[key] = rec
        return rec

    def check_out(self, owner, *, time, manual):
        self._maybe_fail()
        key = (owner, self._clock().date())
        if key not in self.by_key:
            raise NotFoundError()
        self.writes += 1
        rec = replace(self.by_key[key], check_out_time=time, check_out_manual=manual)
        self.by_key[key] = rec
        return rec

    def update_time(self, record, *, check_in_time=None, check_out_time=None):
        self._maybe_fail()
        self.writes += 1
        rec = record.with_times(check_in_time=check_in_time, check_out_time=check_out_time)
        self.by_key[(rec.owner_id, rec.work_date)] = rec
        return rec

    def delete(self, record):
        return self.by_key.pop((record.owner_id, record.work_date), None) is not None

    def clear(self, owner):
        keys = [k for k in self.by_key if k[0] == owner]
        for k in keys:
            del self.by_key[k]
        return len(keys)

    def count(self, owner):
        if self.fail_count:
            raise PersistenceError(ConnectionError("offline"))
        return sum(1 for o, _ in self.by_key if o == owner)


class CountingBiometric:
    def __init__(self, outcome=BiometricOutcome.GRANTED, message=None):
        self.outcome = outcome
        self.message = message
        self.calls = 0

    def authenticate(self, reason: str) -> BiometricResult:
        self.calls += 1
        return BiometricResult(self.outcome, self.message)


class Harness:
    def __init__(self, clock):
        self.clock = clock
        self.local = InMemoryAttendance(clock)
        self.remote = InMemoryAttendance(clock)
        self.prefs = PreferencesService(InMemoryPreferences())
        self.live = InMemoryLiveStatusBoard()
        self.timeline = WidgetTimelineBoard()
        self.reminders = InMemoryReminderScheduler()
        self.service = AttendanceService(
            AttendanceRepositoryFactory(local=self.local, remote=self.remote),
            self.prefs,
            live_status=self.live,
            timeline=self.timeline,
            reminders=self.reminders,
            clock=clock,
        )

    def seed(self, owner, days_ago: int, *, complete: bool = True):
        day = self.clock().date() - timedelta(days=days_ago)
        start = datetime.combine(day, datetime.min.time()) + timedelta(hours=9)
        rec = AttendanceRecord(
            record_id=new_record_id(),
            owner_id=owner,
            work_date=day,
            check_in_time=start,
            check_out_time=start + timedelta(hours=8) if complete else None,
        )
        self.local.by_key[(owner, day)] = rec
        return rec


@pytest.fixture
def h(clock) -> Harness:
    return Harness(clock)


def _at_office():
    return ReportedLocation(OFFICE)


# -- check-in ----------------------------------------------------------------


def test_check_in_happy_path_passes_every_gate(h, fixed_now):
    bio = ReportedBiometric(BiometricOutcome.GRANTED)

    result = h.service.check_in(MEMBER, biometric=bio, location=_at_office())

    assert result.succeeded
    assert result.trace == (
        AttemptState.IDLE,
        AttemptState.QUOTA_CHECKED,
        AttemptState.BIOMETRIC_PASSED,
        AttemptState.LOCATION_VALIDATED,
        AttemptState.PERSISTED,
        AttemptState.DONE,
    )
    assert result.record.check_in_time == fixed_now
    assert result.record.latitude == OFFICE.latitude
    assert bio.reasons == ["Authenticate to Check In"]
    assert h.live.current("u1") == fixed_now
    assert h.timeline.generation == 1


def test_guest_at_limit_is_blocked_before_biometric(h):
    h.seed(GUEST.owner_id, 1)
    h.seed(GUEST.owner_id, 2)
    bio = CountingBiometric()

    result = h.service.check_in(GUEST, biometric=bio, location=_at_office())

    assert not result.succeeded
    assert isinstance(result.error, GuestLimitExceeded)
    assert result.show_error
    assert result.error_message == "Guest limit reached (2 check-ins). Please sign in to continue."
    assert result.trace == (AttemptState.IDLE, AttemptState.FAILED)
    assert bio.calls == 0
    assert h.local.writes == 0


def test_guest_below_limit_may_check_in(h):
    h.seed(GUEST.owner_id, 1)

    result = h.service.check_in(GUEST, biometric=CountingBiometric(), location=_at_office())

    assert result.succeeded


def test_signed_in_user_has_no_quota(h):
    for days_ago in range(1, 6):
        h.seed(MEMBER.owner_id, days_ago)

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert result.succeeded


def test_quota_check_fails_open_on_storage_error(h):
    h.local.fail_count = True

    result = h.service.check_in(GUEST, biometric=CountingBiometric(), location=_at_office())

    assert result.succeeded


def test_declined_biometric_is_silent(h):
    result = h.service.check_in(
        MEMBER, biometric=CountingBiometric(BiometricOutcome.DECLINED), location=_at_office()
    )

    assert result.state == AttemptState.FAILED
    assert result.error_message is None
    assert not result.show_error
    assert not result.show_location_alert
    assert h.local.writes == 0


def test_biometric_error_is_reported(h):
    result = h.service.check_in(
        MEMBER, biometric=CountingBiometric(BiometricOutcome.ERROR, "Sensor locked"), location=_at_office()
    )

    assert isinstance(result.error, BiometricFailed)
    assert result.show_error
    assert result.error_message == "Authentication failed: Sensor locked"


def test_outside_office_shows_location_alert_with_distance(h):
    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=ReportedLocation(FAR_AWAY))

    assert isinstance(result.error, OutsideOfficeArea)
    assert result.show_location_alert
    assert not result.show_error
    assert result.distance_from_office == pytest.approx(5000, abs=50)
    assert result.trace[-2] == AttemptState.BIOMETRIC_PASSED
    assert h.local.writes == 0


def test_denied_location_permission(h):
    result = h.service.check_in(
        MEMBER,
        biometric=CountingBiometric(),
        location=ReportedLocation(OFFICE, permission="denied"),
    )

    assert isinstance(result.error, LocationUnauthorized)
    assert h.local.writes == 0


def test_location_fix_error(h):
    result = h.service.check_in(
        MEMBER,
        biometric=CountingBiometric(),
        location=ReportedLocation(None, error="GPS timeout"),
    )

    assert isinstance(result.error, LocationUnavailable)
    assert result.error_message == "GPS timeout"


def test_custom_office_from_preferences(h):
    h.prefs.update_office_location(FAR_AWAY.latitude, FAR_AWAY.longitude, 100)

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=ReportedLocation(FAR_AWAY))

    assert result.succeeded


def test_persistence_failure_has_retry_message(h):
    h.local.fail_with = PersistenceError(ConnectionError("disk full"))

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert result.show_error
    assert result.error_message.startswith("Failed to check in: ")
    assert result.error_message.endswith("Please try again.")
    assert h.live.current("u1") is None


def test_remote_data_source_routes_to_remote_store(h):
    h.prefs.set_data_source(DataSource.REMOTE)

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert result.succeeded
    assert h.remote.writes == 1
    assert h.local.writes == 0


def test_repeated_check_in_updates_same_day(h, clock, fixed_now):
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())
    clock.now = fixed_now + timedelta(minutes=30)
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert len(h.local.by_key) == 1
    assert h.service.load_today(MEMBER).check_in_time == fixed_now + timedelta(minutes=30)


def test_check_in_after_check_out_is_rejected(h, clock, fixed_now):
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())
    clock.now = fixed_now + timedelta(hours=8)
    h.service.check_out(MEMBER, biometric=CountingBiometric())
    clock.now = fixed_now + timedelta(hours=9)

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert isinstance(result.error, ValidationError)
    assert result.show_error
    assert result.trace[-2] == AttemptState.LOCATION_VALIDATED
    today = h.service.load_today(MEMBER)
    assert today.check_in_time == fixed_now
    assert today.work_seconds == 8 * 3600
    assert h.local.writes == 2


# -- check-out ---------------------------------------------------------------


def test_check_out_completes_record_and_clears_side_effects(h, clock, fixed_now):
    h.reminders.schedule_all("u1")
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())
    clock.now = fixed_now + timedelta(hours=8)
    bio = ReportedBiometric("granted")

    result = h.service.check_out(MEMBER, biometric=bio)

    assert result.succeeded
    assert result.record.is_complete
    assert result.record.work_seconds == 8 * 3600
    assert bio.reasons == ["Authenticate to Check Out"]
    assert h.live.current("u1") is None
    assert [r.identifier for r in h.reminders.pending("u1")] == [CHECK_IN_REMINDER]
    assert h.timeline.generation == 2


def test_check_out_without_check_in(h):
    result = h.service.check_out(MEMBER, biometric=CountingBiometric())

    assert isinstance(result.error, NotFoundError)
    assert result.error_message == "No active check-in found for today"
    assert h.local.writes == 0


def test_check_out_needs_biometric(h):
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    result = h.service.check_out(MEMBER, biometric=CountingBiometric(BiometricOutcome.DECLINED))

    assert not result.succeeded
    assert not h.service.load_today(MEMBER).has_checked_out


def test_check_out_before_check_in_is_rejected(h, fixed_now):
    h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    result = h.service.check_out(MEMBER, biometric=CountingBiometric(), time=fixed_now - timedelta(hours=1))

    assert isinstance(result.error, ValidationError)


# -- manual edit -------------------------------------------------------------


def test_update_time_skips_gates(h, fixed_now):
    rec = h.seed("u1", 3)

    result = h.service.update_time(MEMBER, rec, check_out_time=rec.check_in_time + timedelta(hours=10))

    assert result.succeeded
    assert result.record.check_out_manual is True
    assert result.record.check_in_manual is False
    assert result.record.work_seconds == 10 * 3600


def test_update_time_rejects_negative_duration(h):
    rec = h.seed("u1", 1)

    result = h.service.update_time(MEMBER, rec, check_out_time=rec.check_in_time - timedelta(minutes=1))

    assert isinstance(result.error, ValidationError)
    assert h.local.writes == 0


def test_update_time_of_someone_elses_record(h):
    rec = h.seed("u2", 1)

    result = h.service.update_time(MEMBER, rec, check_in_time=rec.check_in_time)

    assert isinstance(result.error, NotFoundError)


def test_update_time_requires_a_value(h):
    rec = h.seed("u1", 1)

    result = h.service.update_time(MEMBER, rec)

    assert isinstance(result.error, ValidationError)


# -- pass-through ------------------------------------------------------------


def test_history_rejects_inverted_range(h, fixed_now):
    with pytest.raises(ValidationError):
        h.service.history(MEMBER, fixed_now.date(), fixed_now.date() - timedelta(days=1))


def test_delete_today_ends_live_status(h, fixed_now):
    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    h.service.delete(MEMBER, result.record)

    assert h.live.current("u1") is None
    assert h.service.load_today(MEMBER) is None


def test_clear_all_removes_only_own_records(h):
    h.seed("u1", 1)
    h.seed("u1", 2)
    h.seed("u2", 1)

    assert h.service.clear_all(MEMBER) == 2
    assert h.local.count("u2") == 1


def test_side_effect_failures_do_not_fail_the_attempt(h):
    class BrokenTimeline:
        def reload_all(self):
            raise RuntimeError("widget host gone")

    h.service._timeline = BrokenTimeline()

    result = h.service.check_in(MEMBER, biometric=CountingBiometric(), location=_at_office())

    assert result.succeeded
