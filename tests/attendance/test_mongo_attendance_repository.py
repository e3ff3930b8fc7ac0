from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from src.geo_attendance.geo_attendance.attendance.mongo_attendance_repository import MongoAttendanceRepository
from src.geo_attendance.geo_attendance.core.exceptions import AuthRequired, NotFoundError, PersistenceError
from src.geo_attendance.geo_attendance.database.mongo import USERS_COLLECTION, to_bson_datetime
from src.geo_attendance.geo_attendance.users.model import Identity


def _repo(mongo_conn, identity_provider, clock) -> MongoAttendanceRepository:
    return MongoAttendanceRepository(mongo_conn, identity_provider, clock=clock)


def test_check_in_upserts_one_document_per_owner_and_day(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)

    first = repo.check_in("u1", time=fixed_now, manual=False, latitude=41.31, longitude=69.24)
    second = repo.check_in("u1", time=fixed_now + timedelta(minutes=5), manual=True, latitude=41.3, longitude=69.2)

    assert repo.count("u1") == 1
    assert second.record_id == first.record_id
    assert second.check_in_manual is True
    assert second.check_out_time is None
    assert second.work_date == fixed_now.date()


def test_missing_owner_starts_anonymous_session(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)

    rec = repo.check_in(None, time=fixed_now, manual=False, latitude=None, longitude=None)

    assert identity_provider.anonymous_sign_ins == 1
    assert rec.owner_id == "anon-1"
    # second call reuses the session
    assert repo.count(None) == 1
    assert identity_provider.anonymous_sign_ins == 1


def test_auth_required_when_no_session_can_be_started(mongo_conn, clock, fixed_now):
    class NoSessions:
        def current(self):
            return None

        def sign_in_anonymously(self):
            return Identity()

    repo = MongoAttendanceRepository(mongo_conn, NoSessions(), clock=clock)

    with pytest.raises(AuthRequired):
        repo.fetch_today(None)


def test_check_in_mirrors_user_profile(mongo_conn, identity_provider, clock, fixed_now):
    identity_provider.identity = Identity(owner_id="u1", name="Dilnoza", email="d@example.com")
    repo = _repo(mongo_conn, identity_provider, clock)

    repo.check_in("u1", time=fixed_now, manual=False, latitude=None, longitude=None)

    profile = mongo_conn.collection(USERS_COLLECTION).find_one({"_id": "u1"})
    assert profile["name"] == "Dilnoza"
    assert profile["email"] == "d@example.com"
    assert profile["is_anonymous"] is False
    assert profile["last_active"] == fixed_now
    assert "phone" not in profile


def test_check_out_without_check_in_raises_and_creates_nothing(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)

    with pytest.raises(NotFoundError):
        repo.check_out("u1", time=fixed_now, manual=False)

    assert repo.count("u1") == 0


def test_check_out_then_update_time(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)
    repo.check_in("u1", time=fixed_now, manual=False, latitude=None, longitude=None)
    rec = repo.check_out("u1", time=fixed_now + timedelta(hours=8), manual=False)

    assert rec.is_complete

    updated = repo.update_time(rec, check_out_time=fixed_now + timedelta(hours=9))

    assert updated.check_out_time == fixed_now + timedelta(hours=9)
    assert updated.check_out_manual is True
    assert updated.check_in_time == fixed_now
    assert updated.check_in_manual is False


def test_history_sorted_newest_first(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)
    for days_ago in (3, 0, 1):
        clock.now = fixed_now - timedelta(days=days_ago)
        repo.check_in("u1", time=clock.now, manual=False, latitude=None, longitude=None)

    history = repo.fetch_history("u1", fixed_now.date() - timedelta(days=2), fixed_now.date())

    assert [r.work_date for r in history] == [fixed_now.date(), fixed_now.date() - timedelta(days=1)]


def test_delete_clear_and_fetch_by_id(mongo_conn, identity_provider, clock, fixed_now):
    repo = _repo(mongo_conn, identity_provider, clock)
    rec = repo.check_in("u1", time=fixed_now, manual=False, latitude=None, longitude=None)

    assert repo.fetch_by_id("u1", rec.record_id) == rec
    assert repo.fetch_by_id("u2", rec.record_id) is None
    assert repo.delete(rec) is True
    assert repo.delete(rec) is False

    clock.now = fixed_now + timedelta(days=1)
    repo.check_in("u1", time=clock.now, manual=False, latitude=None, longitude=None)
    assert repo.clear("u1") == 1


def test_driver_errors_become_persistence_errors(mongo_conn, identity_provider, clock, fixed_now, monkeypatch):
    repo = _repo(mongo_conn, identity_provider, clock)

    class Unreachable:
        def count_documents(self, *args, **kwargs):
            raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(mongo_conn, "collection", lambda name: Unreachable())

    with pytest.raises(PersistenceError):
        repo.count("u1")


def test_bson_datetime_truncated_to_milliseconds():
    assert to_bson_datetime(datetime(2024, 3, 14, 9, 0, 0, 123456)) == datetime(2024, 3, 14, 9, 0, 0, 123000)
