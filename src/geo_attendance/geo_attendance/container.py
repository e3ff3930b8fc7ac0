from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from pymongo import MongoClient

from .attendance.factory import AttendanceRepositoryFactory
from .attendance.mongo_attendance_repository import MongoAttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sqlite_attendance_repository import SQLiteAttendanceRepository
from .capabilities.broadcast import InMemoryLiveStatusBoard, WidgetTimelineBoard
from .capabilities.reminders import InMemoryReminderScheduler
from .common.datetime_utils import now_local
from .core.enums import DataSource
from .database.connection import DBConfig, DatabaseConnection
from .database.mongo import MongoConfig, MongoConnection
from .preferences.service import PreferencesService
from .preferences.sqlite_preferences_repository import SQLitePreferencesRepository
from .stats.service import StatsService
from .users.provider import SessionIdentityProvider


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    mongo: MongoConnection

    identity_provider: SessionIdentityProvider
    local_attendance_repo: SQLiteAttendanceRepository
    remote_attendance_repo: MongoAttendanceRepository
    attendance_repos: AttendanceRepositoryFactory
    preferences_repo: SQLitePreferencesRepository

    live_status: InMemoryLiveStatusBoard
    timeline: WidgetTimelineBoard
    reminders: InMemoryReminderScheduler

    preferences_service: PreferencesService
    attendance_service: AttendanceService
    stats_service: StatsService


def build_container(
    *,
    db_config: dict,
    mongo_config: dict,
    default_data_source: str = DataSource.LOCAL.value,
    mongo_client: Optional[MongoClient] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    conn = DatabaseConnection(DBConfig(path=str(db_config["path"]), timeout=float(db_config.get("timeout", 5.0))))
    mongo = MongoConnection(
        MongoConfig(
            uri=str(mongo_config["uri"]),
            database=str(mongo_config["database"]),
            server_selection_timeout_ms=int(mongo_config.get("server_selection_timeout_ms", 5000)),
        ),
        client=mongo_client,
    )

    identity_provider = SessionIdentityProvider()
    local_attendance_repo = SQLiteAttendanceRepository(conn, clock=clock)
    remote_attendance_repo = MongoAttendanceRepository(mongo, identity_provider, clock=clock)
    attendance_repos = AttendanceRepositoryFactory(local=local_attendance_repo, remote=remote_attendance_repo)
    preferences_repo = SQLitePreferencesRepository(conn)

    live_status = InMemoryLiveStatusBoard()
    timeline = WidgetTimelineBoard()
    reminders = InMemoryReminderScheduler()

    preferences_service = PreferencesService(preferences_repo, default_data_source=DataSource(default_data_source))
    attendance_service = AttendanceService(
        attendance_repos,
        preferences_service,
        live_status=live_status,
        timeline=timeline,
        reminders=reminders,
        clock=clock,
    )
    stats_service = StatsService(attendance_service, clock=clock)

    return Container(
        conn=conn,
        mongo=mongo,
        identity_provider=identity_provider,
        local_attendance_repo=local_attendance_repo,
        remote_attendance_repo=remote_attendance_repo,
        attendance_repos=attendance_repos,
        preferences_repo=preferences_repo,
        live_status=live_status,
        timeline=timeline,
        reminders=reminders,
        preferences_service=preferences_service,
        attendance_service=attendance_service,
        stats_service=stats_service,
    )
