"""Example: use the service layer directly (no Flask).

Controllers are thin; the gate chain and statistics live in services.
"""

import importlib

from config import get_settings_module

from src.geo_attendance.geo_attendance.container import build_container
from src.geo_attendance.geo_attendance.database.bootstrap import apply_schema
from src.geo_attendance.geo_attendance.users.model import NO_IDENTITY


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, mongo_config=settings.MONGO_CONFIG)
    apply_schema(container.conn)

    for day in container.stats_service.weekly(NO_IDENTITY):
        print(f"{day.weekday} {day.date.isoformat()}: {day.hours:.2f} h")

    summary = container.stats_service.monthly(NO_IDENTITY)
    print(summary.to_dict())


if __name__ == "__main__":
    main()
