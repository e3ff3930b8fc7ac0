from __future__ import annotations

import importlib
import logging
from datetime import datetime
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask
from pymongo import MongoClient

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import now_local
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .preferences.controller import register as register_preferences
from .stats.controller import register as register_stats
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(
    *,
    overrides: Optional[dict] = None,
    mongo_client: Optional[MongoClient] = None,
    clock: Callable[[], datetime] = now_local,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    values = {
        name: getattr(settings, name)
        for name in ("SECRET_KEY", "DB_CONFIG", "MONGO_CONFIG", "DEFAULT_DATA_SOURCE", "DEBUG", "AUTO_INIT_DB", "LOG_LEVEL")
        if hasattr(settings, name)
    }
    values.update(overrides or {})

    logging.basicConfig(
        level=values.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = values["SECRET_KEY"]
    app.config["DEBUG"] = bool(values.get("DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    container = build_container(
        db_config=values["DB_CONFIG"],
        mongo_config=values["MONGO_CONFIG"],
        default_data_source=values.get("DEFAULT_DATA_SOURCE", "local"),
        mongo_client=mongo_client,
        clock=clock,
    )
    app.extensions["geo_attendance"] = container

    if values.get("AUTO_INIT_DB", True):
        apply_schema(container.conn)
        logger.info("settings=%s db=%s tables=%s", settings_module, container.conn.path, list_tables(container.conn))

    register_users(app, container)
    register_attendance(app, container)
    register_stats(app, container)
    register_preferences(app, container)

    return app
