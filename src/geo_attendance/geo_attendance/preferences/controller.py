from __future__ import annotations

from flask import Flask

from ..common.responses import fail, json_body, ok, server_error
from ..common.validators import as_bool
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from ..users.model import NO_IDENTITY


def register(app: Flask, container: Container) -> None:
    prefs = container.preferences_service

    @app.route("/api/preferences", methods=["GET"], endpoint="preferences_get")
    def preferences_get():
        try:
            return ok(preferences=prefs.load().to_dict())
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/preferences", methods=["PUT"], endpoint="preferences_update")
    def preferences_update():
        try:
            data = json_body()
            if "office_latitude" in data or "office_longitude" in data:
                if "office_latitude" not in data or "office_longitude" not in data:
                    raise ValidationError("office_latitude and office_longitude must be set together")
                prefs.update_office_location(
                    data["office_latitude"], data["office_longitude"], data.get("office_radius_m")
                )
            elif "office_radius_m" in data:
                office = prefs.office()
                prefs.update_office_location(office.latitude, office.longitude, data["office_radius_m"])
            if "data_source" in data:
                prefs.set_data_source(data["data_source"])
            if "is_premium" in data:
                prefs.set_premium(as_bool(data["is_premium"]))
            return ok(preferences=prefs.load().to_dict())
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/preferences/reset", methods=["POST"], endpoint="preferences_reset")
    def preferences_reset():
        try:
            return ok(preferences=prefs.reset().to_dict())
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/reminders", methods=["POST"], endpoint="reminders_schedule")
    def reminders_schedule():
        identity = container.identity_provider.current() or NO_IDENTITY
        reminders = container.reminders.schedule_all(identity.owner_id)
        return ok(reminders=[r.to_dict() for r in reminders])

    @app.route("/api/reminders", methods=["GET"], endpoint="reminders_list")
    def reminders_list():
        identity = container.identity_provider.current() or NO_IDENTITY
        return ok(reminders=[r.to_dict() for r in container.reminders.pending(identity.owner_id)])
