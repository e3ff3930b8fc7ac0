from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..capabilities.biometric import ReportedBiometric
from ..capabilities.location import ReportedLocation
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.responses import fail, json_body, ok, server_error, status_for
from ..common.validators import as_bool, require_latitude, require_longitude
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_DAYS
from ..core.enums import WidgetState
from ..core.exceptions import DomainError
from ..location.model import Coordinate
from ..users.model import NO_IDENTITY
from .service import AttemptResult


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _identity():
        return container.identity_provider.current() or NO_IDENTITY

    def _attempt_response(result: AttemptResult):
        status = 200 if result.succeeded or result.error is None else status_for(result.error)
        return jsonify(result.to_dict()), status

    def _reported_location(data: dict) -> ReportedLocation:
        coordinate = None
        if data.get("latitude") is not None or data.get("longitude") is not None:
            coordinate = Coordinate(require_latitude(data.get("latitude")), require_longitude(data.get("longitude")))
        return ReportedLocation(
            coordinate,
            permission=data.get("location_permission") or "authorized",
            error=data.get("location_error"),
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    def attendance_today():
        try:
            record = service.load_today(_identity())
            return ok(record=record.to_dict() if record else None)
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    def attendance_check_in():
        try:
            data = json_body()
            result = service.check_in(
                _identity(),
                biometric=ReportedBiometric(data.get("biometric", ""), data.get("biometric_message")),
                location=_reported_location(data),
                manual=as_bool(data.get("manual", False)),
                time=parse_iso_datetime(data.get("time")),
            )
            return _attempt_response(result)
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    def attendance_check_out():
        try:
            data = json_body()
            result = service.check_out(
                _identity(),
                biometric=ReportedBiometric(data.get("biometric", ""), data.get("biometric_message")),
                manual=as_bool(data.get("manual", False)),
                time=parse_iso_datetime(data.get("time")),
            )
            return _attempt_response(result)
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    def attendance_history():
        try:
            today = service.today()
            end = parse_iso_date(request.args["end"]) if request.args.get("end") else today
            start = (
                parse_iso_date(request.args["start"])
                if request.args.get("start")
                else end - timedelta(days=DEFAULT_HISTORY_DAYS - 1)
            )
            records = service.history(_identity(), start, end)
            return ok(records=[r.to_dict() for r in records])
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/<record_id>", methods=["PATCH"], endpoint="attendance_update_time")
    def attendance_update_time(record_id: str):
        try:
            data = json_body()
            identity = _identity()
            record = service.get_record(identity, record_id)
            result = service.update_time(
                identity,
                record,
                check_in_time=parse_iso_datetime(data.get("check_in_time")),
                check_out_time=parse_iso_datetime(data.get("check_out_time")),
            )
            return _attempt_response(result)
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/<record_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(record_id: str):
        try:
            identity = _identity()
            service.delete(identity, service.get_record(identity, record_id))
            return ok()
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance", methods=["DELETE"], endpoint="attendance_clear")
    def attendance_clear():
        try:
            return ok(deleted=service.clear_all(_identity()))
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/attendance/widget", methods=["GET"], endpoint="attendance_widget")
    def attendance_widget():
        """Snapshot polled by lock-screen/home-screen widgets."""
        try:
            identity = _identity()
            record = service.load_today(identity)
            if record is not None and record.is_complete:
                state = WidgetState.COMPLETED
            elif record is not None and record.has_checked_in:
                state = WidgetState.CHECKED_IN
            else:
                state = WidgetState.NOT_STARTED
            live_since = container.live_status.current(identity.owner_id)
            return ok(
                state=state.value,
                check_in_time=record.check_in_time.isoformat() if record and record.check_in_time else None,
                check_out_time=record.check_out_time.isoformat() if record and record.check_out_time else None,
                work_time=record.formatted_work_time if record else "--:--",
                live_since=live_since.isoformat() if live_since else None,
                generation=container.timeline.generation,
            )
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()
