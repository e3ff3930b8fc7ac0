from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_month
from ..common.responses import fail, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError
from ..users.model import NO_IDENTITY


def register(app: Flask, container: Container) -> None:
    def _identity():
        return container.identity_provider.current() or NO_IDENTITY

    @app.route("/api/stats/weekly", methods=["GET"], endpoint="stats_weekly")
    def stats_weekly():
        try:
            stats = container.stats_service.weekly(_identity())
            return ok(days=[s.to_dict() for s in stats])
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/stats/monthly", methods=["GET"], endpoint="stats_monthly")
    def stats_monthly():
        try:
            month = parse_month(request.args["month"]) if request.args.get("month") else None
            summary = container.stats_service.monthly(_identity(), month=month)
            return ok(summary=summary.to_dict())
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()
