from __future__ import annotations

from flask import Flask

from ..common.responses import fail, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError
from .model import NO_IDENTITY


def register(app: Flask, container: Container) -> None:
    provider = container.identity_provider

    @app.route("/api/session", methods=["GET"], endpoint="session_current")
    def session_current():
        identity = provider.current() or NO_IDENTITY
        return ok(identity=identity.to_dict())

    @app.route("/api/session/anonymous", methods=["POST"], endpoint="session_anonymous")
    def session_anonymous():
        try:
            identity = provider.current() or provider.sign_in_anonymously()
            return ok(identity=identity.to_dict())
        except DomainError as e:
            return fail(e)
        except Exception:
            return server_error()

    @app.route("/api/session", methods=["DELETE"], endpoint="session_sign_out")
    def session_sign_out():
        identity = provider.current()
        if identity is not None:
            container.live_status.end(identity.owner_id)
            container.reminders.cancel_all(identity.owner_id)
        provider.sign_out()
        return ok(identity=NO_IDENTITY.to_dict())
