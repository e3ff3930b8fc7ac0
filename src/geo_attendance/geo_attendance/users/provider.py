from __future__ import annotations

import logging
import uuid
from typing import Optional, Protocol

from flask import has_request_context, session

from ..core.exceptions import AuthRequired
from .model import Identity

logger = logging.getLogger(__name__)

_SESSION_KEYS = ("owner_id", "is_anonymous", "name", "email", "phone")


class IdentityProvider(Protocol):
    """Account/session capability. Registered sign-in lives outside this package."""

    def current(self) -> Optional[Identity]:
        raise NotImplementedError

    def sign_in_anonymously(self) -> Identity:
        raise NotImplementedError


class SessionIdentityProvider(IdentityProvider):
    """Identity stored in the Flask session cookie."""

    def current(self) -> Optional[Identity]:
        if not has_request_context() or not session.get("owner_id"):
            return None
        return Identity(
            owner_id=str(session["owner_id"]),
            is_anonymous=bool(session.get("is_anonymous", False)),
            name=session.get("name"),
            email=session.get("email"),
            phone=session.get("phone"),
        )

    def sign_in_anonymously(self) -> Identity:
        if not has_request_context():
            raise AuthRequired("An anonymous session needs an active request")
        identity = Identity(owner_id=uuid.uuid4().hex, is_anonymous=True)
        session["owner_id"] = identity.owner_id
        session["is_anonymous"] = True
        logger.info("Anonymous session created owner=%s", identity.owner_id)
        return identity

    def sign_out(self) -> None:
        for key in _SESSION_KEYS:
            session.pop(key, None)
