from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import LocationPermission
from ..core.exceptions import LocationUnavailable, ValidationError
from ..location.model import Coordinate


class LocationProvider(Protocol):
    def permission_status(self) -> LocationPermission:
        raise NotImplementedError

    def get_current_location(self) -> Coordinate:
        """Raises ``LocationUnavailable`` when no fix can be obtained."""

        raise NotImplementedError


class ReportedLocation(LocationProvider):
    """Location fix taken on the device and sent along with the request."""

    def __init__(
        self,
        coordinate: Optional[Coordinate],
        *,
        permission: LocationPermission | str = LocationPermission.AUTHORIZED,
        error: Optional[str] = None,
    ):
        try:
            self._permission = LocationPermission(permission)
        except ValueError:
            raise ValidationError(f"Unknown location permission: {permission!r}") from None
        self._coordinate = coordinate
        self._error = error

    def permission_status(self) -> LocationPermission:
        return self._permission

    def get_current_location(self) -> Coordinate:
        if self._error or self._coordinate is None:
            raise LocationUnavailable(self._error or None)
        return self._coordinate
