from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_OFFICE_LATITUDE, DEFAULT_OFFICE_LONGITUDE, DEFAULT_OFFICE_RADIUS_M


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class OfficeLocation:
    """Geofence centre and allowed radius in meters."""

    latitude: float = DEFAULT_OFFICE_LATITUDE
    longitude: float = DEFAULT_OFFICE_LONGITUDE
    radius_m: float = DEFAULT_OFFICE_RADIUS_M

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class ProximityResult:
    is_valid: bool
    distance_m: float
    radius_m: float
