from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_M
from .model import Coordinate, OfficeLocation, ProximityResult


def great_circle_distance(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in meters on a spherical Earth."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


class ProximityValidator:
    """Pass/fail check of a single location reading against the office geofence."""

    def __init__(self, office: OfficeLocation):
        self._office = office

    @property
    def office(self) -> OfficeLocation:
        return self._office

    def distance_from_office(self, reading: Coordinate) -> float:
        return great_circle_distance(reading, self._office.coordinate)

    def validate(self, reading: Coordinate) -> ProximityResult:
        distance = self.distance_from_office(reading)
        return ProximityResult(
            is_valid=distance <= self._office.radius_m,
            distance_m=distance,
            radius_m=self._office.radius_m,
        )
