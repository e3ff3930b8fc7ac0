from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_OFFICE_LATITUDE, DEFAULT_OFFICE_LONGITUDE, DEFAULT_OFFICE_RADIUS_M
from ..core.enums import DataSource
from ..location.model import OfficeLocation

OFFICE_LATITUDE_KEY = "office_latitude"
OFFICE_LONGITUDE_KEY = "office_longitude"
OFFICE_RADIUS_KEY = "office_radius"
DATA_SOURCE_KEY = "data_source"
PREMIUM_KEY = "is_premium_user"


@dataclass(frozen=True)
class AppPreferences:
    office_latitude: float = DEFAULT_OFFICE_LATITUDE
    office_longitude: float = DEFAULT_OFFICE_LONGITUDE
    office_radius_m: float = DEFAULT_OFFICE_RADIUS_M
    data_source: DataSource = DataSource.LOCAL
    is_premium: bool = False

    @property
    def office(self) -> OfficeLocation:
        return OfficeLocation(self.office_latitude, self.office_longitude, self.office_radius_m)

    def to_dict(self) -> dict:
        return {
            "office_latitude": self.office_latitude,
            "office_longitude": self.office_longitude,
            "office_radius_m": self.office_radius_m,
            "data_source": self.data_source.value,
            "is_premium": self.is_premium,
        }
