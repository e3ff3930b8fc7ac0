from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_latitude, require_longitude, require_positive
from ..core.constants import DEFAULT_OFFICE_LATITUDE, DEFAULT_OFFICE_LONGITUDE, DEFAULT_OFFICE_RADIUS_M
from ..core.enums import DataSource
from ..core.exceptions import ValidationError
from ..location.model import OfficeLocation
from .model import (
    DATA_SOURCE_KEY,
    OFFICE_LATITUDE_KEY,
    OFFICE_LONGITUDE_KEY,
    OFFICE_RADIUS_KEY,
    PREMIUM_KEY,
    AppPreferences,
)
from .repository import PreferencesRepository

logger = logging.getLogger(__name__)


def _float_or_default(raw: Optional[str], default: float) -> float:
    # A stored 0 means "never configured".
    try:
        value = float(raw) if raw is not None else 0.0
    except ValueError:
        return default
    return value if value != 0 else default


class PreferencesService:
    """Use case: read and change persisted app settings."""

    def __init__(self, prefs: PreferencesRepository, *, default_data_source: DataSource = DataSource.LOCAL):
        self._prefs = prefs
        self._default_source = DataSource(default_data_source)

    def load(self) -> AppPreferences:
        raw = self._prefs.get_all()
        try:
            source = DataSource(raw.get(DATA_SOURCE_KEY) or self._default_source.value)
        except ValueError:
            source = self._default_source
        return AppPreferences(
            office_latitude=_float_or_default(raw.get(OFFICE_LATITUDE_KEY), DEFAULT_OFFICE_LATITUDE),
            office_longitude=_float_or_default(raw.get(OFFICE_LONGITUDE_KEY), DEFAULT_OFFICE_LONGITUDE),
            office_radius_m=_float_or_default(raw.get(OFFICE_RADIUS_KEY), DEFAULT_OFFICE_RADIUS_M),
            data_source=source,
            is_premium=raw.get(PREMIUM_KEY) == "1",
        )

    def office(self) -> OfficeLocation:
        return self.load().office

    def data_source(self) -> DataSource:
        return self.load().data_source

    def update_office_location(
        self, latitude: float, longitude: float, radius_m: Optional[float] = None
    ) -> OfficeLocation:
        lat = require_latitude(latitude)
        lon = require_longitude(longitude)
        radius = require_positive(radius_m, "radius") if radius_m is not None else None

        self._prefs.set(OFFICE_LATITUDE_KEY, repr(lat))
        self._prefs.set(OFFICE_LONGITUDE_KEY, repr(lon))
        if radius is not None:
            self._prefs.set(OFFICE_RADIUS_KEY, repr(radius))
        logger.info("Office location updated to %s, %s (radius=%s)", lat, lon, radius)
        return self.office()

    def set_data_source(self, source: DataSource | str) -> DataSource:
        try:
            source = DataSource(source)
        except ValueError:
            raise ValidationError(f"Unknown data source: {source!r}") from None
        self._prefs.set(DATA_SOURCE_KEY, source.value)
        return source

    def set_premium(self, is_premium: bool) -> None:
        self._prefs.set(PREMIUM_KEY, "1" if is_premium else "0")

    def reset(self) -> AppPreferences:
        self._prefs.clear()
        return self.load()
