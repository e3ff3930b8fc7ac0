from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_float(value: Any, field_name: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None


def require_latitude(value: Any) -> float:
    lat = require_float(value, "latitude")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("latitude must be between -90 and 90")
    return lat


def require_longitude(value: Any) -> float:
    lon = require_float(value, "longitude")
    if not -180.0 <= lon <= 180.0:
        raise ValidationError("longitude must be between -180 and 180")
    return lon


def require_positive(value: Any, field_name: str) -> float:
    number = require_float(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
