from __future__ import annotations

from enum import Enum


class DataSource(str, Enum):
    """Which storage backend holds attendance records."""

    LOCAL = "local"
    REMOTE = "remote"


class BiometricOutcome(str, Enum):
    GRANTED = "granted"
    DECLINED = "declined"
    ERROR = "error"


class LocationPermission(str, Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"
    NOT_DETERMINED = "not_determined"


class AttemptState(str, Enum):
    """Progress of one check-in/check-out attempt through the gate chain."""

    IDLE = "IDLE"
    QUOTA_CHECKED = "QUOTA_CHECKED"
    BIOMETRIC_PASSED = "BIOMETRIC_PASSED"
    LOCATION_VALIDATED = "LOCATION_VALIDATED"
    PERSISTED = "PERSISTED"
    DONE = "DONE"
    FAILED = "FAILED"


class WidgetState(str, Enum):
    NOT_STARTED = "not_started"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
