from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    default_message = "Invalid input"


class GuestLimitExceeded(DomainError):
    default_message = "Guest limit reached (2 check-ins). Please sign in to continue."


class BiometricDeclined(DomainError):
    """The user dismissed the biometric prompt. Not shown as an error."""

    default_message = "Authentication cancelled"


class BiometricFailed(DomainError):
    default_message = "Authentication failed"


class LocationUnauthorized(DomainError):
    default_message = "Location access is required to check in"


class LocationUnavailable(DomainError):
    default_message = "Unable to determine your location"


class OutsideOfficeArea(DomainError):
    """Recoverable: the user can move closer and try again."""

    def __init__(self, distance_m: float, radius_m: float):
        self.distance_m = float(distance_m)
        self.radius_m = float(radius_m)
        super().__init__(
            f"You must be within the office area to check in "
            f"({self.distance_m:.0f} m away, allowed {self.radius_m:.0f} m)"
        )


class NotFoundError(DomainError):
    default_message = "No active check-in found for today"


class PersistenceError(DomainError):
    """Wraps an I/O failure of a storage backend. Safe to retry."""

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message or f"Storage error: {cause}")


class AuthRequired(DomainError):
    default_message = "User not logged in"
