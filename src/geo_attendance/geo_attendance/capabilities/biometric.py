from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.enums import BiometricOutcome
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class BiometricResult:
    outcome: BiometricOutcome
    message: Optional[str] = None


class BiometricGate(Protocol):
    def authenticate(self, reason: str) -> BiometricResult:
        raise NotImplementedError


class ReportedBiometric(BiometricGate):
    """Outcome of the on-device prompt, as reported by the client."""

    def __init__(self, outcome: BiometricOutcome | str, message: Optional[str] = None):
        try:
            self._outcome = BiometricOutcome(outcome)
        except ValueError:
            raise ValidationError(f"Unknown biometric outcome: {outcome!r}") from None
        self._message = message
        self.reasons: list[str] = []

    def authenticate(self, reason: str) -> BiometricResult:
        self.reasons.append(reason)
        return BiometricResult(self._outcome, self._message)
