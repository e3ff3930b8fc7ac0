from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..capabilities.biometric import BiometricGate
from ..capabilities.broadcast import LiveStatusBroadcaster, TimelineRefresher
from ..capabilities.location import LocationProvider
from ..capabilities.reminders import CHECK_OUT_REMINDER, INCOMPLETE_SESSION_REMINDER, ReminderScheduler
from ..common.datetime_utils import now_local
from ..core.constants import CHECK_IN_REASON, CHECK_OUT_REASON
from ..core.enums import AttemptState, BiometricOutcome, LocationPermission
from ..core.exceptions import (
    BiometricDeclined,
    BiometricFailed,
    DomainError,
    GuestLimitExceeded,
    LocationUnauthorized,
    NotFoundError,
    OutsideOfficeArea,
    PersistenceError,
    ValidationError,
)
from ..location.model import Coordinate
from ..location.proximity import ProximityValidator
from ..preferences.service import PreferencesService
from ..quota.policy import is_check_in_allowed
from ..users.model import Identity
from .factory import AttendanceRepositoryFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptResult:
    """What the caller renders after one check-in/check-out/edit attempt."""

    state: AttemptState
    trace: tuple[AttemptState, ...]
    record: Optional[AttendanceRecord] = None
    error: Optional[DomainError] = None
    error_message: Optional[str] = None
    show_error: bool = False
    show_location_alert: bool = False
    distance_from_office: Optional[float] = None

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.DONE

    def to_dict(self) -> dict:
        return {
            "success": self.succeeded,
            "state": self.state.value,
            "message": self.error_message,
            "show_error": self.show_error,
            "show_location_alert": self.show_location_alert,
            "distance_from_office": self.distance_from_office,
            "record": self.record.to_dict() if self.record else None,
        }


@dataclass
class _Attempt:
    action: str
    trace: list[AttemptState] = field(default_factory=lambda: [AttemptState.IDLE])

    def advance(self, state: AttemptState) -> None:
        self.trace.append(state)

    def done(self, record: AttendanceRecord) -> AttemptResult:
        self.trace.append(AttemptState.DONE)
        return AttemptResult(state=AttemptState.DONE, trace=tuple(self.trace), record=record)

    def fail(self, error: DomainError) -> AttemptResult:
        self.trace.append(AttemptState.FAILED)
        trace = tuple(self.trace)

        if isinstance(error, BiometricDeclined):
            # Cancelling the prompt is a normal user action.
            return AttemptResult(state=AttemptState.FAILED, trace=trace, error=error)

        if isinstance(error, OutsideOfficeArea):
            return AttemptResult(
                state=AttemptState.FAILED,
                trace=trace,
                error=error,
                error_message=error.message,
                show_location_alert=True,
                distance_from_office=error.distance_m,
            )

        message = error.message
        if isinstance(error, PersistenceError):
            message = f"Failed to {self.action}: {error.message}. Please try again."
        return AttemptResult(
            state=AttemptState.FAILED,
            trace=trace,
            error=error,
            error_message=message,
            show_error=True,
        )


class AttendanceService:
    """Gate chain for check-in/check-out plus the manual override path.

    Every attempt starts from IDLE; gate failures are converted into an
    ``AttemptResult`` instead of propagating. Read/delete operations pass
    through to the active backend and raise ``DomainError`` subclasses.
    """

    def __init__(
        self,
        repositories: AttendanceRepositoryFactory,
        preferences: PreferencesService,
        *,
        live_status: LiveStatusBroadcaster,
        timeline: TimelineRefresher,
        reminders: ReminderScheduler,
        clock: Callable[[], datetime] = now_local,
    ):
        self._repositories = repositories
        self._preferences = preferences
        self._live_status = live_status
        self._timeline = timeline
        self._reminders = reminders
        self._clock = clock

    def _active(self) -> AttendanceRepository:
        return self._repositories.for_source(self._preferences.data_source())

    # -- gates -------------------------------------------------------------

    def _check_guest_quota(self, repo: AttendanceRepository, identity: Identity) -> None:
        if not identity.is_anonymous:
            return
        try:
            count = repo.count(identity.owner_id)
        except PersistenceError as exc:
            # Fail open: an unreachable store must not lock the user out.
            logger.warning("Guest quota check failed for owner=%s, proceeding: %s", identity.owner_id, exc)
            return
        if not is_check_in_allowed(identity.is_anonymous, count):
            raise GuestLimitExceeded()

    def _require_biometric(self, gate: BiometricGate, reason: str) -> None:
        result = gate.authenticate(reason)
        if result.outcome == BiometricOutcome.GRANTED:
            return
        if result.outcome == BiometricOutcome.DECLINED:
            raise BiometricDeclined()
        raise BiometricFailed(f"Authentication failed: {result.message}" if result.message else None)

    def _acquire_location(self, provider: LocationProvider) -> Coordinate:
        if provider.permission_status() != LocationPermission.AUTHORIZED:
            raise LocationUnauthorized()
        return provider.get_current_location()

    # -- side effects --------------------------------------------------------

    def _notify(self, what: str, fn: Callable, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("%s failed", what)

    def _after_check_in(self, record: AttendanceRecord) -> None:
        self._notify("live status start", self._live_status.start, record.owner_id, record.check_in_time)
        self._notify("timeline reload", self._timeline.reload_all)

    def _after_check_out(self, record: AttendanceRecord) -> None:
        self._notify("timeline reload", self._timeline.reload_all)
        self._notify("reminder cancel", self._reminders.cancel, record.owner_id, CHECK_OUT_REMINDER)
        self._notify("reminder cancel", self._reminders.cancel, record.owner_id, INCOMPLETE_SESSION_REMINDER)
        self._notify("live status end", self._live_status.end, record.owner_id)

    # -- gate chain ----------------------------------------------------------

    def check_in(
        self,
        identity: Identity,
        *,
        biometric: BiometricGate,
        location: LocationProvider,
        manual: bool = False,
        time: Optional[datetime] = None,
    ) -> AttemptResult:
        attempt = _Attempt("check in")
        try:
            repo = self._active()
            self._check_guest_quota(repo, identity)
            attempt.advance(AttemptState.QUOTA_CHECKED)

            self._require_biometric(biometric, CHECK_IN_REASON)
            attempt.advance(AttemptState.BIOMETRIC_PASSED)

            reading = self._acquire_location(location)
            proximity = ProximityValidator(self._preferences.office()).validate(reading)
            if not proximity.is_valid:
                raise OutsideOfficeArea(proximity.distance_m, proximity.radius_m)
            attempt.advance(AttemptState.LOCATION_VALIDATED)

            when = time or self._clock()
            today = repo.fetch_today(identity.owner_id)
            if today is not None and today.check_out_time is not None and when > today.check_out_time:
                raise ValidationError("Already checked out today; check-in cannot be after check-out")

            record = repo.check_in(
                identity.owner_id,
                time=when,
                manual=manual,
                latitude=reading.latitude,
                longitude=reading.longitude,
            )
            attempt.advance(AttemptState.PERSISTED)
        except DomainError as exc:
            logger.info("check-in aborted owner=%s: %s", identity.owner_id, type(exc).__name__)
            return attempt.fail(exc)

        logger.info("check-in owner=%s record=%s", record.owner_id, record.record_id)
        self._after_check_in(record)
        return attempt.done(record)

    def check_out(
        self,
        identity: Identity,
        *,
        biometric: BiometricGate,
        manual: bool = False,
        time: Optional[datetime] = None,
    ) -> AttemptResult:
        attempt = _Attempt("check out")
        try:
            repo = self._active()
            self._require_biometric(biometric, CHECK_OUT_REASON)
            attempt.advance(AttemptState.BIOMETRIC_PASSED)

            when = time or self._clock()
            today = repo.fetch_today(identity.owner_id)
            if today is None or today.check_in_time is None:
                raise NotFoundError()
            if when < today.check_in_time:
                raise ValidationError("Check-out time cannot be earlier than check-in time")

            record = repo.check_out(identity.owner_id, time=when, manual=manual)
            attempt.advance(AttemptState.PERSISTED)
        except DomainError as exc:
            logger.info("check-out aborted owner=%s: %s", identity.owner_id, type(exc).__name__)
            return attempt.fail(exc)

        logger.info("check-out owner=%s record=%s", record.owner_id, record.record_id)
        self._after_check_out(record)
        return attempt.done(record)

    def update_time(
        self,
        identity: Identity,
        record: AttendanceRecord,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> AttemptResult:
        """Manual override: no quota, biometric or proximity gate."""
        attempt = _Attempt("update time")
        try:
            if check_in_time is None and check_out_time is None:
                raise ValidationError("Nothing to update")
            if record.owner_id != identity.owner_id:
                raise NotFoundError("Attendance record not found")

            patched = record.with_times(check_in_time=check_in_time, check_out_time=check_out_time)
            if patched.check_out_time is not None and patched.check_in_time is None:
                raise ValidationError("Set a check-in time before the check-out time")
            if patched.work_duration is not None and patched.work_duration.total_seconds() < 0:
                raise ValidationError("Check-out time cannot be earlier than check-in time")

            updated = self._active().update_time(
                record, check_in_time=check_in_time, check_out_time=check_out_time
            )
            attempt.advance(AttemptState.PERSISTED)
        except DomainError as exc:
            return attempt.fail(exc)

        self._notify("timeline reload", self._timeline.reload_all)
        return attempt.done(updated)

    # -- pass-through --------------------------------------------------------

    def today(self) -> date:
        return self._clock().date()

    def load_today(self, identity: Identity) -> Optional[AttendanceRecord]:
        return self._active().fetch_today(identity.owner_id)

    def history(self, identity: Identity, start: date, end: date) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._active().fetch_history(identity.owner_id, start, end)

    def get_record(self, identity: Identity, record_id: str) -> AttendanceRecord:
        record = self._active().fetch_by_id(identity.owner_id, record_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def delete(self, identity: Identity, record: AttendanceRecord) -> None:
        if record.owner_id != identity.owner_id or not self._active().delete(record):
            raise NotFoundError("Attendance record not found")
        if record.is_today(self._clock().date()):
            self._notify("live status end", self._live_status.end, record.owner_id)
        self._notify("timeline reload", self._timeline.reload_all)

    def clear_all(self, identity: Identity) -> int:
        deleted = self._active().clear(identity.owner_id)
        logger.info("Cleared %d attendance records owner=%s", deleted, identity.owner_id)
        self._notify("live status end", self._live_status.end, identity.owner_id)
        self._notify("timeline reload", self._timeline.reload_all)
        return deleted
