from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import time
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

CHECK_IN_REMINDER = "checkInReminder"
CHECK_OUT_REMINDER = "checkOutReminder"
INCOMPLETE_SESSION_REMINDER = "incompleteSession"


@dataclass(frozen=True)
class Reminder:
    identifier: str
    at: time
    body: str

    def to_dict(self) -> dict:
        return {"id": self.identifier, "at": self.at.strftime("%H:%M"), "body": self.body}


# Work day 09:00-18:00: remind 15 min after start, 15 min before end, 1 h after end.
STANDARD_REMINDERS = (
    Reminder(CHECK_IN_REMINDER, time(9, 15), "Please check in to work"),
    Reminder(CHECK_OUT_REMINDER, time(17, 45), "Please check out from work"),
    Reminder(INCOMPLETE_SESSION_REMINDER, time(19, 0), "Today's work session is not completed"),
)


class ReminderScheduler(Protocol):
    def cancel(self, owner: Optional[str], identifier: str) -> None:
        raise NotImplementedError


class InMemoryReminderScheduler(ReminderScheduler):
    """Pending daily reminders per owner; delivery happens on the device."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Dict[str, Dict[str, Reminder]] = {}

    def schedule_all(self, owner: Optional[str]) -> List[Reminder]:
        with self._lock:
            self._pending[owner or ""] = {r.identifier: r for r in STANDARD_REMINDERS}
        return list(STANDARD_REMINDERS)

    def cancel(self, owner: Optional[str], identifier: str) -> None:
        with self._lock:
            removed = self._pending.get(owner or "", {}).pop(identifier, None)
        if removed:
            logger.info("Reminder %s cancelled owner=%s", identifier, owner)

    def cancel_all(self, owner: Optional[str]) -> None:
        with self._lock:
            self._pending.pop(owner or "", None)

    def pending(self, owner: Optional[str]) -> List[Reminder]:
        with self._lock:
            return sorted(self._pending.get(owner or "", {}).values(), key=lambda r: r.at)
