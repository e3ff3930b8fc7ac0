from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class LiveStatusBroadcaster(Protocol):
    """"Currently checked in" signal for out-of-process surfaces."""

    def start(self, owner: Optional[str], check_in_time: datetime) -> None:
        raise NotImplementedError

    def end(self, owner: Optional[str]) -> None:
        raise NotImplementedError


class TimelineRefresher(Protocol):
    def reload_all(self) -> None:
        raise NotImplementedError


class InMemoryLiveStatusBoard(LiveStatusBroadcaster):
    """Live status per owner, polled through the widget endpoint."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active: Dict[str, datetime] = {}

    def start(self, owner: Optional[str], check_in_time: datetime) -> None:
        with self._lock:
            self._active[owner or ""] = check_in_time
        logger.info("Live status started owner=%s at %s", owner, check_in_time.isoformat())

    def end(self, owner: Optional[str]) -> None:
        with self._lock:
            self._active.pop(owner or "", None)
        logger.info("Live status ended owner=%s", owner)

    def current(self, owner: Optional[str]) -> Optional[datetime]:
        with self._lock:
            return self._active.get(owner or "")


@dataclass
class WidgetTimelineBoard(TimelineRefresher):
    """Widgets compare ``generation`` to know when to re-fetch."""

    generation: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def reload_all(self) -> None:
        with self._lock:
            self.generation += 1
            generation = self.generation
        logger.debug("Widget timelines reloaded (generation=%d)", generation)
