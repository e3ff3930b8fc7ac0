from __future__ import annotations

from typing import Dict, Optional, Protocol


class PreferencesRepository(Protocol):
    """Simple string key-value settings, stored apart from attendance records."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def get_all(self) -> Dict[str, str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
