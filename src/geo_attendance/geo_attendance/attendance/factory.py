from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DataSource
from ..core.exceptions import ValidationError
from .repository import AttendanceRepository


@dataclass
class AttendanceRepositoryFactory:
    """Factory Pattern: pick the storage backend selected in preferences."""

    local: AttendanceRepository
    remote: AttendanceRepository

    def for_source(self, source: DataSource | str) -> AttendanceRepository:
        try:
            source = DataSource(source)
        except ValueError:
            raise ValidationError(f"Unknown data source: {source!r}") from None
        if source == DataSource.REMOTE:
            return self.remote
        return self.local
