from __future__ import annotations

from ..core.constants import GUEST_RECORD_LIMIT


def is_check_in_allowed(is_anonymous: bool, current_count: int) -> bool:
    """Anonymous users may keep at most ``GUEST_RECORD_LIMIT`` records."""
    return not is_anonymous or current_count < GUEST_RECORD_LIMIT
