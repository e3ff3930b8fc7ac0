from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import GUEST_DISPLAY_NAME


@dataclass(frozen=True)
class Identity:
    """Who is acting. Passed explicitly into every service call.

    ``owner_id`` is None when nobody is signed in; records created then are
    guest records of the local store.
    """

    owner_id: Optional[str] = None
    is_anonymous: bool = False
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def is_signed_in(self) -> bool:
        return self.owner_id is not None

    @property
    def display_name(self) -> str:
        for value in (self.name, self.email, self.phone):
            if value:
                return value
        return GUEST_DISPLAY_NAME

    def to_dict(self) -> dict:
        return {
            "owner_id": self.owner_id,
            "is_anonymous": self.is_anonymous,
            "display_name": self.display_name,
            "email": self.email,
            "phone": self.phone,
        }


NO_IDENTITY = Identity()
