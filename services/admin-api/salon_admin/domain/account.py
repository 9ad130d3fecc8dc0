from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(str, Enum):
    admin = "admin"
    employee = "employee"


@dataclass(slots=True)
class Account:
    """Platform identity: credential holder and ban state."""

    account_id: str
    email: str
    banned_until: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    def is_banned(self, now: datetime | None = None) -> bool:
        """Return ``True`` while the ban expiry lies in the future."""
        if self.banned_until is None:
            return False
        return self.banned_until > (now or datetime.now(timezone.utc))


@dataclass(slots=True)
class Profile:
    """Staff member row in the ``profiles`` table, keyed by the account id."""

    id: str
    email: str
    full_name: str
    role: str
    color: str
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value
