# backend/app/core/enums.py
"""
Core enums for the Scheduler API.

Account roles drive authorization; availability roles tag whose block a
row represents. They share values today but are kept apart so either can
evolve without dragging the other along.
"""

from enum import Enum


class AccountRole(str, Enum):
    """
    Role of an authenticated account within its organization.

    Admins are the elevated role: they may read and write any user's
    availability inside the platform.
    """

    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"


class AvailabilityRole(str, Enum):
    """Whose availability a stored block represents."""

    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"

    @classmethod
    def from_account_role(cls, role: AccountRole | str) -> "AvailabilityRole":
        """Map an account role onto the availability tag stored with blocks."""
        value = role.value if isinstance(role, AccountRole) else str(role)
        return cls(value)
