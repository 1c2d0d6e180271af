"""Principal abstraction for the authenticated caller of a request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .core.enums import AccountRole


@dataclass(frozen=True)
class CurrentUser:
    """
    Caller resolved by the upstream authentication layer.

    Set on ``request.state.current_user`` before a route runs.
    """

    user_id: str
    org_id: str
    role: AccountRole

    def is_elevated(self, elevated_roles: Iterable[AccountRole]) -> bool:
        return AccountRole(self.role) in set(elevated_roles)

    def can_act_for(self, user_id: str, elevated_roles: Iterable[AccountRole]) -> bool:
        """Self or elevated."""
        return self.user_id == user_id or self.is_elevated(elevated_roles)
