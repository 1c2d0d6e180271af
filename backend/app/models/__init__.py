"""
Database models for the Scheduler API.

- Organization: tenant
- User: account that owns availability
- AvailabilityBlock: canonical 15-minute availability rows
"""

from .availability import AvailabilityBlock
from .organization import Organization
from .user import User

__all__ = ["AvailabilityBlock", "Organization", "User"]
