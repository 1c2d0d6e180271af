# backend/app/models/availability.py
"""
Availability models for the Scheduler API.

Availability is persisted as canonical 15-minute blocks, one row per block.
Human-facing ranges are never stored; they are regrouped from the blocks
on every read.

Classes:
    AvailabilityBlock: One 15-minute unit of a user's availability
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilityBlock(Base):
    """
    A single canonical availability block.

    ``matched`` is owned by the pairing process; writes from the
    availability engine always reset it to False.
    """

    __tablename__ = "availability"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    org_id = Column(
        String(26), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(16), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    matched = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc
    )

    # Relationships
    user = relationship("User", back_populates="availability_blocks")

    # Constraints
    __table_args__ = (
        UniqueConstraint("user_id", "start_time", "end_time", name="uq_availability_user_block"),
        CheckConstraint("end_time > start_time", name="ck_availability_time_order"),
        CheckConstraint("role in ('admin', 'student', 'tutor')", name="ck_availability_role"),
        Index("idx_availability_user_time", "user_id", "start_time", "end_time"),
        Index("idx_availability_org_time", "org_id", "start_time", "end_time"),
        Index("idx_availability_unmatched_time", "start_time", "end_time", "matched"),
    )

    def __repr__(self) -> str:
        return f"<AvailabilityBlock {self.user_id} {self.start_time}-{self.end_time}>"
