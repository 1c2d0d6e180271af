# backend/app/models/user.py
"""
User model for the Scheduler API.

Users are managed by an upstream identity flow; this service only reads
them to resolve the organization and role that own availability blocks.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class User(Base):
    """
    Account belonging to a single organization.

    Attributes:
        id: Primary key (ULID)
        org_id: Owning organization
        role: Account role (admin, tutor, student)
        firebase_uid: External identity provider subject, when linked
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    org_id = Column(
        String(26), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(String(16), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    phone_number = Column(String(32), nullable=True)
    firebase_uid = Column(String(128), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="users")
    availability_blocks = relationship(
        "AvailabilityBlock",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("role in ('admin', 'student', 'tutor')", name="ck_users_role"),
        Index("idx_users_org_role", "org_id", "role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} ({self.role})>"
