# backend/app/models/organization.py
"""Organization (tenant) model."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Organization(Base):
    """Tenant that owns users and, through them, availability."""

    __tablename__ = "organizations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="organization", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Organization {self.name}>"
