"""User model - the sales staff who own customers and log follow-ups."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.orm import relationship

from apps.crm.database import Base


class UserRole(str, enum.Enum):
    """Role of a user within the sales team."""

    SALES = "SALES"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class User(Base):
    """A member of the sales team."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.SALES)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customers = relationship("Customer", back_populates="user", passive_deletes=True)
    follow_up_records = relationship("FollowUpRecord", back_populates="user", passive_deletes=True)
    next_step_plans = relationship("NextStepPlan", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
