"""Customer model - stores customer/contact information."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from apps.crm.database import Base


class Customer(Base):
    """A customer the sales team follows up with."""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("email", name="uq_customers_email"),
        UniqueConstraint("phone", name="uq_customers_phone"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(100), nullable=False)
    company_info = Column(String(200), nullable=True)
    email = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Owner; nullable so customers survive removal of their user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    user = relationship("User", back_populates="customers")
    follow_up_records = relationship(
        "FollowUpRecord",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
    )
    next_step_plans = relationship(
        "NextStepPlan",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name})>"
