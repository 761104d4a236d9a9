"""Next-step plan model - reminders scheduled from a follow-up."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from apps.crm.database import Base


class PlanStatus(str, enum.Enum):
    """Completion status of a plan."""

    PENDING = "PENDING"
    DONE = "DONE"


class NextStepPlan(Base):
    """A scheduled reminder tied to the follow-up that created it."""

    __tablename__ = "next_step_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    due_date = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    status = Column(Enum(PlanStatus, name="plan_status"), nullable=False, default=PlanStatus.PENDING)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    follow_up_record_id = Column(
        String(36),
        ForeignKey("follow_up_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = Column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    follow_up_record = relationship("FollowUpRecord", back_populates="next_step_plans")
    customer = relationship("Customer", back_populates="next_step_plans")
    user = relationship("User", back_populates="next_step_plans")

    def __repr__(self) -> str:
        return f"<NextStepPlan(id={self.id}, due_date={self.due_date}, status={self.status})>"
