"""Follow-up record model - a logged interaction with a customer."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from apps.crm.database import Base


class FollowUpType(str, enum.Enum):
    """Kind of interaction."""

    PHONE_CALL = "PHONE_CALL"
    MEETING = "MEETING"
    VISIT = "VISIT"
    BUSINESS_DINNER = "BUSINESS_DINNER"


class FollowUpRecord(Base):
    """A call, meeting, visit or business dinner logged against a customer."""

    __tablename__ = "follow_up_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    content = Column(Text, nullable=False)
    follow_up_type = Column(Enum(FollowUpType, name="follow_up_type"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer_id = Column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="follow_up_records")
    user = relationship("User", back_populates="follow_up_records")
    attachments = relationship(
        "Attachment",
        back_populates="follow_up_record",
        cascade="all",
        passive_deletes=True,
        order_by="Attachment.created_at",
    )
    next_step_plans = relationship(
        "NextStepPlan",
        back_populates="follow_up_record",
        cascade="all",
        passive_deletes=True,
        order_by="NextStepPlan.due_date",
    )

    def __repr__(self) -> str:
        return f"<FollowUpRecord(id={self.id}, type={self.follow_up_type}, content={self.content[:50]}...)>"
