"""Database models."""

from apps.crm.models.attachment import Attachment
from apps.crm.models.customer import Customer
from apps.crm.models.follow_up import FollowUpRecord, FollowUpType
from apps.crm.models.next_step import NextStepPlan, PlanStatus
from apps.crm.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Customer",
    "FollowUpRecord",
    "FollowUpType",
    "Attachment",
    "NextStepPlan",
    "PlanStatus",
]
