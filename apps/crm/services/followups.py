"""Follow-up record workflow.

Creating a follow-up touches three tables (record, attachments, next-step
plan). All of it happens in one transaction: either the complete follow-up is
stored or nothing is.
"""

from typing import Optional

import structlog
from sqlalchemy.orm import Session, joinedload, selectinload

from apps.crm.core.errors import NotFoundError
from apps.crm.database import transaction
from apps.crm.models import Attachment, Customer, FollowUpRecord, NextStepPlan, PlanStatus
from apps.crm.schemas import (
    AttachmentIn,
    AttachmentOut,
    FollowUpCreate,
    FollowUpResponse,
    NextStepIn,
    NextStepOut,
    UserSummary,
    to_iso,
)
from apps.crm.services.customers import CUSTOMER_NOT_FOUND
from apps.crm.services.users import ActorResolver

logger = structlog.get_logger()


def serialize_follow_up(record: FollowUpRecord) -> FollowUpResponse:
    """Convert a loaded record (with user, attachments and plans) to its response."""
    attachments = sorted(record.attachments, key=lambda a: (a.created_at, a.id))
    plans = sorted(record.next_step_plans, key=lambda p: (p.due_date, p.id))
    return FollowUpResponse(
        id=record.id,
        content=record.content,
        follow_up_type=record.follow_up_type,
        created_at=to_iso(record.created_at),
        updated_at=to_iso(record.updated_at),
        customer_id=record.customer_id,
        user_id=record.user_id,
        user=UserSummary(id=record.user.id, name=record.user.name, email=record.user.email),
        attachments=[
            AttachmentOut(
                id=a.id,
                file_name=a.file_name,
                file_url=a.file_url,
                file_type=a.file_type,
                file_size=a.file_size,
                created_at=to_iso(a.created_at),
            )
            for a in attachments
        ],
        next_step_plans=[
            NextStepOut(
                id=p.id,
                due_date=to_iso(p.due_date),
                notes=p.notes,
                status=p.status,
                created_at=to_iso(p.created_at),
            )
            for p in plans
        ],
    )


class FollowUpService:
    """Create and list follow-up records for a customer."""

    def __init__(self, db: Session):
        self.db = db

    def _require_customer(self, customer_id: str) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if customer is None:
            raise NotFoundError(CUSTOMER_NOT_FOUND)
        return customer

    def _load_records(self, customer_id: str, record_id: Optional[str] = None) -> list[FollowUpRecord]:
        query = (
            self.db.query(FollowUpRecord)
            .options(
                joinedload(FollowUpRecord.user),
                selectinload(FollowUpRecord.attachments),
                selectinload(FollowUpRecord.next_step_plans),
            )
            .filter(FollowUpRecord.customer_id == customer_id)
        )
        if record_id is not None:
            query = query.filter(FollowUpRecord.id == record_id).populate_existing()
        return query.order_by(FollowUpRecord.created_at.desc(), FollowUpRecord.id.desc()).all()

    def _add_record(self, customer_id: str, user_id: str, payload: FollowUpCreate) -> FollowUpRecord:
        record = FollowUpRecord(
            content=payload.content,
            follow_up_type=payload.follow_up_type,
            customer_id=customer_id,
            user_id=user_id,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def _add_attachments(self, record: FollowUpRecord, attachments: list[AttachmentIn]) -> None:
        self.db.add_all(
            [
                Attachment(
                    file_name=attachment.file_name,
                    file_url=str(attachment.file_url),
                    file_type=attachment.file_type,
                    file_size=attachment.file_size,
                    follow_up_record_id=record.id,
                )
                for attachment in attachments
            ]
        )
        self.db.flush()

    def _add_next_step(self, record: FollowUpRecord, user_id: str, next_step: NextStepIn) -> None:
        self.db.add(
            NextStepPlan(
                due_date=next_step.due_date,
                notes=next_step.notes,
                status=PlanStatus.PENDING,
                follow_up_record_id=record.id,
                customer_id=record.customer_id,
                user_id=user_id,
            )
        )
        self.db.flush()

    def create_follow_up(
        self, customer_id: str, payload: FollowUpCreate, actor: ActorResolver
    ) -> FollowUpResponse:
        """
        Create a follow-up record with optional attachments and next step.

        Args:
            customer_id: Customer the interaction was with
            payload: Validated request body
            actor: Resolves the user the record is attributed to

        Returns:
            The stored record with its user, attachments and plans

        Raises:
            NotFoundError: If the customer does not exist
            UnavailableError: If no acting user can be resolved
        """
        with transaction(self.db):
            self._require_customer(customer_id)
            user_id = actor.resolve(self.db)

            record = self._add_record(customer_id, user_id, payload)
            if payload.attachments:
                self._add_attachments(record, payload.attachments)
            if payload.next_step:
                self._add_next_step(record, user_id, payload.next_step)

            result = serialize_follow_up(self._load_records(customer_id, record_id=record.id)[0])

        logger.info(
            "Created follow-up record",
            record_id=result.id,
            customer_id=customer_id,
            attachments=len(result.attachments),
            next_steps=len(result.next_step_plans),
        )
        return result

    def list_follow_ups(self, customer_id: str) -> list[FollowUpResponse]:
        """All records of a customer, newest first."""
        self._require_customer(customer_id)
        return [serialize_follow_up(record) for record in self._load_records(customer_id)]
