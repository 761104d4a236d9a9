"""Customer management service."""

from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from apps.crm.core.errors import (
    EMAIL_IN_USE,
    PHONE_IN_USE,
    ConflictError,
    NotFoundError,
    translate_db_error,
)
from apps.crm.models import Customer, FollowUpRecord, NextStepPlan
from apps.crm.schemas import (
    CustomerCounts,
    CustomerCreate,
    CustomerDetail,
    CustomerListItem,
    CustomerRef,
    CustomerResponse,
    CustomerUpdate,
    LatestFollowUp,
    UserSummary,
    to_iso,
)
from apps.crm.services.users import ActorResolver
from packages.shared.ordering import RecencyKey, sort_by_recent_activity

logger = structlog.get_logger()

CUSTOMER_NOT_FOUND = "Customer does not exist"
NO_CUSTOMERS = "No customers yet"


def _user_summary(customer: Customer) -> Optional[UserSummary]:
    if customer.user is None:
        return None
    return UserSummary(id=customer.user.id, name=customer.user.name, email=customer.user.email)


def _customer_fields(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "company_info": customer.company_info,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "created_at": to_iso(customer.created_at),
        "updated_at": to_iso(customer.updated_at),
        "user": _user_summary(customer),
    }


class CustomerService:
    """CRUD and aggregate reads over customers."""

    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, customer_id: str) -> Customer:
        """
        Load a customer with its owner.

        Raises:
            NotFoundError: If no customer has this id
        """
        customer = (
            self.db.query(Customer)
            .options(joinedload(Customer.user))
            .filter(Customer.id == customer_id)
            .first()
        )
        if customer is None:
            raise NotFoundError(CUSTOMER_NOT_FOUND)
        return customer

    def _ensure_unique(
        self, email: Optional[str], phone: Optional[str], exclude_id: Optional[str] = None
    ) -> None:
        """Reject email/phone values already used by another customer."""
        for column, value, message in (
            (Customer.email, email, EMAIL_IN_USE),
            (Customer.phone, phone, PHONE_IN_USE),
        ):
            if not value:
                continue
            query = self.db.query(Customer.id).filter(column == value)
            if exclude_id:
                query = query.filter(Customer.id != exclude_id)
            if query.first() is not None:
                raise ConflictError(message)

    def _commit(self) -> None:
        """Commit, turning unique-constraint races into the same conflict errors as the pre-check."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Customer write rejected by database", error=str(e.orig))
            raise translate_db_error(e) from e

    def create_customer(self, payload: CustomerCreate, actor: ActorResolver) -> CustomerResponse:
        """
        Create a customer owned by the acting user.

        Args:
            payload: Validated customer fields
            actor: Resolves the owning user

        Returns:
            The created customer with its owner
        """
        user_id = actor.resolve(self.db)
        email = str(payload.email) if payload.email else None
        self._ensure_unique(email, payload.phone)

        customer = Customer(
            name=payload.name,
            company_info=payload.company_info,
            email=email,
            phone=payload.phone,
            address=payload.address,
            user_id=user_id,
        )
        self.db.add(customer)
        self._commit()

        logger.info("Created customer", customer_id=customer.id, user_id=user_id)
        return CustomerResponse(**_customer_fields(self.get_customer(customer.id)))

    def update_customer(self, customer_id: str, payload: CustomerUpdate) -> CustomerResponse:
        """
        Update the fields present in the payload.

        Fields absent from the request body are left untouched; optional
        fields sent as blank strings are cleared.
        """
        customer = self.get_customer(customer_id)
        changes = payload.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            changes.pop("name")
        if changes.get("email"):
            changes["email"] = str(changes["email"])

        self._ensure_unique(changes.get("email"), changes.get("phone"), exclude_id=customer.id)

        for field, value in changes.items():
            setattr(customer, field, value)
        self._commit()

        logger.info("Updated customer", customer_id=customer.id, fields=sorted(changes))
        return CustomerResponse(**_customer_fields(customer))

    def delete_customer(self, customer_id: str) -> str:
        """Delete a customer; follow-ups, attachments and plans go with it."""
        customer = self.get_customer(customer_id)
        self.db.delete(customer)
        self.db.commit()
        logger.info("Deleted customer", customer_id=customer_id)
        return customer_id

    def _counts(self, customer_ids: Optional[list[str]] = None) -> dict[str, CustomerCounts]:
        """Follow-up and plan counts keyed by customer id."""
        follow_up_query = self.db.query(
            FollowUpRecord.customer_id, func.count(FollowUpRecord.id)
        ).group_by(FollowUpRecord.customer_id)
        plan_query = self.db.query(
            NextStepPlan.customer_id, func.count(NextStepPlan.id)
        ).group_by(NextStepPlan.customer_id)
        if customer_ids is not None:
            follow_up_query = follow_up_query.filter(FollowUpRecord.customer_id.in_(customer_ids))
            plan_query = plan_query.filter(NextStepPlan.customer_id.in_(customer_ids))

        counts: dict[str, CustomerCounts] = {}
        for customer_id, count in follow_up_query.all():
            counts.setdefault(customer_id, CustomerCounts()).follow_up_records = count
        for customer_id, count in plan_query.all():
            counts.setdefault(customer_id, CustomerCounts()).next_step_plans = count
        return counts

    def get_customer_detail(self, customer_id: str) -> CustomerDetail:
        """Customer fields, owner and related record counts."""
        customer = self.get_customer(customer_id)
        counts = self._counts([customer.id]).get(customer.id, CustomerCounts())
        return CustomerDetail(**_customer_fields(customer), count=counts)

    def _latest_follow_ups(self) -> dict[str, FollowUpRecord]:
        """Newest follow-up record per customer."""
        ranked = (
            self.db.query(
                FollowUpRecord.id.label("id"),
                func.row_number()
                .over(
                    partition_by=FollowUpRecord.customer_id,
                    order_by=(FollowUpRecord.created_at.desc(), FollowUpRecord.id.desc()),
                )
                .label("rank"),
            )
            .subquery()
        )
        records = (
            self.db.query(FollowUpRecord)
            .join(ranked, ranked.c.id == FollowUpRecord.id)
            .filter(ranked.c.rank == 1)
            .all()
        )
        return {record.customer_id: record for record in records}

    def list_customers(self) -> list[CustomerListItem]:
        """
        All customers with owner, counts and newest follow-up.

        Ordered by latest follow-up time, customers never followed up last
        (newest customer first among those).
        """
        customers = self.db.query(Customer).options(joinedload(Customer.user)).all()
        counts = self._counts()
        latest = self._latest_follow_ups()

        ordered = sort_by_recent_activity(
            customers,
            key=lambda c: RecencyKey(
                created_at=c.created_at,
                latest_follow_up_at=latest[c.id].created_at if c.id in latest else None,
            ),
        )

        items = []
        for customer in ordered:
            record = latest.get(customer.id)
            items.append(
                CustomerListItem(
                    **_customer_fields(customer),
                    count=counts.get(customer.id, CustomerCounts()),
                    latest_follow_up_record=LatestFollowUp(
                        id=record.id,
                        created_at=to_iso(record.created_at),
                        content=record.content,
                        follow_up_type=record.follow_up_type,
                    )
                    if record
                    else None,
                )
            )

        logger.info("Listed customers", count=len(items))
        return items

    def get_first_customer(self) -> CustomerRef:
        """The earliest created customer, used as a redirect fallback."""
        customer = (
            self.db.query(Customer.id, Customer.name)
            .order_by(Customer.created_at.asc(), Customer.id.asc())
            .first()
        )
        if customer is None:
            raise NotFoundError(NO_CUSTOMERS)
        return CustomerRef(id=customer.id, name=customer.name)
