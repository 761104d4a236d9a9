"""One-shot demo data bootstrap.

Seeding is idempotent: if any user exists the database counts as already
initialised and nothing is written.
"""

from datetime import datetime, timedelta

import structlog
from sqlalchemy.orm import Session

from apps.crm.database import transaction
from apps.crm.models import Customer, FollowUpRecord, FollowUpType, NextStepPlan, User, UserRole
from apps.crm.schemas import SeedResult

logger = structlog.get_logger()

DEMO_CUSTOMERS = [
    {
        "name": "张总",
        "company_info": "远洋物流集团",
        "email": "zhang@yuanyang.com",
        "phone": "13800138001",
        "address": "上海市浦东新区世纪大道100号",
    },
    {
        "name": "李经理",
        "company_info": "科技创新有限公司",
        "email": "li@techinnov.com",
        "phone": "13900139001",
        "address": "北京市海淀区中关村大街1号",
    },
    {
        "name": "王董",
        "company_info": "智能制造股份",
        "email": "wang@smartmfg.com",
        "phone": "13700137001",
        "address": "深圳市南山区科技园路88号",
    },
]

DEMO_FOLLOW_UPS = [
    (
        FollowUpType.PHONE_CALL,
        "Intro call covering our core product and services. The customer is interested "
        "in the CRM, especially voice input.",
    ),
    (
        FollowUpType.MEETING,
        "Online demo of the full follow-up flow: timeline, attachments and next-step "
        "planning. The customer liked the conversational design.",
    ),
    (
        FollowUpType.VISIT,
        "On-site visit to review their sales process and current pain points. Proposed "
        "a tailored plan for data migration and integration.",
    ),
]


def seed_demo_data(db: Session, default_user_email: str, default_user_name: str) -> SeedResult:
    """
    Create the default user, demo customers and their follow-ups.

    Args:
        db: Database session
        default_user_email: Email of the default sales user
        default_user_name: Name of the default sales user

    Returns:
        What was created, or ``seeded=False`` when data already exists
    """
    existing_users = db.query(User).count()
    if existing_users > 0:
        logger.info("Database already seeded, skipping", user_count=existing_users)
        return SeedResult(seeded=False, user_count=existing_users)

    now = datetime.utcnow()
    follow_up_count = 0

    with transaction(db):
        user = User(name=default_user_name, email=default_user_email, role=UserRole.SALES)
        db.add(user)
        db.flush()

        for index, data in enumerate(DEMO_CUSTOMERS):
            # Stagger timestamps so list ordering is deterministic
            base = now - timedelta(days=len(DEMO_CUSTOMERS) - index)
            customer = Customer(**data, user_id=user.id, created_at=base)
            db.add(customer)
            db.flush()

            for offset, (follow_up_type, content) in enumerate(DEMO_FOLLOW_UPS):
                record = FollowUpRecord(
                    content=content,
                    follow_up_type=follow_up_type,
                    customer_id=customer.id,
                    user_id=user.id,
                    created_at=base + timedelta(hours=offset + 1),
                )
                db.add(record)
                db.flush()
                follow_up_count += 1

                if follow_up_type == FollowUpType.VISIT:
                    db.add(
                        NextStepPlan(
                            due_date=now + timedelta(days=7 + 3 * index),
                            notes=f"Prepare a tailored proposal and quote for {data['company_info']}.",
                            follow_up_record_id=record.id,
                            customer_id=customer.id,
                            user_id=user.id,
                        )
                    )

    logger.info(
        "Seeded demo data",
        customers=len(DEMO_CUSTOMERS),
        follow_ups=follow_up_count,
    )
    return SeedResult(
        seeded=True,
        user_count=1,
        customer_count=len(DEMO_CUSTOMERS),
        follow_up_count=follow_up_count,
    )
