"""Seed database with demo data.

Run from the project root:
    python -m apps.crm.scripts.seed_demo
"""

import logging

from apps.crm.config import get_settings
from apps.crm.database import create_db_engine, create_session_factory, get_db_context
from apps.crm.models import Customer, FollowUpRecord, NextStepPlan
from apps.crm.services.seed import seed_demo_data

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Seed demo customers, follow-ups and plans if the database is empty."""
    settings = get_settings()
    engine = create_db_engine(settings)
    session_factory = create_session_factory(engine)

    logger.info("Seeding demo data into %s", engine.url.render_as_string(hide_password=True))

    with get_db_context(session_factory) as db:
        result = seed_demo_data(db, settings.default_user_email, settings.default_user_name)

    if not result.seeded:
        logger.info("Users already exist (%d found), nothing to do", result.user_count)

    # Final summary
    with get_db_context(session_factory) as db:
        total_customers = db.query(Customer).count()
        total_follow_ups = db.query(FollowUpRecord).count()
        total_plans = db.query(NextStepPlan).count()

    logger.info("Demo data seed completed")
    logger.info("Total customers: %d", total_customers)
    logger.info("Total follow-up records: %d", total_follow_ups)
    logger.info("Total next-step plans: %d", total_plans)

    engine.dispose()


if __name__ == "__main__":
    main()
