#!/usr/bin/env python3
"""Simple database initialization script.

Creates all database tables using SQLAlchemy models.
Run this from the project root:
    python init_db_simple.py
"""

import sys

from apps.crm.config import get_settings
from apps.crm.database import Base, create_db_engine

# Import models so they're registered with Base
import apps.crm.models  # noqa: F401


def main() -> int:
    engine = create_db_engine(get_settings())
    print("Initializing Follow-up CRM database...")
    print(f"Database URL: {engine.url.render_as_string(hide_password=True)}")

    try:
        print("\nCreating tables...")
        Base.metadata.create_all(bind=engine)
        print("Database tables created successfully!")

        print("\nCreated tables:")
        for table_name in Base.metadata.tables.keys():
            print(f"  - {table_name}")
    except Exception as e:
        print(f"\nError creating tables: {e}")
        return 1
    finally:
        engine.dispose()

    print("\nYou can now:")
    print("  1. Seed demo data: python -m apps.crm.scripts.seed_demo")
    print("  2. Start the API: uvicorn apps.crm.main:app --reload")
    return 0


if __name__ == "__main__":
    sys.exit(main())
