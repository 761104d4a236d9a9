"""Initial schema: users, customers, follow-ups, attachments, next-step plans

Revision ID: 001_initial
Revises:
Create Date: 2025-10-25

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("SALES", "MANAGER", "ADMIN", name="user_role")
follow_up_type = sa.Enum("PHONE_CALL", "MEETING", "VISIT", "BUSINESS_DINNER", name="follow_up_type")
plan_status = sa.Enum("PENDING", "DONE", name="plan_status")


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Create customers table
    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("company_info", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_customers_email"),
        sa.UniqueConstraint("phone", name="uq_customers_phone"),
    )
    op.create_index(op.f("ix_customers_created_at"), "customers", ["created_at"], unique=False)
    op.create_index(op.f("ix_customers_user_id"), "customers", ["user_id"], unique=False)

    # Create follow_up_records table
    op.create_table(
        "follow_up_records",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("follow_up_type", follow_up_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("customer_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_follow_up_records_created_at"), "follow_up_records", ["created_at"], unique=False
    )
    op.create_index(
        op.f("ix_follow_up_records_customer_id"), "follow_up_records", ["customer_id"], unique=False
    )

    # Create attachments table
    op.create_table(
        "attachments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(length=50), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("follow_up_record_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(
            ["follow_up_record_id"], ["follow_up_records.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_attachments_follow_up_record_id"),
        "attachments",
        ["follow_up_record_id"],
        unique=False,
    )

    # Create next_step_plans table
    op.create_table(
        "next_step_plans",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", plan_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("follow_up_record_id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(
            ["follow_up_record_id"], ["follow_up_records.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_next_step_plans_due_date"), "next_step_plans", ["due_date"], unique=False)
    op.create_index(
        op.f("ix_next_step_plans_follow_up_record_id"),
        "next_step_plans",
        ["follow_up_record_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_next_step_plans_customer_id"), "next_step_plans", ["customer_id"], unique=False
    )


def downgrade() -> None:
    op.drop_table("next_step_plans")
    op.drop_table("attachments")
    op.drop_table("follow_up_records")
    op.drop_table("customers")
    op.drop_table("users")

    plan_status.drop(op.get_bind(), checkfirst=True)
    follow_up_type.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
