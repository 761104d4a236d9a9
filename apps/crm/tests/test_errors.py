"""Tests for database error translation."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from apps.crm.core.errors import (
    DATABASE_UNAVAILABLE,
    DUPLICATE_RECORD,
    EMAIL_IN_USE,
    MISSING_RELATED_RECORD,
    OPERATION_FAILED,
    PHONE_IN_USE,
    ConflictError,
    InternalError,
    NotFoundError,
    UnavailableError,
    ValidationError,
    translate_db_error,
)
from apps.crm.models import Customer, FollowUpRecord, FollowUpType, User


def _integrity_error(db, *rows) -> IntegrityError:
    db.add_all(rows)
    with pytest.raises(IntegrityError) as exc_info:
        db.commit()
    db.rollback()
    return exc_info.value


class TestTranslateDbError:
    """Driver errors become friendly application errors."""

    def test_duplicate_customer_email(self, db, sales_user):
        db.add(Customer(name="A", email="a@example.com", user_id=sales_user.id))
        db.commit()
        error = translate_db_error(
            _integrity_error(db, Customer(name="B", email="a@example.com", user_id=sales_user.id))
        )
        assert isinstance(error, ConflictError)
        assert error.message == EMAIL_IN_USE
        assert error.status_code == 400

    def test_duplicate_customer_phone(self, db, sales_user):
        db.add(Customer(name="A", phone="13800138000", user_id=sales_user.id))
        db.commit()
        error = translate_db_error(
            _integrity_error(db, Customer(name="B", phone="13800138000", user_id=sales_user.id))
        )
        assert error.message == PHONE_IN_USE

    def test_other_unique_violation(self, db, sales_user):
        error = translate_db_error(_integrity_error(db, User(name="X", email=sales_user.email)))
        assert isinstance(error, ConflictError)
        assert error.message == DUPLICATE_RECORD

    def test_missing_foreign_key(self, db, sales_user):
        record = FollowUpRecord(
            content="Call",
            follow_up_type=FollowUpType.PHONE_CALL,
            customer_id="no-such-customer",
            user_id=sales_user.id,
        )
        error = translate_db_error(_integrity_error(db, record))
        assert isinstance(error, NotFoundError)
        assert error.message == MISSING_RELATED_RECORD

    def test_postgres_constraint_name(self):
        """Test PostgreSQL messages are matched by constraint name."""
        orig = Exception(
            'duplicate key value violates unique constraint "uq_customers_email"'
        )
        error = translate_db_error(IntegrityError("INSERT", {}, orig))
        assert error.message == EMAIL_IN_USE

    def test_connection_failure(self):
        orig = Exception("could not connect to server: Connection refused")
        error = translate_db_error(OperationalError("SELECT 1", {}, orig))
        assert isinstance(error, UnavailableError)
        assert error.message == DATABASE_UNAVAILABLE
        assert "Connection refused" not in error.message

    def test_unknown_error_is_generic(self):
        error = translate_db_error(SQLAlchemyError("something odd"))
        assert isinstance(error, InternalError)
        assert error.message == OPERATION_FAILED
        assert error.status_code == 500


def test_validation_error_for_field():
    error = ValidationError.for_field("phone", "bad phone")
    assert error.status_code == 400
    assert error.message == "Request validation failed"
    assert error.details == [{"field": "phone", "message": "bad phone"}]
