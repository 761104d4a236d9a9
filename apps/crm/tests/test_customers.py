"""Tests for customer endpoints and the customer service."""

from datetime import datetime, timedelta

import pytest

from apps.crm.core.errors import EMAIL_IN_USE, PHONE_IN_USE, ConflictError
from apps.crm.models import (
    Attachment,
    Customer,
    FollowUpRecord,
    FollowUpType,
    NextStepPlan,
    User,
)
from apps.crm.schemas import CustomerCreate
from apps.crm.services.customers import CustomerService
from apps.crm.services.users import FixedUserResolver


def _create(client, **fields):
    return client.post("/customers", json=fields)


class TestCreateCustomer:
    """Customer creation."""

    def test_create_and_fetch_matches(self, client):
        """Test a created customer is immediately retrievable with the same fields."""
        payload = {
            "name": "张总",
            "companyInfo": "远洋物流集团",
            "email": "zhang@yuanyang.com",
            "phone": "13800138000",
            "address": "上海市浦东新区世纪大道100号",
        }
        response = _create(client, **payload)
        assert response.status_code == 201
        created = response.json()["data"]

        detail = client.get(f"/customers/{created['id']}").json()["data"]
        for key, value in payload.items():
            assert created[key] == value
            assert detail[key] == value
        assert detail["createdAt"] == created["createdAt"]
        assert detail["_count"] == {"followUpRecords": 0, "nextStepPlans": 0}

    def test_creates_default_user_once(self, client, db):
        """Test the default user is created on first use and reused afterwards."""
        first = _create(client, name="A").json()["data"]
        second = _create(client, name="B").json()["data"]

        assert first["user"]["email"] == "wanglei@company.com"
        assert first["user"]["id"] == second["user"]["id"]
        assert db.query(User).count() == 1

    def test_blank_optional_fields_are_stored_as_null(self, client):
        """Test blank optional strings are treated as absent."""
        response = _create(client, name="C", email="", phone="", companyInfo="  ")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] is None
        assert data["phone"] is None
        assert data["companyInfo"] is None

    def test_invalid_fields_report_each_problem(self, client):
        """Test per-field validation messages."""
        response = _create(client, name="D", email="not-an-email", phone="12345")
        assert response.status_code == 400
        fields = {d["field"]: d["message"] for d in response.json()["details"]}
        assert "email" in fields
        assert fields["phone"] == "Please enter a valid mobile phone number"

    def test_duplicate_email_conflicts(self, client):
        """Test two customers with the same email yield one success and one conflict."""
        first = _create(client, name="E1", email="dup@example.com")
        second = _create(client, name="E2", email="dup@example.com")

        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json() == {"success": False, "error": EMAIL_IN_USE}

    def test_duplicate_phone_conflicts(self, client):
        """Test duplicate phone numbers are rejected."""
        assert _create(client, name="P1", phone="13900139000").status_code == 201
        response = _create(client, name="P2", phone="13900139000")
        assert response.status_code == 400
        assert response.json()["error"] == PHONE_IN_USE


class TestCustomerDetail:
    """Customer detail and first-customer lookups."""

    def test_missing_customer_is_404(self, client):
        """Test not-found is distinct from server errors."""
        response = client.get("/customers/missing-id")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Customer does not exist"}

    def test_first_customer(self, client, db, sales_user):
        """Test the earliest created customer is returned."""
        now = datetime.utcnow()
        db.add_all(
            [
                Customer(name="Newer", created_at=now, user_id=sales_user.id),
                Customer(name="Oldest", created_at=now - timedelta(days=3), user_id=sales_user.id),
            ]
        )
        db.commit()

        response = client.get("/customers/first")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Oldest"

    def test_first_customer_none(self, client):
        """Test 404 when there are no customers."""
        response = client.get("/customers/first")
        assert response.status_code == 404


class TestUpdateCustomer:
    """Customer updates."""

    def test_partial_update(self, client):
        """Test only supplied fields change."""
        created = _create(client, name="Old", email="old@example.com").json()["data"]

        response = client.put(f"/customers/{created['id']}", json={"name": "New"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "New"
        assert data["email"] == "old@example.com"

    def test_update_keeps_own_email(self, client):
        """Test re-sending a customer's own email is not a conflict."""
        created = _create(client, name="Same", email="same@example.com").json()["data"]
        response = client.put(
            f"/customers/{created['id']}", json={"email": "same@example.com"}
        )
        assert response.status_code == 200

    def test_update_conflicts_with_other_customer(self, client):
        """Test email already used by another customer is rejected."""
        _create(client, name="Taken", email="taken@example.com")
        other = _create(client, name="Other").json()["data"]

        response = client.put(f"/customers/{other['id']}", json={"email": "taken@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == EMAIL_IN_USE

    def test_update_missing_customer(self, client):
        """Test 404 for unknown customer."""
        response = client.put("/customers/nope", json={"name": "X"})
        assert response.status_code == 404


class TestDeleteCustomer:
    """Customer deletion."""

    def test_delete_cascades(self, client, db, sales_user):
        """Test deleting a customer removes follow-ups, attachments and plans."""
        customer = Customer(name="Gone", user_id=sales_user.id)
        db.add(customer)
        db.flush()
        for _ in range(2):
            record = FollowUpRecord(
                content="Visited",
                follow_up_type=FollowUpType.VISIT,
                customer_id=customer.id,
                user_id=sales_user.id,
            )
            db.add(record)
            db.flush()
            db.add(
                Attachment(
                    file_name="a.pdf",
                    file_url="http://testserver/files/a.pdf",
                    file_type="pdf",
                    follow_up_record_id=record.id,
                )
            )
            db.add(
                NextStepPlan(
                    due_date=datetime.utcnow() + timedelta(days=1),
                    follow_up_record_id=record.id,
                    customer_id=customer.id,
                    user_id=sales_user.id,
                )
            )
        db.commit()
        customer_id = customer.id
        assert db.query(FollowUpRecord).count() == 2

        response = client.delete(f"/customers/{customer_id}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == customer_id

        assert db.query(FollowUpRecord).count() == 0
        assert db.query(Attachment).count() == 0
        assert db.query(NextStepPlan).count() == 0
        assert client.get(f"/customers/{customer_id}").status_code == 404

    def test_delete_missing_customer(self, client):
        """Test 404 for unknown customer."""
        assert client.delete("/customers/nope").status_code == 404


class TestCustomerList:
    """Customer list aggregation."""

    def test_two_tier_ordering(self, client, db, sales_user):
        """Test followed-up customers sort by latest follow-up, the rest by creation time."""
        base = datetime(2025, 1, 1)
        a = Customer(name="A", created_at=base, user_id=sales_user.id)
        b = Customer(name="B", created_at=base, user_id=sales_user.id)
        c = Customer(name="C", created_at=base + timedelta(seconds=5), user_id=sales_user.id)
        d = Customer(name="D", created_at=base + timedelta(seconds=1), user_id=sales_user.id)
        db.add_all([a, b, c, d])
        db.flush()
        db.add_all(
            [
                FollowUpRecord(
                    content="A call",
                    follow_up_type=FollowUpType.PHONE_CALL,
                    customer_id=a.id,
                    user_id=sales_user.id,
                    created_at=base + timedelta(seconds=10),
                ),
                FollowUpRecord(
                    content="B old",
                    follow_up_type=FollowUpType.MEETING,
                    customer_id=b.id,
                    user_id=sales_user.id,
                    created_at=base + timedelta(seconds=2),
                ),
                FollowUpRecord(
                    content="B latest",
                    follow_up_type=FollowUpType.VISIT,
                    customer_id=b.id,
                    user_id=sales_user.id,
                    created_at=base + timedelta(seconds=20),
                ),
            ]
        )
        db.commit()

        data = client.get("/customers").json()["data"]
        assert [item["name"] for item in data] == ["B", "A", "C", "D"]

        b_item = data[0]
        assert b_item["_count"]["followUpRecords"] == 2
        assert b_item["latestFollowUpRecord"]["content"] == "B latest"
        assert b_item["latestFollowUpRecord"]["followUpType"] == "VISIT"
        assert b_item["user"]["email"] == sales_user.email
        assert data[2]["latestFollowUpRecord"] is None
        assert data[2]["_count"] == {"followUpRecords": 0, "nextStepPlans": 0}


class TestConcurrentCreate:
    """Uniqueness enforced by the database when the pre-check is raced."""

    def test_constraint_violation_reports_email_in_use(self, db, sales_user, monkeypatch):
        """Test the losing insert gets the same message as the pre-check."""
        db.add(Customer(name="Winner", email="race@example.com", user_id=sales_user.id))
        db.commit()
        monkeypatch.setattr(CustomerService, "_ensure_unique", lambda self, *args, **kwargs: None)

        with pytest.raises(ConflictError) as exc_info:
            CustomerService(db).create_customer(
                CustomerCreate(name="Loser", email="race@example.com"),
                FixedUserResolver(sales_user.id),
            )

        assert exc_info.value.message == EMAIL_IN_USE
        assert db.query(Customer).count() == 1

    def test_constraint_violation_over_http(self, client, db, sales_user, monkeypatch):
        """Test the API returns 400 with the phone message when the commit fails."""
        db.add(Customer(name="Winner", phone="13700137000", user_id=sales_user.id))
        db.commit()
        monkeypatch.setattr(CustomerService, "_ensure_unique", lambda self, *args, **kwargs: None)

        response = client.post("/customers", json={"name": "Loser", "phone": "13700137000"})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": PHONE_IN_USE}
