import json
import pytest
from fintrack.repositories.audit_log_repository import AuditLogRepository
from tests.conftest import headers_for


def expense_payload(category_id, **overrides):
    payload = {
        "date": "2024-01-15",
        "amount": "9000.00",
        "currency": "ARS",
        "category_id": category_id,
        "entity_name": "Supermercado Norte",
        "entity_tax_id": "30-71234567-8",
        "payment_method": "cash",
        "notes": "Weekly shop",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def recorded_expense(client, owner_headers, food_category):
    response = client.post("/api/expenses/", headers=owner_headers, json=expense_payload(food_category.id))
    assert response.status_code == 201
    return response.json()["posting_ids"][0]


class TestRecordExpense:
    """Tests for POST /api/expenses/"""

    def test_record_expense(self, client, owner_headers, food_category):
        response = client.post("/api/expenses/", headers=owner_headers, json=expense_payload(food_category.id))

        assert response.status_code == 201
        data = response.json()
        assert data["count"] == 1
        assert data["audit_failures"] == 0

        expense = client.get(f"/api/expenses/{data['posting_ids'][0]}", headers=owner_headers).json()
        assert expense["amount"] == 9000.0
        assert expense["base_amount"] == 9000.0
        assert expense["entity_tax_id"] == "30712345678"
        assert expense["entity_id"] is not None
        assert expense["installments"] is None

    def test_record_in_installments(self, client, owner_headers, food_category):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(
                food_category.id, installments=3, payment_method="credit_card", card_type="visa"
            ),
        )

        assert response.status_code == 201
        assert response.json()["count"] == 3

        listing = client.get("/api/expenses/", headers=owner_headers).json()
        assert listing["total"] == 3
        # Newest first
        assert [e["date"] for e in listing["expenses"]] == ["2024-03-15", "2024-02-15", "2024-01-15"]
        assert all(e["amount"] == 3000.0 for e in listing["expenses"])
        assert listing["expenses"][0]["notes"] == "Weekly shop (Cuota 3/3)"

    def test_installments_without_credit_card_rejected(self, client, owner_headers, food_category):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(food_category.id, installments=3),
        )

        assert response.status_code == 400
        assert "credit card" in response.json()["detail"].lower()

    def test_foreign_currency_uses_provider(self, client, owner_headers, food_category, rate_provider):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(food_category.id, amount="100", currency="USD"),
        )

        posting_id = response.json()["posting_ids"][0]
        expense = client.get(f"/api/expenses/{posting_id}", headers=owner_headers).json()
        assert expense["base_amount"] == 100000.0
        assert rate_provider.calls == [("USD", "ARS")]

    def test_rate_unavailable_returns_502(self, client, owner_headers, food_category):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(food_category.id, currency="JPY"),
        )

        assert response.status_code == 502
        assert client.get("/api/expenses/", headers=owner_headers).json()["total"] == 0
        assert client.get("/api/entities/", headers=owner_headers).json() == []

    def test_malformed_tax_id_rejected(self, client, owner_headers, food_category):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(food_category.id, entity_tax_id="12345"),
        )
        assert response.status_code == 400

    def test_non_positive_amount_rejected(self, client, owner_headers, food_category):
        response = client.post(
            "/api/expenses/",
            headers=owner_headers,
            json=expense_payload(food_category.id, amount="0"),
        )
        assert response.status_code == 422

    def test_duplicate_receipt_returns_409(self, client, owner_headers, food_category):
        payload = expense_payload(food_category.id, source="ocr", fingerprint="ticket-0001")

        assert client.post("/api/expenses/", headers=owner_headers, json=payload).status_code == 201
        response = client.post("/api/expenses/", headers=owner_headers, json=payload)

        assert response.status_code == 409
        assert "ticket-0001" in response.json()["detail"]

    def test_member_can_record(self, client, member_headers, food_category):
        response = client.post("/api/expenses/", headers=member_headers, json=expense_payload(food_category.id))
        assert response.status_code == 201


class TestReadExpenses:
    def test_filter_by_date_and_category(self, client, owner_headers, food_category, recorded_expense):
        response = client.get(
            "/api/expenses/",
            headers=owner_headers,
            params={"start_date": "2024-01-01", "end_date": "2024-01-31", "category_id": food_category.id},
        )
        assert response.json()["total"] == 1

        response = client.get("/api/expenses/", headers=owner_headers, params={"start_date": "2024-02-01"})
        assert response.json()["total"] == 0

    def test_other_tenant_cannot_read(self, client, db_session, recorded_expense):
        from fintrack.models.user import User
        from fintrack.services.tenant_provisioner import TenantProvisioner

        outsider = User(auth_user_id="outsider", tenant_ids=[])
        db_session.add(outsider)
        db_session.commit()
        TenantProvisioner(db_session).provision(outsider, "out@example.com", "Out", "demo")
        headers = headers_for("outsider")

        assert client.get(f"/api/expenses/{recorded_expense}", headers=headers).status_code == 404
        assert client.get("/api/expenses/", headers=headers).json()["total"] == 0


class TestUpdateAndDelete:
    def test_recategorize_expense(self, client, db_session, owner_headers, shared_tenant, recorded_expense):
        categories = client.get("/api/categories/", headers=owner_headers).json()
        target = categories[1]

        response = client.patch(
            f"/api/expenses/{recorded_expense}",
            headers=owner_headers,
            json={"category_id": target["id"], "subcategory_id": target["subcategories"][0]["id"], "notes": "moved"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category_id"] == target["id"]
        assert data["notes"] == "moved"

        events = AuditLogRepository(db_session).get_for_entity(shared_tenant.id, "expenses", str(recorded_expense))
        assert [e.action for e in events] == ["create", "update"]

    def test_subcategory_from_other_category_rejected(self, client, owner_headers, recorded_expense):
        categories = client.get("/api/categories/", headers=owner_headers).json()

        response = client.patch(
            f"/api/expenses/{recorded_expense}",
            headers=owner_headers,
            json={"subcategory_id": categories[1]["subcategories"][0]["id"]},
        )
        assert response.status_code == 400

    def test_soft_delete(self, client, db_session, owner_headers, shared_tenant, recorded_expense):
        response = client.delete(f"/api/expenses/{recorded_expense}", headers=owner_headers)
        assert response.status_code == 204

        assert client.get("/api/expenses/", headers=owner_headers).json()["total"] == 0
        listing = client.get("/api/expenses/", headers=owner_headers, params={"include_deleted": True}).json()
        assert listing["total"] == 1
        assert listing["expenses"][0]["deleted"] is True

        events = AuditLogRepository(db_session).get_for_entity(shared_tenant.id, "expenses", str(recorded_expense))
        assert events[-1].action == "soft-delete"
        assert json.loads(events[-1].before)["deleted"] is False
        assert json.loads(events[-1].after)["deleted"] is True

        # Already deleted
        assert client.delete(f"/api/expenses/{recorded_expense}", headers=owner_headers).status_code == 404


class TestIncomes:
    def test_record_and_list_income(self, client, owner_headers):
        response = client.post(
            "/api/incomes/",
            headers=owner_headers,
            json={
                "date": "2024-01-31",
                "amount": "250000",
                "category": "salary",
                "entity_name": "Employer SA",
                "payment_method": "transfer",
            },
        )

        assert response.status_code == 201
        income_id = response.json()["posting_ids"][0]

        listing = client.get("/api/incomes/", headers=owner_headers).json()
        assert listing["total"] == 1
        assert listing["incomes"][0]["category"] == "salary"
        assert listing["incomes"][0]["base_amount"] == 250000.0

        assert client.delete(f"/api/incomes/{income_id}", headers=owner_headers).status_code == 204
        assert client.get("/api/incomes/", headers=owner_headers).json()["total"] == 0
