"""
Integration tests for the fintrack API.

Tests complete workflows across multiple endpoints and the full stack
(routes → services → repositories → database).
"""

from tests.conftest import headers_for


class TestHouseholdWorkflow:
    """Sign up, share the tenant, record spending and follow the budget"""

    def test_family_budget_month_over_month(self, client):
        # Step 1: New user signs up for the family plan
        signup_headers = headers_for("house-owner")
        response = client.post(
            "/api/tenants",
            headers=signup_headers,
            json={"plan_id": "familiar", "email": "house@example.com", "display_name": "House"},
        )
        assert response.status_code == 201
        assert response.json()["status"] == "active"
        tenant_id = response.json()["tenant_id"]
        owner = headers_for("house-owner", tenant_id)

        # Step 2: Seeded categories are ready
        categories = client.get("/api/categories/", headers=owner).json()
        food = categories[0]

        # Step 3: Invite a partner, who joins on first access
        invite = client.post(
            "/api/tenants/me/members",
            headers=owner,
            json={"auth_user_id": "partner", "email": "partner@example.com", "display_name": "Partner"},
        )
        assert invite.status_code == 201
        assert invite.json()["status"] == "invited"
        partner = headers_for("partner", tenant_id)

        # Step 4: January budget
        january = client.post(
            "/api/budgets/",
            headers=owner,
            json={"year": 2024, "month": 1, "category_id": food["id"], "amount": "20000"},
        )
        assert january.status_code == 201

        # Step 5: Owner buys on credit in 3 installments, partner pays cash
        recorded = client.post(
            "/api/expenses/",
            headers=owner,
            json={
                "date": "2024-01-10",
                "amount": "30000",
                "category_id": food["id"],
                "payment_method": "credit_card",
                "card_type": "visa",
                "installments": 3,
                "entity_name": "Mayorista Sur",
            },
        )
        assert recorded.json()["count"] == 3

        response = client.post(
            "/api/expenses/",
            headers=partner,
            json={"date": "2024-01-20", "amount": "5000", "category_id": food["id"], "entity_name": "Mayorista Sur"},
        )
        assert response.status_code == 201

        members = client.get("/api/tenants/me/members", headers=owner).json()
        assert {m["auth_user_id"]: m["status"] for m in members}["partner"] == "active"

        # Both postings resolved to the same counterparty
        entities = client.get("/api/entities/", headers=owner).json()
        assert [e["name"] for e in entities] == ["Mayorista Sur"]

        # Step 6: January status only counts the first installment
        status_jan = client.get(
            f"/api/budgets/status/{food['id']}",
            headers=owner,
            params={"year": 2024, "month": 1},
        ).json()
        assert status_jan["spent"] == 15000.0
        assert status_jan["remaining"] == 5000.0
        assert status_jan["percentage"] == 75.0

        # Step 7: February carries January's surplus
        february = client.post(
            "/api/budgets/",
            headers=owner,
            json={"year": 2024, "month": 2, "category_id": food["id"], "amount": "20000", "carry_over": True},
        )
        assert february.json()["rollover_in"] == 5000.0

        status_feb = client.get(
            f"/api/budgets/status/{food['id']}",
            headers=owner,
            params={"year": 2024, "month": 2},
        ).json()
        assert status_feb["spent"] == 10000.0
        assert status_feb["remaining"] == 15000.0

    def test_tenants_are_isolated(self, client, owner_headers, food_category):
        client.post(
            "/api/expenses/",
            headers=owner_headers,
            json={"date": "2024-01-05", "amount": "1200", "category_id": food_category.id},
        )

        other = headers_for("solo-user")
        response = client.post(
            "/api/tenants",
            headers=other,
            json={"plan_id": "personal", "email": "solo@example.com", "display_name": "Solo"},
        )
        assert response.status_code == 201
        other = headers_for("solo-user", response.json()["tenant_id"])

        assert client.get("/api/expenses/", headers=other).json()["total"] == 0
        other_categories = client.get("/api/categories/", headers=other).json()
        assert food_category.id not in [c["id"] for c in other_categories]

        # Foreign category ids are not accepted
        response = client.post(
            "/api/expenses/",
            headers=other,
            json={"date": "2024-01-05", "amount": "10", "category_id": food_category.id},
        )
        assert response.status_code == 404
