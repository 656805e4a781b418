from fintrack.default_categories import template_counts


def test_list_seeded_categories(client, owner_headers):
    response = client.get("/api/categories/", headers=owner_headers)

    assert response.status_code == 200
    categories = response.json()
    assert len(categories) == template_counts()[0]
    assert sum(len(c["subcategories"]) for c in categories) == template_counts()[1]
    assert categories[0]["name"] == "Comestibles"
    assert categories[0]["subcategories"][0]["name"] == "Panaderia"


def test_create_category_with_subcategories(client, owner_headers):
    response = client.post(
        "/api/categories/",
        headers=owner_headers,
        json={"name": "Mascotas", "color": "#123abc", "subcategories": ["Veterinario", "Alimento"]},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["order"] == template_counts()[0]
    assert [s["name"] for s in data["subcategories"]] == ["Veterinario", "Alimento"]


def test_add_subcategory(client, owner_headers, food_category):
    response = client.post(
        f"/api/categories/{food_category.id}/subcategories",
        headers=owner_headers,
        json={"name": "Almacen"},
    )

    assert response.status_code == 201
    assert response.json()["order"] == 8


def test_category_with_subcategories_cannot_be_deleted(client, owner_headers, food_category):
    response = client.delete(f"/api/categories/{food_category.id}", headers=owner_headers)

    assert response.status_code == 400
    assert "subcategories" in response.json()["detail"]


def test_delete_category_after_subcategories(client, owner_headers):
    created = client.post(
        "/api/categories/",
        headers=owner_headers,
        json={"name": "Temporal", "subcategories": ["Unica"]},
    ).json()

    sub_id = created["subcategories"][0]["id"]
    assert client.delete(f"/api/categories/subcategories/{sub_id}", headers=owner_headers).status_code == 204
    assert client.delete(f"/api/categories/{created['id']}", headers=owner_headers).status_code == 204

    names = [c["name"] for c in client.get("/api/categories/", headers=owner_headers).json()]
    assert "Temporal" not in names


def test_member_cannot_edit_categories(client, member_headers):
    response = client.post("/api/categories/", headers=member_headers, json={"name": "Nope"})
    assert response.status_code == 403


def test_category_used_by_expense_cannot_be_deleted(client, owner_headers):
    category = client.post("/api/categories/", headers=owner_headers, json={"name": "Regalos"}).json()
    expense_id = client.post(
        "/api/expenses/",
        headers=owner_headers,
        json={"date": "2024-03-01", "amount": "1500", "category_id": category["id"]},
    ).json()["posting_ids"][0]

    response = client.delete(f"/api/categories/{category['id']}", headers=owner_headers)
    assert response.status_code == 400
    assert "expenses or budgets" in response.json()["detail"]

    # Soft-deleted expenses still point at the category
    client.delete(f"/api/expenses/{expense_id}", headers=owner_headers)
    assert client.delete(f"/api/categories/{category['id']}", headers=owner_headers).status_code == 400

    names = [c["name"] for c in client.get("/api/categories/", headers=owner_headers).json()]
    assert "Regalos" in names


def test_subcategory_used_by_budget_cannot_be_deleted(client, owner_headers, food_category):
    subcategory = food_category.subcategories[0]
    response = client.post(
        "/api/budgets/",
        headers=owner_headers,
        json={
            "year": 2024,
            "month": 1,
            "category_id": food_category.id,
            "subcategory_id": subcategory.id,
            "amount": "5000",
        },
    )
    assert response.status_code == 201

    response = client.delete(f"/api/categories/subcategories/{subcategory.id}", headers=owner_headers)
    assert response.status_code == 400
