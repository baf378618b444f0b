"""Integration tests for the product endpoints via TestClient."""


def _create(client, headers, **fields):
    body = {"name": "PVC Pipe", "brand_name": "Supreme", "stock_quantity": 10, "low_stock_threshold": 3, **fields}
    return client.post("/products", json=body, headers=headers)


def test_create_and_read(client, as_admin):
    response = _create(client, as_admin)
    assert response.status_code == 201
    product_id = response.json()["product_id"]

    body = client.get(f"/products/{product_id}", headers=as_admin).json()
    assert body["name"] == "PVC Pipe"
    assert body["dimension"] == "Standard"
    assert body["stock_level"] == "ok"


def test_list_is_sorted_by_name(client, as_admin, as_executive):
    _create(client, as_admin, name="Tee")
    _create(client, as_admin, name="Elbow")

    response = client.get("/products", headers=as_executive)
    assert [p["name"] for p in response.json()] == ["Elbow", "Tee"]


def test_negative_stock_rejected(client, as_admin):
    assert _create(client, as_admin, stock_quantity=-1).status_code != 201


def test_update(client, as_admin, as_inventory_manager):
    product_id = _create(client, as_admin).json()["product_id"]
    response = client.put(f"/products/{product_id}", json={"stock_quantity": 2}, headers=as_inventory_manager)

    assert response.status_code == 200
    assert response.json()["stock_level"] == "low"


def test_executive_cannot_update(client, as_admin, as_executive):
    product_id = _create(client, as_admin).json()["product_id"]
    response = client.put(f"/products/{product_id}", json={"stock_quantity": 2}, headers=as_executive)
    assert response.status_code == 403


def test_adjust_stock(client, as_admin, as_staff):
    product_id = _create(client, as_admin).json()["product_id"]
    response = client.post(f"/products/{product_id}/adjust", json={"delta": -4, "reason": "Damaged"}, headers=as_staff)

    assert response.status_code == 200
    assert response.json() == {"product_id": product_id, "stock_quantity": 6}


def test_adjust_unknown_product(client, as_admin):
    response = client.post("/products/missing/adjust", json={"delta": 1}, headers=as_admin)
    assert response.status_code == 404


def test_import(client, as_executive):
    response = client.post(
        "/products/import",
        json={"csv_text": "name,brandName,dimension,stockQuantity,lowStockThreshold\nPVC Pipe,Supreme,1 inch,40,5\nCap,,,,\n"},
        headers=as_executive,
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["total_rows"], body["created"], body["updated"]) == (2, 2, 0)
    assert body["warnings"][0]["row"] == 2


def test_delete(client, as_admin):
    product_id = _create(client, as_admin).json()["product_id"]
    assert client.delete(f"/products/{product_id}", headers=as_admin).json() == {"status": "deleted"}
    assert client.get(f"/products/{product_id}", headers=as_admin).status_code == 404


def test_brand_names_are_distinct_and_sorted_ignoring_case(client, as_admin, as_executive):
    _create(client, as_admin, name="Tee", brand_name="supreme")
    _create(client, as_admin, name="Elbow", brand_name="Astral")
    _create(client, as_admin, name="Bend", brand_name="Astral")
    _create(client, as_admin, name="Valve", brand_name="Finolex")

    response = client.get("/products/brands", headers=as_executive)

    assert response.status_code == 200
    assert response.json() == ["Astral", "Finolex", "supreme"]


def test_brand_names_require_an_actor(client):
    assert client.get("/products/brands").status_code == 401
