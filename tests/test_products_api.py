def test_manager_creates_product(client, fake_db, manager):
    response = client.post(
        "/api/v1/products",
        json={"name": "ZTE Fiber Modem", "description": "Affordable", "price": 120},
        headers=manager.headers,
    )

    assert response.status_code == 201
    assert response.json()["is_active"] is True
    assert fake_db.tables["products"][0]["name"] == "ZTE Fiber Modem"


def test_negative_price_rejected(client, manager):
    response = client.post("/api/v1/products", json={"name": "Bad", "price": -1}, headers=manager.headers)
    assert response.status_code == 422


def test_agent_cannot_manage_products(client, agent, product):
    assert client.post("/api/v1/products", json={"name": "X", "price": 1}, headers=agent.headers).status_code == 403
    assert client.put(f"/api/v1/products/{product['id']}", json={"price": 1}, headers=agent.headers).status_code == 403
    assert client.delete(f"/api/v1/products/{product['id']}", headers=agent.headers).status_code == 403


def test_agent_sees_only_active_products(client, fake_db, agent, manager, product):
    fake_db.add_product(name="Portable 5G Modem", is_active=False)

    agent_view = client.get("/api/v1/products", headers=agent.headers).json()
    manager_view = client.get("/api/v1/products", headers=manager.headers).json()
    manager_active = client.get("/api/v1/products", params={"active_only": True}, headers=manager.headers).json()

    assert [p["id"] for p in agent_view] == [product["id"]]
    assert len(manager_view) == 2
    assert len(manager_active) == 1


def test_update_product(client, manager, product):
    response = client.put(
        f"/api/v1/products/{product['id']}",
        json={"is_active": False, "price": 99.5},
        headers=manager.headers,
    )

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["price"] == 99.5
    assert response.json()["name"] == product["name"]


def test_update_missing_product(client, manager):
    response = client.put("/api/v1/products/missing", json={"price": 1}, headers=manager.headers)
    assert response.status_code == 404


def test_delete_product_cascades_to_coupons(client, fake_db, manager, agent, product):
    fake_db.add_coupon(product, agent)
    other = fake_db.add_product(name="ZTE Fiber Modem")
    kept = fake_db.add_coupon(other, agent)

    response = client.delete(f"/api/v1/products/{product['id']}", headers=manager.headers)

    assert response.status_code == 204
    assert [c["id"] for c in fake_db.tables["coupons"]] == [kept["id"]]


def test_get_product(client, agent, product):
    assert client.get(f"/api/v1/products/{product['id']}", headers=agent.headers).json()["name"] == product["name"]
    assert client.get("/api/v1/products/missing", headers=agent.headers).status_code == 404
