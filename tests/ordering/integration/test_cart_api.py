"""Integration tests for Cart API endpoints via TestClient."""


def _add(client, headers, product_id="maize", quantity=1):
    return client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)


class TestCartEndpoints:
    def test_add_item(self, client, buyer_headers):
        response = _add(client, buyer_headers, quantity=2)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Item added to cart"
        [line] = body["data"]["lines"]
        assert line == {
            "product_id": "maize",
            "farm_id": "farm-a",
            "quantity": 2,
            "unit_price": 10.0,
            "line_total": 20.0,
            "added_at": line["added_at"],
        }

    def test_re_add_merges(self, client, buyer_headers):
        _add(client, buyer_headers, quantity=2)
        body = _add(client, buyer_headers, quantity=3).json()

        assert body["data"]["line_count"] == 1
        assert body["data"]["lines"][0]["quantity"] == 5

    def test_get_cart(self, client, buyer_headers):
        _add(client, buyer_headers, "tomato", 4)

        data = client.get("/cart", headers=buyer_headers).json()["data"]
        assert data["buyer_id"] == "buyer-001"
        assert data["estimated_total"] == 9.0

    def test_missing_cart_is_empty(self, client, buyer_headers):
        data = client.get("/cart", headers=buyer_headers).json()["data"]
        assert data["lines"] == []
        assert data["line_count"] == 0

    def test_update_item(self, client, buyer_headers):
        _add(client, buyer_headers, quantity=2)
        response = client.put("/cart/items/maize", json={"quantity": 6}, headers=buyer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["lines"][0]["quantity"] == 6

    def test_update_to_zero_removes(self, client, buyer_headers):
        _add(client, buyer_headers, quantity=2)
        response = client.put("/cart/items/maize", json={"quantity": 0}, headers=buyer_headers)
        assert response.json()["data"]["lines"] == []

    def test_remove_item(self, client, buyer_headers):
        _add(client, buyer_headers)
        response = client.delete("/cart/items/maize", headers=buyer_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Item removed from cart"
        assert response.json()["data"]["lines"] == []

    def test_clear_cart(self, client, buyer_headers):
        _add(client, buyer_headers)
        response = client.delete("/cart", headers=buyer_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None, "message": "Cart cleared"}
        assert client.get("/cart", headers=buyer_headers).json()["data"]["lines"] == []


class TestCartErrors:
    def test_invalid_quantity(self, client, buyer_headers):
        response = _add(client, buyer_headers, quantity=0)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"] == "InvalidQuantity"

    def test_unknown_product(self, client, buyer_headers):
        response = _add(client, buyer_headers, product_id="durian")
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidReference"

    def test_update_absent_item(self, client, buyer_headers):
        response = client.put("/cart/items/okra", json={"quantity": 2}, headers=buyer_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "ItemNotFound"

    def test_malformed_body(self, client, buyer_headers):
        response = client.post("/cart/items", json={"quantity": 2}, headers=buyer_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "InvalidRequest"
        assert response.json()["details"]["errors"][0]["field"] == "product_id"

    def test_missing_identity(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthenticated"

    def test_unknown_role(self, client):
        response = client.get("/cart", headers={"X-Actor-Id": "x", "X-Actor-Role": "wizard"})
        assert response.status_code == 403

    def test_farmer_has_no_cart(self, client, farmer_a_headers):
        response = client.get("/cart", headers=farmer_a_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_catalog_outage(self, client, catalog, buyer_headers):
        catalog.configure(should_succeed=False)
        response = _add(client, buyer_headers)
        assert response.status_code == 503
        assert response.json()["error"] == "Unavailable"


class TestDevCatalog:
    def test_register_product(self, client, catalog, buyer_headers):
        response = client.post(
            "/dev/catalog/products",
            json={"product_id": "millet", "farm_id": "farm-c", "unit_price": 1.5, "available_quantity": 20},
        )

        assert response.status_code == 201
        assert catalog.get_product("millet")["farm_id"] == "farm-c"
        assert _add(client, buyer_headers, "millet").status_code == 201

    def test_blocked_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = client.post("/dev/catalog/products", json={"product_id": "m", "farm_id": "f", "unit_price": 1.0})
        assert response.status_code == 403
