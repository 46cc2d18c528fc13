"""Tests for product catalog routes."""

from fastapi.testclient import TestClient


def create(client: TestClient, headers: dict, **fields) -> dict:
    payload = {"name": "Desk Lamp", "price": "29.99", "category": "Lighting", "stock": 3}
    payload.update(fields)
    resp = client.post("/v1/products", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestWritesRequireAuth:
    def test_create_without_credential(self, client: TestClient) -> None:
        resp = client.post("/v1/products", json={"name": "Lamp", "price": "1.00"})

        assert resp.status_code == 401

    def test_update_and_delete_without_credential(self, client: TestClient, auth_headers: dict) -> None:
        product = create(client, auth_headers)

        assert client.put(f"/v1/products/{product['id']}", json={"stock": 1}).status_code == 401
        assert client.delete(f"/v1/products/{product['id']}").status_code == 401
        assert client.get(f"/v1/products/{product['id']}").json()["stock"] == 3


class TestCreate:
    def test_create_sanitizes_text(self, client: TestClient, auth_headers: dict) -> None:
        product = create(
            client,
            auth_headers,
            name="<b>Desk</b> Lamp <script>x</script>",
            category=" Lighting & Decor ",
        )

        assert product["name"] == "Desk Lamp x"
        assert product["category"] == "Lighting  Decor"
        assert product["price"] == 29.99
        assert product["id"] == 1

    def test_create_collects_validation_errors(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post("/v1/products", json={"category": "x"}, headers=auth_headers)

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "invalid_product"
        assert error["details"]["errors"] == ["name is required", "price is required"]

    def test_create_rejects_bad_price(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post(
            "/v1/products",
            json={"name": "Lamp", "price": "12.345"},
            headers=auth_headers,
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["errors"] == ["Price must be a valid number"]

    def test_create_with_token_credential(self, client: TestClient, registered_user: dict) -> None:
        token = client.post(
            "/v1/auth/token",
            json={"username": "alice", "password": registered_user["password"]},
        ).json()["access_token"]

        product = create(client, {"Authorization": f"Bearer {token}"})

        assert product["name"] == "Desk Lamp"


class TestRead:
    def test_get_missing_product(self, client: TestClient) -> None:
        resp = client.get("/v1/products/999")

        assert resp.status_code == 404
        error = resp.json()["error"]
        assert error["code"] == "product_not_found"
        assert error["details"]["product_id"] == 999

    def test_list_paginates(self, client: TestClient, auth_headers: dict) -> None:
        for i in range(5):
            create(client, auth_headers, name=f"Item {i}")

        resp = client.get("/v1/products", params={"page": 2, "limit": 2})

        assert resp.status_code == 200
        body = resp.json()
        assert [p["name"] for p in body["products"]] == ["Item 2", "Item 3"]
        assert body["pagination"] == {
            "current_page": 2,
            "total_items": 5,
            "total_pages": 3,
            "items_per_page": 2,
        }

    def test_list_searches_name_and_category(self, client: TestClient, auth_headers: dict) -> None:
        create(client, auth_headers, name="Desk Lamp", category="Lighting")
        create(client, auth_headers, name="Chair", category="Furniture")
        create(client, auth_headers, name="Floor light", category="Decor")

        resp = client.get("/v1/products", params={"search": "LIGHT"})

        names = [p["name"] for p in resp.json()["products"]]
        assert names == ["Desk Lamp", "Floor light"]

    def test_limit_is_capped(self, client: TestClient) -> None:
        resp = client.get("/v1/products", params={"limit": 500})

        assert resp.json()["pagination"]["items_per_page"] == 100

    def test_empty_catalog(self, client: TestClient) -> None:
        body = client.get("/v1/products").json()

        assert body["products"] == []
        assert body["pagination"]["total_pages"] == 0


class TestUpdateDelete:
    def test_partial_update(self, client: TestClient, auth_headers: dict) -> None:
        product = create(client, auth_headers)

        resp = client.put(
            f"/v1/products/{product['id']}",
            json={"price": "19.50", "stock": 0},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["price"] == 19.5
        assert body["stock"] == 0
        assert body["name"] == "Desk Lamp"

    def test_blank_price_does_not_wipe_stored_price(self, client: TestClient, auth_headers: dict) -> None:
        product = create(client, auth_headers, price="19.99")

        resp = client.put(f"/v1/products/{product['id']}", json={"price": "   "}, headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["errors"] == ["Price must be a valid number"]
        assert client.get(f"/v1/products/{product['id']}").json()["price"] == 19.99

    def test_update_missing_product(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.put("/v1/products/42", json={"stock": 1}, headers=auth_headers)

        assert resp.status_code == 404

    def test_delete(self, client: TestClient, auth_headers: dict) -> None:
        product = create(client, auth_headers)

        resp = client.delete(f"/v1/products/{product['id']}", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json() == {"message": "Product deleted successfully"}
        assert client.get(f"/v1/products/{product['id']}").status_code == 404
        assert client.delete(f"/v1/products/{product['id']}", headers=auth_headers).status_code == 404
