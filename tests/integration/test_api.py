"""End-to-end tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from exhibitflow.api.main import build_store, create_app
from exhibitflow.core.config import Settings
from exhibitflow.store import WorkflowStore


ADMIN = {"X-User-Id": "u1"}
MANAGER = {"X-User-Id": "u2"}
OPERATOR = {"X-User-Id": "u3"}
VIEWER = {"X-User-Id": "u4"}


class TestHealth:

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "version" in response.json()

    def test_root(self, client: TestClient):
        data = client.get("/").json()
        assert data["name"] == "ExhibitFlow"
        assert data["docs"] is None


class TestIdentity:

    def test_missing_header(self, client: TestClient):
        response = client.get("/api/products")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "X-User-Id"

    def test_unknown_actor(self, client: TestClient):
        response = client.get("/api/products", headers={"X-User-Id": "u99"})
        assert response.status_code == 401

    def test_default_actor(self, store):
        settings = Settings(_env_file=None, default_actor_id="u3")
        client = TestClient(create_app(settings, store))
        assert client.get("/api/products").status_code == 200
        assert client.post("/api/approvals", json={"id": "cszttszpu", "status": "approved"}).status_code == 403


    def test_me(self, client: TestClient):
        response = client.get("/api/me", headers=MANAGER)
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "manager"
        assert data["role_description"] == "Manages exhibitions, approvals and order updates"
        assert "approvals:approve" in data["capabilities"]
        assert "products:delete" not in data["capabilities"]

    def test_me_requires_identity(self, client: TestClient):
        assert client.get("/api/me").status_code == 401


class TestProductsApi:

    def test_list(self, client: TestClient):
        response = client.get("/api/products", headers=VIEWER)
        assert response.status_code == 200
        assert [p["name"] for p in response.json()][:2] == ["Maggi", "Bru"]

    def test_create(self, client: TestClient):
        response = client.post("/api/products", json={"name": "Widget", "quantity": 3}, headers=OPERATOR)
        assert response.status_code == 201
        data = response.json()
        assert data["approved"] is False
        assert data["image"] == "/placeholder.png"
        assert client.get(f"/api/products/{data['id']}", headers=VIEWER).json()["name"] == "Widget"

    def test_viewer_cannot_create(self, client: TestClient):
        response = client.post("/api/products", json={"name": "Widget"}, headers=VIEWER)
        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "forbidden"
        assert body["detail"] == "Insufficient permissions. Required: products:create"

    def test_negative_quantity(self, client: TestClient):
        response = client.post("/api/products", json={"name": "Widget", "quantity": -2}, headers=OPERATOR)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    def test_duplicate_id(self, client: TestClient):
        response = client.post("/api/products", json={"id": "456567", "name": "Again"}, headers=ADMIN)
        assert response.status_code == 409

    def test_partial_update(self, client: TestClient):
        response = client.put("/api/products/456568", json={"quantity": 7}, headers=MANAGER)
        assert response.status_code == 200
        assert response.json()["quantity"] == 7
        assert response.json()["name"] == "Bru"

    def test_delete(self, client: TestClient):
        assert client.delete("/api/products/456569", headers=MANAGER).status_code == 403
        response = client.delete("/api/products/456569", headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"message": "Product deleted"}
        assert client.get("/api/products/456569", headers=ADMIN).status_code == 404
        assert client.delete("/api/products/456569", headers=ADMIN).status_code == 404


class TestExhibitionsApi:

    def test_get_by_code_and_id(self, client: TestClient):
        assert client.get("/api/exhibitions/EX-2941", headers=VIEWER).json()["id"] == "oxurt5ywn"
        assert client.get("/api/exhibitions/oxurt5ywn", headers=VIEWER).json()["exhibition_code"] == "EX-2941"
        assert client.get("/api/exhibitions/EX-0000", headers=VIEWER).status_code == 404

    def test_create_with_products(self, client: TestClient):
        response = client.post(
            "/api/exhibitions",
            json={"name": "Expo", "start_date": "2026-04-01", "products": [{"product_id": "456569", "quantity": 2}]},
            headers=MANAGER,
        )
        assert response.status_code == 201
        code = response.json()["exhibition_code"]
        rows = client.get(f"/api/exhibitions/{code}/products", headers=VIEWER).json()
        assert [(r["product_name"], r["status"]) for r in rows] == [("Red Bull", "pending")]

    def test_operator_cannot_create(self, client: TestClient):
        assert client.post("/api/exhibitions", json={"name": "Expo"}, headers=OPERATOR).status_code == 403

    def test_add_duplicate_product(self, client: TestClient):
        response = client.post(
            "/api/exhibitions/EX-2941/products", json={"products": [{"product_id": "456567"}]}, headers=MANAGER
        )
        assert response.status_code == 409

    def test_add_to_unknown_exhibition(self, client: TestClient):
        response = client.post(
            "/api/exhibitions/EX-0000/products", json={"products": [{"product_id": "456567"}]}, headers=MANAGER
        )
        assert response.status_code == 404

    def test_update(self, client: TestClient):
        response = client.put("/api/exhibitions/ui61d3cma", json={"status": "ACTIVE"}, headers=MANAGER)
        assert response.status_code == 200
        assert response.json()["status"] == "ACTIVE"
        assert response.json()["name"] == "test2"


class TestApprovalAndOrderFlow:

    def test_order_blocked_until_approved(self, client: TestClient):
        order = {"exhibition_code": "EX-2941", "items": [{"product_id": "456568", "quantity": 1}]}

        response = client.post("/api/orders", json=order, headers=OPERATOR)
        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Cannot create order with unapproved products"
        assert body["details"]["product_id"] == "456568"
        assert body["details"]["product_name"] == "Bru"

        pending = client.get("/api/approvals", headers=VIEWER).json()
        row = next(p for p in pending if p["product_id"] == "456568")
        assert client.post("/api/approvals", json={"id": row["id"], "status": "approved"}, headers=OPERATOR).status_code == 403
        response = client.post("/api/approvals", json={"id": row["id"], "status": "approved"}, headers=MANAGER)
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        response = client.post("/api/orders", json=order, headers=OPERATOR)
        assert response.status_code == 201
        created = response.json()
        assert created["status"] == "DRAFT"
        assert client.get(f"/api/orders/{created['id']}", headers=VIEWER).json() == created

    def test_invalid_approval_status(self, client: TestClient):
        response = client.post("/api/approvals", json={"id": "cszttszpu", "status": "pending"}, headers=MANAGER)
        assert response.status_code == 400

    def test_unknown_approval_row(self, client: TestClient):
        response = client.post("/api/approvals", json={"id": "nope", "status": "approved"}, headers=MANAGER)
        assert response.status_code == 404

    def test_order_status_update(self, client: TestClient):
        assert client.patch("/api/orders/7535", json={"status": "CONFIRMED"}, headers=OPERATOR).status_code == 403
        response = client.patch("/api/orders/7535", json={"status": "CONFIRMED"}, headers=MANAGER)
        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"
        assert client.patch("/api/orders/nope", json={"status": "CONFIRMED"}, headers=MANAGER).status_code == 404

    def test_empty_order(self, client: TestClient):
        response = client.post("/api/orders", json={"exhibition_code": "EX-2941", "items": []}, headers=OPERATOR)
        assert response.status_code == 400


class TestProductListsApi:

    def test_create_and_fetch(self, client: TestClient):
        response = client.post(
            "/api/product-lists",
            json={"exhibition_code": "EX-7516", "supplier_id": "acme",
                  "items": [{"product_id": "456567", "quantity": 2, "price": 430}]},
            headers=OPERATOR,
        )
        assert response.status_code == 201
        list_id = response.json()["id"]

        data = client.get(f"/api/product-lists/{list_id}", headers=VIEWER).json()
        assert data["total_quantity"] == 2
        assert data["items"][0]["product_name"] == "Maggi"

        filtered = client.get("/api/product-lists", params={"exhibition_code": "EX-7516"}, headers=VIEWER).json()
        assert [pl["id"] for pl in filtered] == [list_id]

    def test_approve_list_feeds_summary(self, client: TestClient):
        response = client.put("/api/product-lists/r2is3icfx", json={"status": "approved"}, headers=MANAGER)
        assert response.status_code == 200

        summary = client.get("/api/orders/summary", headers=VIEWER).json()
        by_code = {s["exhibition_code"]: s for s in summary}
        assert by_code["EX-7460"]["status"] == "Active"
        assert by_code["EX-7460"]["total_value"] == 430 + 257 + 405
        assert by_code["EX-2941"]["status"] == "Pending"

    def test_replace_items(self, client: TestClient):
        response = client.put(
            "/api/product-lists/a1e8x088e",
            json={"items": [{"product_id": "456570", "quantity": 9}]},
            headers=MANAGER,
        )
        assert response.status_code == 200
        assert response.json()["total_quantity"] == 9

    def test_missing_list(self, client: TestClient):
        assert client.get("/api/product-lists/nope", headers=VIEWER).status_code == 404


class TestAppConstruction:

    def test_build_store_from_seed_file(self, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("actors:\n  - {id: x1, username: x, role: ADMIN}\n")
        store = build_store(Settings(_env_file=None, seed_path=str(path)))
        assert [a.id for a in store.list_actors()] == ["x1"]

    def test_build_empty_store(self):
        store = build_store(Settings(_env_file=None, load_default_seed=False))
        assert store.list_actors() == []

    @pytest.mark.parametrize("debug,docs", [(True, 200), (False, 404)])
    def test_docs_only_in_debug(self, debug, docs):
        app = create_app(Settings(_env_file=None, debug=debug), WorkflowStore())
        assert TestClient(app).get("/docs").status_code == docs
