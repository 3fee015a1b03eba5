import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from orderdesk.core.http import register_error_handlers
from orderdesk.deps import get_record_store
from orderdesk.routers.customers import router as customers_router
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.products import router as products_router
from orderdesk.services.auth import create_access_token
from tests.fixtures_data import ADMIN_SUB, OTHER_SUB, OWNER_SUB


def _auth(subject: str, groups: list[str] | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, groups=groups)}"}


ADMIN_HEADERS = _auth(ADMIN_SUB, ["admin"])
OWNER_HEADERS = _auth(OWNER_SUB)
OTHER_HEADERS = _auth(OTHER_SUB)


@pytest.fixture
def client(store) -> TestClient:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(customers_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.dependency_overrides[get_record_store] = lambda: store
    return TestClient(app)


def _create_customer(client: TestClient, email: str = "ana@example.com") -> dict:
    response = client.post("/customers", json={"name": "Ana", "email": email}, headers=OWNER_HEADERS)
    assert response.status_code == 201
    return response.json()


def test_product_and_order_end_to_end(client):
    product = client.post("/products", json={"name": "Widget", "price": 9.99, "sku": "w-1"}, headers=ADMIN_HEADERS)
    assert product.status_code == 201
    body = product.json()
    assert body["sku"] == "W-1"
    assert body["active"] is True
    assert "description" not in body
    assert body["entity"] == "PRODUCT"
    assert body["ownerSub"] == ADMIN_SUB

    duplicate = client.post("/products", json={"name": "Widget", "price": 1, "sku": "W-1"}, headers=ADMIN_HEADERS)
    assert duplicate.status_code == 409
    assert duplicate.json() == {"message": "Product with this sku already exists", "field": "sku"}

    customer = _create_customer(client)

    order = client.post(
        "/orders",
        json={"customer": {"id": customer["id"]}, "products": [{"sku": "w-1", "qty": 3}], "total": 29.97},
        headers=OWNER_HEADERS,
    )
    assert order.status_code == 201
    assert order.json()["productSkus"] == ["W-1"]
    assert order.json()["status"] == "NEW"
    assert order.json()["ownerSub"] == OWNER_SUB

    missing = client.post(
        "/orders",
        json={"customer": {"id": customer["id"]}, "products": [{"sku": "W-2", "qty": 1}], "total": 1},
        headers=OWNER_HEADERS,
    )
    assert missing.status_code == 400
    assert missing.json()["reference"] == "product"


def test_non_admin_cannot_create_products(client):
    response = client.post("/products", json={"name": "Widget", "price": 1, "sku": "X"}, headers=OWNER_HEADERS)

    assert response.status_code == 403
    assert response.json() == {"message": "Only admin can create products"}


def test_mutations_require_a_token(client):
    response = client.post("/customers", json={"name": "Ana", "email": "ana@example.com"})

    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.post(
        "/customers",
        json={"name": "Ana", "email": "ana@example.com"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


def test_customer_update_owner_and_stranger(client):
    customer = _create_customer(client)

    denied = client.put(f"/customers/{customer['id']}", json={"name": "Hacked"}, headers=OTHER_HEADERS)
    assert denied.status_code == 403

    allowed = client.put(
        f"/customers/{customer['id']}",
        json={"name": "Ana Maria", "phone": " 1199 "},
        headers=OWNER_HEADERS,
    )
    assert allowed.status_code == 200
    assert allowed.json()["name"] == "Ana Maria"
    assert allowed.json()["phone"] == "1199"
    assert allowed.json()["createdAt"] == customer["createdAt"]


def test_customer_update_rejects_empty_payload_and_bad_json(client):
    customer = _create_customer(client)

    empty = client.put(f"/customers/{customer['id']}", json={}, headers=OWNER_HEADERS)
    assert empty.status_code == 400
    assert empty.json() == {"message": "No fields to update"}

    bad_json = client.put(
        f"/customers/{customer['id']}",
        content=b"{not json",
        headers={**OWNER_HEADERS, "Content-Type": "application/json"},
    )
    assert bad_json.status_code == 400
    assert bad_json.json() == {"message": "Invalid JSON body"}


def test_duplicate_customer_email(client):
    _create_customer(client, "Ana@Example.com")

    response = client.post("/customers", json={"name": "Other", "email": "ANA@example.COM"}, headers=OTHER_HEADERS)

    assert response.status_code == 409


def test_customer_delete_is_admin_only(client):
    customer = _create_customer(client)

    assert client.delete(f"/customers/{customer['id']}", headers=OWNER_HEADERS).status_code == 403
    assert client.delete(f"/customers/{customer['id']}", headers=ADMIN_HEADERS).status_code == 204
    assert client.get(f"/customers/{customer['id']}").status_code == 404
    assert client.delete(f"/customers/{customer['id']}", headers=ADMIN_HEADERS).status_code == 404


def test_get_checks_entity_type(client):
    customer = _create_customer(client)

    assert client.get(f"/customers/{customer['id']}").status_code == 200
    assert client.get(f"/products/{customer['id']}").status_code == 404
    assert client.get(f"/orders/{customer['id']}").json() == {"detail": "Order not found"}


def test_list_customers_newest_first_with_cursor(client):
    first = _create_customer(client, "one@example.com")
    second = _create_customer(client, "two@example.com")
    third = _create_customer(client, "three@example.com")

    page_one = client.get("/customers", params={"limit": 2}).json()
    assert page_one["count"] == 2
    assert [item["id"] for item in page_one["items"]] == [third["id"], second["id"]]

    page_two = client.get("/customers", params={"limit": 2, "cursor": page_one["nextCursor"]}).json()
    assert [item["id"] for item in page_two["items"]] == [first["id"]]
    assert "nextCursor" not in page_two


def test_order_update_and_delete(client):
    client.post("/products", json={"name": "Widget", "price": 9.99, "sku": "W-1"}, headers=ADMIN_HEADERS)
    client.post("/products", json={"name": "Gadget", "price": 5, "sku": "G-1"}, headers=ADMIN_HEADERS)
    customer = _create_customer(client)
    order = client.post(
        "/orders",
        json={"customer": {"id": customer["id"]}, "products": [{"sku": "W-1", "qty": 1}], "total": 9.99, "notes": "ring"},
        headers=OWNER_HEADERS,
    ).json()

    stranger = client.put(f"/orders/{order['id']}", json={"status": "PAID"}, headers=OTHER_HEADERS)
    assert stranger.status_code == 403

    updated = client.put(
        f"/orders/{order['id']}",
        json={"status": "paid", "products": [{"sku": "g-1", "qty": 4}], "notes": ""},
        headers=OWNER_HEADERS,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["status"] == "PAID"
    assert body["productSkus"] == ["G-1"]
    assert body["total"] == 9.99
    assert "notes" not in body

    assert client.delete(f"/orders/{order['id']}", headers=OWNER_HEADERS).status_code == 403
    assert client.delete(f"/orders/{order['id']}", headers=ADMIN_HEADERS).status_code == 204


def test_product_update_and_delete(client):
    created = client.post("/products", json={"name": "Widget", "price": 9.99, "sku": "W-1"}, headers=ADMIN_HEADERS).json()

    updated = client.put(f"/products/{created['id']}", json={"active": "false"}, headers=ADMIN_HEADERS)
    assert updated.status_code == 200
    assert updated.json()["active"] is False

    deleted = client.delete(f"/products/{created['id']}", headers=ADMIN_HEADERS)
    assert deleted.status_code == 200
    assert deleted.json() == {"deleted": True}
    assert client.get(f"/products/{created['id']}").status_code == 404
