import pytest
from httpx import AsyncClient

# Mark all tests in this module to use pytest-asyncio
pytestmark = pytest.mark.asyncio

MANIPUR_ADDRESS = {
    "full_name": "Thoibi Devi",
    "address_line_1": "Singjamei Chingamakha",
    "city": "Imphal",
    "state": "Manipur",
    "postal_code": "795001",
    "phone": "9800000001",
}

DELHI_ADDRESS = {
    "full_name": "Arjun Mehta",
    "address_line_1": "12 Janpath",
    "city": "New Delhi",
    "state": "Delhi",
    "postal_code": "110001",
    "phone": "9800000002",
}


async def _create_order(client: AsyncClient, address=None, customer=None) -> dict:
    payload = {
        "customer": customer or {"user_id": "user-42", "email": "user42@example.com"},
        "items": [{"product_id": "ghee-500", "quantity": 2}],
        "address": address or MANIPUR_ADDRESS,
    }
    response = await client.post("/api/v1/orders/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()

# --- Checkout ---

async def test_checkout_preview(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/checkout/preview", json={
        "items": [{"product_id": "ghee-500", "quantity": 2}],
        "address": DELHI_ADDRESS,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == {"amount": "1000.00", "currency": "INR"}
    assert data["deferred_delivery_note"] is True


async def test_checkout_preview_unknown_product(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/checkout/preview", json={
        "items": [{"product_id": "nope", "quantity": 1}],
        "address": DELHI_ADDRESS,
    })
    assert response.status_code == 404


async def test_checkout_preview_rejects_oversized_quantity(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/checkout/preview", json={
        "items": [{"product_id": "ghee-500", "quantity": 10**30}],
        "address": MANIPUR_ADDRESS,
    })
    assert response.status_code == 422

# --- Orders ---

async def test_create_order_success(test_client: AsyncClient, catalog_products):
    data = await _create_order(test_client)

    assert data["breakdown"]["subtotal"]["amount"] == "1000.00"
    assert data["breakdown"]["discount"]["amount"] == "100.00"
    assert data["breakdown"]["delivery_charge"]["amount"] == "80.00"
    assert data["breakdown"]["total"]["amount"] == "980.00"
    assert data["order_status"] == "pending"
    assert data["shipping_status"] == "pending"
    assert data["customer"]["name"] == "Thoibi Devi"
    assert data["items"][0]["line_total"]["amount"] == "1000.00"
    assert data["version"] == 1


async def test_create_order_invalid_quantity(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/orders/", json={
        "customer": {"user_id": "user-42"},
        "items": [{"product_id": "ghee-500", "quantity": 0}],
        "address": MANIPUR_ADDRESS,
    })
    assert response.status_code == 400


async def test_create_order_guest_without_name(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/orders/", json={
        "customer": {"email": "guest@example.com"},
        "items": [{"product_id": "ghee-500", "quantity": 1}],
        "address": MANIPUR_ADDRESS,
    })
    assert response.status_code == 400


async def test_create_order_missing_address(test_client: AsyncClient, catalog_products):
    response = await test_client.post("/api/v1/orders/", json={
        "customer": {"user_id": "user-42"},
        "items": [{"product_id": "ghee-500", "quantity": 1}],
    })
    assert response.status_code == 422


async def test_get_order_and_not_found(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)

    response = await test_client.get(f"/api/v1/orders/{created['id']}")
    assert response.status_code == 200
    assert response.json()["breakdown"] == created["breakdown"]

    response = await test_client.get("/api/v1/orders/does-not-exist")
    assert response.status_code == 404


async def test_list_customer_orders_sets_content_range(test_client: AsyncClient, catalog_products):
    await _create_order(test_client)
    await _create_order(test_client)
    await _create_order(test_client, customer={"user_id": "someone-else"})

    response = await test_client.get("/api/v1/orders/", params={"customer_id": "user-42", "limit": 1})

    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert len(response.json()["items"]) == 1
    assert response.headers["Content-Range"] == "orders 0-0/2"

# --- Admin ---

async def test_admin_search_by_id_prefix(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)
    await _create_order(test_client)

    response = await test_client.get("/api/v1/admin/orders/", params={"search": created["id"][:8]})

    assert response.status_code == 200
    assert [order["id"] for order in response.json()["items"]] == [created["id"]]


async def test_admin_search_matches_middle_of_id(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)
    await _create_order(test_client)

    fragment = created["id"][9:18].upper()
    response = await test_client.get("/api/v1/admin/orders/", params={"search": fragment})

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert [order["id"] for order in response.json()["items"]] == [created["id"]]


async def test_admin_fulfillment_flow(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)
    url = f"/api/v1/admin/orders/{created['id']}/fulfillment"

    response = await test_client.patch(url, json={
        "current": {"order_status": "pending", "shipping_status": "pending"},
        "target": {"order_status": "confirmed", "shipping_status": "packed"},
    })
    assert response.status_code == 200
    assert response.json()["version"] == 2

    # Expédition sans transporteur
    response = await test_client.patch(url, json={
        "current": {"order_status": "confirmed", "shipping_status": "packed"},
        "target": {"order_status": "confirmed", "shipping_status": "shipped"},
    })
    assert response.status_code == 409

    # Retour en arrière
    response = await test_client.patch(url, json={
        "current": {"order_status": "confirmed", "shipping_status": "packed"},
        "target": {"order_status": "confirmed", "shipping_status": "pending"},
    })
    assert response.status_code == 409

    # État périmé
    response = await test_client.patch(url, json={
        "current": {"order_status": "pending", "shipping_status": "pending"},
        "target": {"order_status": "confirmed", "shipping_status": "packed"},
    })
    assert response.status_code == 409
    assert "rechargez" in response.json()["detail"]

    response = await test_client.patch(url, json={
        "current": {"order_status": "confirmed", "shipping_status": "packed"},
        "target": {
            "order_status": "confirmed",
            "shipping_status": "shipped",
            "courier_name": "Blue Dart",
            "courier_contact": "1800-233-1234",
            "tracking_id": "BD998877",
        },
    })
    assert response.status_code == 200
    data = response.json()
    assert data["shipping_status"] == "shipped"
    assert data["courier"]["tracking_id"] == "BD998877"
    assert data["breakdown"] == created["breakdown"]


async def test_admin_fulfillment_unknown_order(test_client: AsyncClient):
    response = await test_client.patch("/api/v1/admin/orders/missing/fulfillment", json={
        "current": {"order_status": "pending", "shipping_status": "pending"},
        "target": {"order_status": "confirmed", "shipping_status": "pending"},
    })
    assert response.status_code == 404


async def test_admin_partial_courier_is_rejected(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)
    response = await test_client.patch(f"/api/v1/admin/orders/{created['id']}/fulfillment", json={
        "current": {"order_status": "pending", "shipping_status": "pending"},
        "target": {"order_status": "confirmed", "shipping_status": "packed", "courier_name": "Blue Dart"},
    })
    assert response.status_code == 409
    assert "courier_contact" in response.json()["detail"]


async def test_admin_pricing_check(test_client: AsyncClient, catalog_products):
    created = await _create_order(test_client)

    response = await test_client.get(f"/api/v1/admin/orders/{created['id']}/pricing-check")

    assert response.status_code == 200
    data = response.json()
    assert data["has_drift"] is False
    assert data["config_version"] == "test-regional-v1"
    assert data["recomputed"]["total"]["amount"] == "980.00"
