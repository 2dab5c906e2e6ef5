"""API tests for the public storefront."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from storefront.models.product import ProductStatus
from storefront.models.store import StoreStatus


@pytest.mark.asyncio
async def test_only_active_products_are_listed(client: AsyncClient, make_product, storefront_headers):
    await make_product("Black Hoodie", inventory=0)
    await make_product("Unreleased", status=ProductStatus.DRAFT)

    response = await client.get("/api/v1/storefront/products", headers=storefront_headers)

    assert response.status_code == 200
    products = response.json()
    assert [p["name"] for p in products] == ["Black Hoodie"]
    assert products[0]["in_stock"] is False


@pytest.mark.asyncio
async def test_product_by_slug(client: AsyncClient, make_product, storefront_headers):
    await make_product("Black Hoodie")
    await make_product("Unreleased", status=ProductStatus.DRAFT)

    found = await client.get("/api/v1/storefront/products/black-hoodie", headers=storefront_headers)
    hidden = await client.get("/api/v1/storefront/products/unreleased", headers=storefront_headers)

    assert found.status_code == 200
    assert found.json()["slug"] == "black-hoodie"
    assert hidden.status_code == 404


@pytest.mark.asyncio
async def test_unknown_store_is_404(client: AsyncClient):
    response = await client.get("/api/v1/storefront/products", headers={"X-Tenant-Override": "nobody"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unpublished_store_needs_preview_token(client: AsyncClient, db_session, store, storefront_headers):
    store.status = StoreStatus.DRAFT
    await db_session.commit()

    blocked = await client.get("/api/v1/storefront/products", headers=storefront_headers)
    assert blocked.status_code == 404

    token = (await client.post("/api/v1/stores/me/preview-token")).json()["token"]
    previewed = await client.get(
        "/api/v1/storefront/products", headers={**storefront_headers, "X-Preview-Token": token}
    )
    assert previewed.status_code == 200

    validation = await client.get(f"/api/v1/storefront/preview/{token}")
    assert validation.json() == {"valid": True, "store_id": store.id}


@pytest.mark.asyncio
async def test_cart_requires_session(client: AsyncClient, store):
    response = await client.get("/api/v1/storefront/cart", headers={"X-Tenant-Override": store.slug})

    assert response.status_code == 400
    assert response.json()["detail"] == "X-Session-Id header is required"


@pytest.mark.asyncio
async def test_cart_and_checkout_flow(client: AsyncClient, make_product, storefront_headers):
    hoodie = await make_product("Black Hoodie", price="120.00", sizes=["M", "L"])

    empty = await client.get("/api/v1/storefront/cart", headers=storefront_headers)
    assert empty.json()["items"] == []

    response = await client.post(
        "/api/v1/storefront/cart/items",
        json={"product_id": hoodie.id, "quantity": 2, "variant": "M"},
        headers=storefront_headers,
    )
    assert response.status_code == 201
    cart = response.json()
    assert cart["item_count"] == 2
    assert Decimal(cart["total"]) == Decimal("240.00")

    item_id = cart["items"][0]["id"]
    response = await client.patch(
        f"/api/v1/storefront/cart/items/{item_id}", json={"quantity": 1}, headers=storefront_headers
    )
    assert response.json()["item_count"] == 1

    response = await client.post(
        "/api/v1/storefront/checkout",
        json={"name": "Sara", "email": "sara@example.com", "shipping_address": {"city": "Riyadh"}},
        headers=storefront_headers,
    )
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["order_number"].startswith("ORD-")
    assert Decimal(order["total_amount"]) == Decimal("120.00")
    assert order["items"][0]["product_name"] == "Black Hoodie"

    after = await client.get("/api/v1/storefront/cart", headers=storefront_headers)
    assert after.json()["items"] == []


@pytest.mark.asyncio
async def test_checkout_empty_cart(client: AsyncClient, storefront_headers):
    response = await client.post("/api/v1/storefront/checkout", json={"name": "Sara"}, headers=storefront_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"


@pytest.mark.asyncio
async def test_remove_cart_item(client: AsyncClient, make_product, storefront_headers):
    product = await make_product()
    cart = (
        await client.post("/api/v1/storefront/cart/items", json={"product_id": product.id}, headers=storefront_headers)
    ).json()

    response = await client.delete(
        f"/api/v1/storefront/cart/items/{cart['items'][0]['id']}", headers=storefront_headers
    )

    assert response.status_code == 200
    assert response.json()["item_count"] == 0


@pytest.mark.asyncio
async def test_clear_cart(client: AsyncClient, make_product, storefront_headers):
    tee = await make_product("Logo Tee")
    cap = await make_product("Snapback", price="60.00")
    for product in (tee, cap):
        await client.post("/api/v1/storefront/cart/items", json={"product_id": product.id}, headers=storefront_headers)

    response = await client.delete("/api/v1/storefront/cart", headers=storefront_headers)

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["item_count"] == 0
