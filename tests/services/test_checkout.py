"""Tests for carts, checkout and order status changes."""

import re
from decimal import Decimal

import pytest

from storefront.core.errors import ConflictError, NotFoundError, ValidationFailedError
from storefront.models.order import OrderStatus
from storefront.models.product import ProductStatus
from storefront.services.cart_service import CartService, cart_total
from storefront.services.order_service import OrderService, generate_order_number, platform_fee

SESSION = "session-abc"


def test_order_number_format():
    assert re.fullmatch(r"ORD-\d{8}-[A-Z0-9]{6}", generate_order_number())


def test_platform_fee_rounds_half_up():
    assert platform_fee(Decimal("10.25"), 2.0) == Decimal("0.21")
    assert platform_fee(Decimal("100.00"), 0.5) == Decimal("0.50")


@pytest.mark.asyncio
async def test_adding_same_product_merges_lines(db_session, store, make_product):
    product = await make_product("Tee", price="50.00", sizes=["M", "L"])
    service = CartService(db_session)

    await service.add_item(store, SESSION, product.id, quantity=1, variant="M")
    await service.add_item(store, SESSION, product.id, quantity=2, variant="M")
    cart = await service.add_item(store, SESSION, product.id, quantity=1, variant="L")

    assert [(i.variant, i.quantity) for i in cart.items] == [("M", 3), ("L", 1)]
    assert cart_total(cart) == Decimal("200.00")
    assert cart.items[0].product_snapshot["name"] == "Tee"


@pytest.mark.asyncio
async def test_cart_rejects_unavailable_products(db_session, store, make_product):
    draft = await make_product("Hidden", status=ProductStatus.DRAFT)
    sized = await make_product("Sized", sizes=["S"])
    service = CartService(db_session)

    with pytest.raises(NotFoundError):
        await service.add_item(store, SESSION, draft.id)
    with pytest.raises(ValidationFailedError, match="Variant 'XL'"):
        await service.add_item(store, SESSION, sized.id, variant="XL")
    with pytest.raises(ValidationFailedError):
        await service.add_item(store, SESSION, sized.id, quantity=0)


@pytest.mark.asyncio
async def test_zero_quantity_removes_line(db_session, store, make_product):
    product = await make_product()
    service = CartService(db_session)
    cart = await service.add_item(store, SESSION, product.id)

    cart = await service.update_item(store, SESSION, cart.items[0].id, 0)

    assert cart.items == []


@pytest.mark.asyncio
async def test_checkout_creates_pending_order(db_session, store, make_product):
    hoodie = await make_product("Hoodie", price="120.00")
    cap = await make_product("Cap", price="35.50")
    carts = CartService(db_session)
    await carts.add_item(store, SESSION, hoodie.id, quantity=2)
    await carts.add_item(store, SESSION, cap.id)

    order = await OrderService(db_session).checkout(
        store, SESSION, {"name": "Sara", "email": "sara@example.com", "payment_method": "cod"}
    )

    assert order.status == OrderStatus.PENDING
    assert order.subtotal == Decimal("275.50")
    assert order.total_amount == Decimal("275.50")
    # free plan fee is 2%
    assert order.platform_fee == Decimal("5.51")
    assert order.currency == "SAR"
    assert sorted((i.product_name, i.quantity, i.total_price) for i in order.items) == [
        ("Cap", 1, Decimal("35.50")),
        ("Hoodie", 2, Decimal("240.00")),
    ]
    assert [h.status for h in order.history] == [OrderStatus.PENDING]

    # the converted cart is no longer the session's active cart
    assert await carts.get_cart(store, SESSION) is None


@pytest.mark.asyncio
async def test_checkout_with_empty_cart_fails(db_session, store):
    with pytest.raises(ValidationFailedError, match="Cart is empty"):
        await OrderService(db_session).checkout(store, SESSION, {"name": "Sara"})


@pytest.mark.asyncio
async def test_status_transitions(db_session, store, make_product):
    product = await make_product()
    await CartService(db_session).add_item(store, SESSION, product.id)
    service = OrderService(db_session)
    order = await service.checkout(store, SESSION, {"name": "Omar"})

    order = await service.update_status(store.id, order.id, OrderStatus.CONFIRMED, changed_by="owner")
    order = await service.update_status(store.id, order.id, OrderStatus.PROCESSING)

    assert order.status == OrderStatus.PROCESSING
    assert [h.status for h in order.history] == [
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
    ]
    with pytest.raises(ConflictError, match="from processing to delivered"):
        await service.update_status(store.id, order.id, OrderStatus.DELIVERED)


@pytest.mark.asyncio
async def test_orders_are_scoped_to_store(db_session, store, make_product):
    product = await make_product()
    await CartService(db_session).add_item(store, SESSION, product.id)
    order = await OrderService(db_session).checkout(store, SESSION, {"name": "Omar"})

    with pytest.raises(NotFoundError):
        await OrderService(db_session).get_order("another-store", order.id)

    assert (await OrderService(db_session).get_order(store.id, order.id)).id == order.id
