"""Tests for catalog operations."""

from decimal import Decimal

import pytest

from storefront.core.errors import ConflictError, LimitExceededError, NotFoundError
from storefront.models.product import ProductStatus
from storefront.services.catalog_service import CatalogService, slugify


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Black Hoodie", "black-hoodie"),
        ("  Tee / Long Sleeve! ", "tee-long-sleeve"),
        ("قميص أسود", "قميص-أسود"),
        ("!!!", "product"),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


@pytest.mark.asyncio
async def test_create_product_uses_store_defaults(db_session, store):
    product = await CatalogService(db_session).create_product(
        store,
        {"name": "Cargo Pants", "price": Decimal("150"), "images": ["https://cdn.test/p.jpg"]},
    )

    assert product.slug == "cargo-pants"
    assert product.currency == "SAR"
    assert product.image_url == "https://cdn.test/p.jpg"
    assert product.status == ProductStatus.DRAFT


@pytest.mark.asyncio
async def test_free_plan_product_limit(db_session, store, make_product):
    for i in range(10):
        await make_product(f"Item {i}")

    with pytest.raises(LimitExceededError) as exc_info:
        await CatalogService(db_session).create_product(store, {"name": "One more"})

    assert exc_info.value.details == {"product_limit": 10, "products_used": 10}


@pytest.mark.asyncio
async def test_paid_plan_raises_limit(db_session, store, make_product):
    store.subscription_plan = "starter"
    store.subscription_status = "active"
    for i in range(10):
        await make_product(f"Item {i}")

    product = await CatalogService(db_session).create_product(store, {"name": "One more"})

    assert product.name == "One more"


@pytest.mark.asyncio
async def test_products_are_scoped_to_store(db_session, store, make_product):
    product = await make_product()

    with pytest.raises(NotFoundError):
        await CatalogService(db_session).get_product("another-store", product.id)


@pytest.mark.asyncio
async def test_bulk_price_changes(db_session, store, make_product):
    tee = await make_product("Tee", price="100.00")
    cap = await make_product("Cap", price="33.33")
    service = CatalogService(db_session)

    updated = await service.update_prices_bulk(store.id, [tee.id, cap.id], percent_change=-10)

    assert {p.name: p.price for p in updated} == {"Tee": Decimal("90.00"), "Cap": Decimal("30.00")}

    await service.update_prices_bulk(store.id, [tee.id], price=Decimal("75"))
    assert tee.price == Decimal("75")


@pytest.mark.asyncio
async def test_bulk_status_change(db_session, store, make_product):
    a = await make_product("A", status=ProductStatus.DRAFT)
    b = await make_product("B", status=ProductStatus.DRAFT)

    count = await CatalogService(db_session).set_status_bulk(store.id, [a.id, b.id], ProductStatus.ACTIVE)

    assert count == 2


@pytest.mark.asyncio
async def test_category_slugs_are_unique_per_store(db_session, store):
    service = CatalogService(db_session)
    category = await service.create_category(store.id, {"name": "Hoodies"})

    assert category.slug == "hoodies"
    with pytest.raises(ConflictError):
        await service.create_category(store.id, {"name": "hoodies"})

    assert [c.name for c in await service.list_categories(store.id)] == ["Hoodies"]
