"""Tests for the product, analyst and bulk-deals agents."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.agents.analyst_agent import AnalystAgent
from storefront.agents.bulk_agent import BulkDealsAgent
from storefront.agents.product_agent import ProductAgent
from storefront.models.bulk import BulkBatch
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product, ProductStatus


@pytest.fixture
def place_order(db_session, store):
    async def _place(product, quantity, status=OrderStatus.PENDING):
        total = product.price * quantity
        order = Order(
            store_id=store.id,
            order_number=f"ORD-TEST-{product.slug}-{quantity}",
            customer_name="Lina",
            status=status,
            subtotal=total,
            total_amount=total,
            items=[
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=product.price,
                    total_price=total,
                )
            ],
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _place


@pytest.mark.asyncio
async def test_product_agent_creates_ai_generated_draft(db_session, store):
    agent = ProductAgent(db_session, store.id)

    result = await agent.execute(
        "create_product",
        {"name": "Cargo Pants", "price": "150", "image_urls": ["https://cdn.test/cargo.jpg"]},
    )

    assert result.success is True
    product = (await db_session.execute(select(Product))).scalar_one()
    assert product.ai_generated is True
    assert product.images == ["https://cdn.test/cargo.jpg"]
    assert result.data["slug"] == "cargo-pants"


@pytest.mark.asyncio
async def test_product_agent_reports_bad_input(db_session, store):
    result = await ProductAgent(db_session, store.id).execute("create_product", {"price": "-1"})

    assert result.success is False
    assert result.message == "Failed to create product"
    assert "Invalid input for create_product" in result.error


@pytest.mark.asyncio
async def test_product_agent_unknown_action(db_session, store):
    result = await ProductAgent(db_session, store.id).execute("launch_rocket", {})

    assert result.success is False
    assert result.error == "Unknown product action: launch_rocket"


@pytest.mark.asyncio
async def test_bulk_price_change_reports_progress(db_session, store, make_product):
    tee = await make_product("Tee", price="100.00")
    cap = await make_product("Cap", price="40.00")
    agent = ProductAgent(db_session, store.id)
    updates = []
    agent.set_progress_callback(updates.append)

    result = await agent.execute(
        "update_prices_bulk", {"product_ids": [tee.id, cap.id], "percent_change": 10}
    )

    assert result.success is True
    assert [p["price"] for p in result.data["products"]] == ["110.00", "44.00"]
    assert [u.message for u in updates] == ["Updated prices 1/2", "Updated prices 2/2"]


@pytest.mark.asyncio
async def test_bulk_price_change_needs_a_change(db_session, store, make_product):
    tee = await make_product("Tee")

    result = await ProductAgent(db_session, store.id).execute(
        "update_prices_bulk", {"product_ids": [tee.id]}
    )

    assert result.success is False
    assert result.error == "Either price or percent_change is required"


@pytest.mark.asyncio
async def test_product_agent_cannot_reach_other_store(db_session, store, make_product):
    tee = await make_product("Tee")

    result = await ProductAgent(db_session, "another-store").execute("get_product", {"product_id": tee.id})

    assert result.success is False


@pytest.mark.asyncio
async def test_bulk_delete_skips_unknown_products(db_session, store, make_product):
    tee = await make_product("Tee")
    cap = await make_product("Cap")
    keep = await make_product("Hoodie")

    result = await ProductAgent(db_session, store.id).execute(
        "delete_products_bulk", {"product_ids": [tee.id, "missing", cap.id]}
    )
    await db_session.commit()

    assert result.success is True
    assert result.data == {"deleted": [tee.id, cap.id], "missing": ["missing"]}
    assert result.message == "Deleted 2 products, 1 not found"
    remaining = (await db_session.execute(select(Product.id))).scalars().all()
    assert remaining == [keep.id]


@pytest.mark.asyncio
async def test_bulk_delete_with_no_known_products_deletes_nothing(db_session, store, make_product):
    tee = await make_product("Tee")

    result = await ProductAgent(db_session, store.id).execute(
        "delete_products_bulk", {"product_ids": ["missing"]}
    )

    assert result.success is False
    assert result.error == "None of the products were found"
    assert (await db_session.execute(select(Product.id))).scalars().all() == [tee.id]


@pytest.mark.asyncio
async def test_store_summary(db_session, store, make_product, place_order):
    tee = await make_product("Tee", price="100.00", status=ProductStatus.ACTIVE)
    await make_product("Draft Cap", status=ProductStatus.DRAFT)
    await place_order(tee, 2)
    await place_order(tee, 1, status=OrderStatus.CANCELLED)

    result = await AnalystAgent(db_session, store.id).execute("store_summary", {"period": "day"})

    assert result.success is True
    assert result.data["products"] == {"total": 2, "active": 1, "draft": 1}
    assert result.data["orders"] == 1
    assert Decimal(result.data["revenue"]) == Decimal("200")


@pytest.mark.asyncio
async def test_top_products(db_session, store, make_product, place_order):
    tee = await make_product("Tee", price="100.00")
    cap = await make_product("Cap", price="40.00")
    await place_order(tee, 1)
    await place_order(cap, 3)

    result = await AnalystAgent(db_session, store.id).execute("top_products", {"limit": 1})

    assert [(p["name"], p["units"]) for p in result.data["products"]] == [("Cap", 3)]


@pytest.mark.asyncio
async def test_bulk_agent_creates_and_reports_batch(db_session, store):
    queued = []
    agent = BulkDealsAgent(db_session, store.id, enqueue=lambda *args: queued.append(args))

    created = await agent.execute(
        "create_batch", {"image_urls": ["https://cdn.test/a.jpg"], "generate_lifestyle": False}
    )
    status = await agent.execute("batch_status", {"batch_id": created.data["batch_id"]})

    batch = (await db_session.execute(select(BulkBatch))).scalar_one()
    assert batch.config["generate_lifestyle"] is False
    assert queued == [(batch.id, store.id)]
    assert status.data["status"] == "pending"
    assert status.data["total_images"] == 1


@pytest.mark.asyncio
async def test_bulk_agent_rejects_missing_images(db_session, store):
    result = await BulkDealsAgent(db_session, store.id).execute("create_batch", {"image_urls": []})

    assert result.success is False
    assert result.message == "Failed to create batch"
