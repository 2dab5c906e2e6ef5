"""Tests for bulk batch creation and processing."""

import json
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import select

from storefront.core.errors import LimitExceededError, ValidationFailedError
from storefront.models.ai import AIUsage, UsageOperation
from storefront.models.bulk import AssetType, BatchStatus, GeneratedAsset
from storefront.models.draft import DraftStatus, ProductDraft
from storefront.models.product import AIConfidence, ProductStatus
from storefront.services.bulk.batch_service import BulkBatchService
from storefront.services.bulk.processor import BulkProcessor, process_with_retry
from storefront.services.bulk.product_creator import ProductCreator

IMAGES = ["https://cdn.test/hoodie-front.jpg", "https://cdn.test/hoodie-back.jpg", "https://cdn.test/cap.jpg"]

GROUPS_REPLY = json.dumps(
    [
        {"id": "group_1", "name": "Oversized Hoodie", "category": "hoodies", "mainImage": IMAGES[0], "images": IMAGES[:2]},
        {"id": "group_2", "name": "Dad Cap", "category": "hats", "mainImage": IMAGES[2], "images": [IMAGES[2]]},
    ]
)


def _details(name, gender="unisex"):
    return json.dumps(
        {"name": name, "description": f"{name} description.", "suggestedSizes": ["M", "L"], "gender": gender}
    )


@pytest.fixture
def saved_assets():
    return []


@pytest.fixture
def asset_saver(saved_assets):
    numbers = count(1)

    def save(store_id, data, mime_type, prefix):
        url = f"https://assets.test/{store_id}/{prefix}_{next(numbers)}.png"
        saved_assets.append(url)
        return url

    return save


@pytest.mark.asyncio
async def test_create_batch_sets_counters_and_usage(db_session, store):
    batch = await BulkBatchService(db_session).create_batch(store, IMAGES, name="Drop 1")

    assert batch.status == BatchStatus.PENDING
    assert batch.total_images == 3
    assert batch.processed_count == 0
    assert batch.config["create_products"] is True
    usage = (await db_session.execute(select(AIUsage))).scalar_one()
    assert usage.operation == UsageOperation.BULK_BATCH
    assert usage.count == 1


@pytest.mark.asyncio
async def test_create_batch_validates_images(db_session, store):
    service = BulkBatchService(db_session)

    with pytest.raises(ValidationFailedError):
        await service.create_batch(store, [])
    with pytest.raises(ValidationFailedError, match="Maximum 50 images"):
        await service.create_batch(store, [f"https://cdn.test/{i}.jpg" for i in range(51)])


@pytest.mark.asyncio
async def test_create_batch_enforces_daily_limit(db_session, store):
    store.settings = {"ai_preferences": {"daily_limits": {"bulk_batches": 1}}}
    await db_session.commit()
    service = BulkBatchService(db_session)
    await service.create_batch(store, IMAGES[:1])

    with pytest.raises(LimitExceededError, match="1 batches per day"):
        await service.create_batch(store, IMAGES[:1])


@pytest.mark.asyncio
async def test_process_batch_creates_assets_and_drafts(db_session, store, make_llm, asset_saver, saved_assets):
    batch = await BulkBatchService(db_session).create_batch(store, IMAGES)
    await db_session.commit()
    llm = make_llm([GROUPS_REPLY, _details("Oversized Hoodie"), _details("Dad Cap", gender="men")])

    result = await BulkProcessor(db_session, llm, asset_saver=asset_saver).process_batch(batch.id, store.id)

    assert result.success is True
    assert result.products_created == 2
    assert result.errors == []

    await db_session.refresh(batch)
    assert batch.status == BatchStatus.COMPLETED
    assert batch.processed_count == 3
    assert batch.failed_count == 0
    assert batch.completed_at is not None
    assert batch.current_product is None
    assert len(batch.product_groups) == 2
    assert batch.product_groups[0]["processed_images"][0]["original"] == IMAGES[0]

    # background removal and lifestyle shot for every image
    assert len(saved_assets) == 6
    assets = (await db_session.execute(select(GeneratedAsset))).scalars().all()
    assert {a.asset_type for a in assets} == {AssetType.BACKGROUND_REMOVED, AssetType.LIFESTYLE}

    drafts = (await db_session.execute(select(ProductDraft).order_by(ProductDraft.name))).scalars().all()
    assert [d.name for d in drafts] == ["Dad Cap", "Oversized Hoodie"]
    cap, hoodie = drafts
    assert cap.category == "accessories"
    assert cap.gender == "men"
    assert hoodie.status == DraftStatus.DRAFT
    assert hoodie.ai_confidence == AIConfidence.HIGH
    assert hoodie.primary_image_url == IMAGES[0]
    # originals first, then generated variants
    assert hoodie.image_urls[:2] == IMAGES[:2]
    assert len(hoodie.image_urls) == 6
    assert all(a.draft_id is not None for a in assets)


@pytest.mark.asyncio
async def test_failed_images_are_logged_and_batch_completes(db_session, store, make_llm, asset_saver):
    batch = await BulkBatchService(db_session).create_batch(
        store, IMAGES[:1], config={"generate_lifestyle": False, "create_products": False}
    )
    await db_session.commit()
    llm = make_llm(["not json"])
    llm.image_error = ValueError("content policy")

    result = await BulkProcessor(db_session, llm, asset_saver=asset_saver).process_batch(batch.id, store.id)

    assert result.success is True
    assert result.errors == [{"image": IMAGES[0], "error": "content policy"}]
    await db_session.refresh(batch)
    assert batch.status == BatchStatus.COMPLETED
    assert batch.failed_count == 1
    assert batch.processed_count == 0
    assert batch.error_log[0]["image"] == IMAGES[0]


@pytest.mark.asyncio
async def test_details_fallback_marks_low_confidence(db_session, store, make_llm, asset_saver):
    batch = await BulkBatchService(db_session).create_batch(
        store, IMAGES[2:], config={"generate_lifestyle": False, "remove_background": False}
    )
    await db_session.commit()
    llm = make_llm(["[]", RuntimeError("model down")])

    result = await BulkProcessor(db_session, llm, asset_saver=asset_saver).process_batch(batch.id, store.id)

    assert result.products_created == 1
    draft = (await db_session.execute(select(ProductDraft))).scalar_one()
    assert draft.ai_confidence == AIConfidence.LOW
    assert draft.name == "Product (Auto)"
    assert draft.sizes == ["S", "M", "L", "XL"]


@pytest.mark.asyncio
async def test_process_with_retry_retries_transient_errors():
    calls = 0

    async def flaky():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("503 overloaded")
        return "https://assets.test/ok.png"

    assert await process_with_retry(flaky) == "https://assets.test/ok.png"
    assert calls == 2


@pytest.mark.asyncio
async def test_process_with_retry_raises_permanent_errors():
    calls = 0

    async def blocked():
        nonlocal calls
        calls += 1
        raise ValueError("content policy")

    with pytest.raises(ValueError):
        await process_with_retry(blocked)
    assert calls == 1


@pytest.mark.asyncio
async def test_suggest_pricing_averages_category(db_session, store, make_product, fake_llm):
    await make_product("Street Hoodie", price="100.00", category="hoodies")
    await make_product("Zip Hoodie", price="151.00", category="hoodies")
    await make_product("Plain Tee", price="60.00", category="t-shirts")

    pricing = await ProductCreator(db_session, fake_llm).suggest_pricing("sweaters", store.id)

    assert pricing.suggested == Decimal("126")
    assert pricing.minimum == Decimal("100")
    assert pricing.maximum == Decimal("151")
    assert pricing.sample_size == 2


@pytest.mark.asyncio
async def test_suggest_pricing_without_priced_products(db_session, store, make_product, fake_llm):
    await make_product("Draft Cap", price=None, status=ProductStatus.DRAFT, category="accessories")

    assert await ProductCreator(db_session, fake_llm).suggest_pricing("hats", store.id) is None


@pytest.mark.asyncio
async def test_drafts_are_priced_from_similar_products(db_session, store, make_llm, make_product, asset_saver):
    await make_product("Street Hoodie", price="120.00", category="hoodies")
    await make_product("Zip Hoodie", price="140.00", category="hoodies")
    batch = await BulkBatchService(db_session).create_batch(
        store, IMAGES[:2], config={"generate_lifestyle": False, "remove_background": False}
    )
    await db_session.commit()
    groups = json.dumps([json.loads(GROUPS_REPLY)[0]])
    llm = make_llm([groups, _details("Oversized Hoodie")])

    await BulkProcessor(db_session, llm, asset_saver=asset_saver).process_batch(batch.id, store.id)

    draft = (await db_session.execute(select(ProductDraft))).scalar_one()
    assert draft.category == "hoodies"
    assert draft.suggested_price == Decimal("130")
