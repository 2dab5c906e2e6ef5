"""Tests for reviewing and persisting product drafts."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.core.errors import ConflictError, LimitExceededError
from storefront.models.bulk import AssetType, GeneratedAsset
from storefront.models.draft import DraftStatus, ProductDraft
from storefront.models.product import AIConfidence, Product, ProductStatus
from storefront.services.draft_service import DraftService


@pytest.fixture
def make_draft(db_session, store):
    async def _make(name="Logo Tee", price="80.00", **kwargs):
        draft = ProductDraft(
            store_id=store.id,
            name=name,
            category=kwargs.pop("category", "t-shirts"),
            suggested_price=Decimal(price) if price is not None else None,
            image_urls=kwargs.pop("image_urls", ["https://cdn.test/tee.jpg", "https://cdn.test/tee-bg.png"]),
            sizes=["M", "L"],
            status=kwargs.pop("status", DraftStatus.DRAFT),
            ai_confidence=AIConfidence.HIGH,
            **kwargs,
        )
        db_session.add(draft)
        await db_session.commit()
        return draft

    return _make


@pytest.mark.asyncio
async def test_persist_creates_products_and_links_assets(db_session, store, make_draft):
    draft = await make_draft()
    asset = GeneratedAsset(
        store_id=store.id,
        draft_id=draft.id,
        asset_type=AssetType.BACKGROUND_REMOVED,
        source_url="https://cdn.test/tee.jpg",
        generated_url="https://cdn.test/tee-bg.png",
    )
    db_session.add(asset)
    await db_session.commit()

    result = await DraftService(db_session).persist(store, [draft.id], publish=True)

    assert len(result.created_product_ids) == 1
    product = await db_session.get(Product, result.created_product_ids[0])
    assert product.name == "Logo Tee"
    assert product.slug == "logo-tee"
    assert product.status == ProductStatus.ACTIVE
    assert product.image_url == "https://cdn.test/tee.jpg"
    assert product.ai_generated is True
    assert product.ai_confidence == AIConfidence.HIGH
    assert draft.status == DraftStatus.PERSISTED
    assert draft.product_id == product.id
    linked = (await db_session.execute(select(GeneratedAsset.product_id))).scalar_one()
    assert linked == product.id


@pytest.mark.asyncio
async def test_unpriced_drafts_stay_unpublished(db_session, store, make_draft):
    draft = await make_draft(price=None)

    result = await DraftService(db_session).persist(store, [draft.id], publish=True)

    product = await db_session.get(Product, result.created_product_ids[0])
    assert product.status == ProductStatus.DRAFT


@pytest.mark.asyncio
async def test_persist_skips_finished_and_unknown_drafts(db_session, store, make_draft):
    discarded = await make_draft("Old", status=DraftStatus.DISCARDED)

    result = await DraftService(db_session).persist(store, [discarded.id, "missing-id"])

    assert result.created_product_ids == []
    assert result.skipped_draft_ids == [discarded.id, "missing-id"]


@pytest.mark.asyncio
async def test_duplicate_names_get_unique_slugs(db_session, store, make_draft):
    first = await make_draft()
    second = await make_draft()

    result = await DraftService(db_session).persist(store, [first.id, second.id])

    products = [await db_session.get(Product, pid) for pid in result.created_product_ids]
    assert sorted(p.slug for p in products) == ["logo-tee", "logo-tee-2"]


@pytest.mark.asyncio
async def test_persist_respects_product_limit(db_session, store, make_draft, make_product):
    for i in range(10):
        await make_product(f"Item {i}")
    draft = await make_draft()

    with pytest.raises(LimitExceededError, match="Product limit reached"):
        await DraftService(db_session).persist(store, [draft.id])


@pytest.mark.asyncio
async def test_review_transitions(db_session, store, make_draft):
    service = DraftService(db_session)
    draft = await make_draft()

    updated = await service.update_draft(store.id, draft.id, {"name": "Heavy Logo Tee"})
    assert updated.name == "Heavy Logo Tee"

    approved = await service.approve(store.id, draft.id)
    assert approved.status == DraftStatus.APPROVED

    discarded = await service.discard(store.id, draft.id)
    assert discarded.status == DraftStatus.DISCARDED

    with pytest.raises(ConflictError):
        await service.update_draft(store.id, draft.id, {"name": "Too late"})
    with pytest.raises(ConflictError):
        await service.approve(store.id, draft.id)
