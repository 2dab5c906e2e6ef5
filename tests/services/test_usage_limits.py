"""Tests for daily AI usage limits."""

import pytest
from sqlalchemy import select

from storefront.models.ai import AIUsage, UsageOperation
from storefront.services.usage_limits import UsageLimitService, get_limits


def test_store_limits_override_defaults_per_key(store):
    store.settings = {"ai_preferences": {"daily_limits": {"bulk_batches": 2}}}

    limits = get_limits(store)

    assert limits.bulk_batches == 2
    assert limits.text_tokens == 500_000
    assert limits.image_generation == 100


@pytest.mark.asyncio
async def test_record_usage_accumulates_in_one_row(db_session, store):
    service = UsageLimitService(db_session)

    await service.record_usage(store.id, UsageOperation.TEXT_GENERATION, tokens_used=300)
    await service.record_usage(store.id, UsageOperation.TEXT_GENERATION, tokens_used=200)

    rows = (await db_session.execute(select(AIUsage))).scalars().all()
    assert len(rows) == 1
    assert rows[0].tokens_used == 500
    assert rows[0].count == 2
    usage = await service.get_today_usage(store.id)
    assert usage.text_tokens == 500


@pytest.mark.asyncio
async def test_text_limit_counts_estimated_tokens(db_session, store):
    store.settings = {"ai_preferences": {"daily_limits": {"text_tokens": 1000}}}
    service = UsageLimitService(db_session)
    await service.record_usage(store.id, UsageOperation.TEXT_GENERATION, tokens_used=900)

    allowed = await service.check_usage_limit(store, UsageOperation.TEXT_GENERATION, estimated_tokens=100)
    blocked = await service.check_usage_limit(store, UsageOperation.TEXT_GENERATION, estimated_tokens=101)

    assert allowed.allowed is True
    assert allowed.remaining == 100
    assert blocked.allowed is False
    assert blocked.remaining == 100


@pytest.mark.asyncio
async def test_count_limits(db_session, store):
    store.settings = {"ai_preferences": {"daily_limits": {"bulk_batches": 1, "image_generation": 3}}}
    service = UsageLimitService(db_session)
    await service.record_usage(store.id, UsageOperation.BULK_BATCH)

    batch_check = await service.check_usage_limit(store, UsageOperation.BULK_BATCH)
    image_check = await service.check_usage_limit(store, UsageOperation.IMAGE_GENERATION, estimated_count=4)

    assert batch_check.allowed is False
    assert "bulk batch" in batch_check.reason
    assert image_check.allowed is False


@pytest.mark.asyncio
async def test_summary_warns_near_limit(db_session, store):
    store.settings = {"ai_preferences": {"daily_limits": {"image_generation": 10}}}
    service = UsageLimitService(db_session)
    await service.record_usage(store.id, UsageOperation.IMAGE_GENERATION, count=8)

    summary = await service.get_usage_summary(store)

    assert summary["percentages"]["image_generation"] == 80.0
    assert summary["warnings"] == ["Image generation usage at 80% of daily limit"]
    assert summary["usage"]["image_generation"] == 8
