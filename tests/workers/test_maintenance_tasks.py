"""Tests for the background worker tasks."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import settings
from storefront.models.cart import Cart, CartStatus
from storefront.models.store import StorePreviewToken
from storefront.services.cart_service import CartService
from storefront.workers import bulk_tasks, maintenance_tasks


@pytest.fixture
def worker_sessions(async_engine, monkeypatch):
    factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(maintenance_tasks, "async_session_factory", factory)
    return factory


@pytest.mark.asyncio
async def test_expire_stale_carts(worker_sessions, db_session, store):
    old = datetime.now(timezone.utc) - timedelta(days=settings.cart_abandon_after_days + 1)
    db_session.add_all(
        [
            Cart(store_id=store.id, session_id="idle", updated_at=old),
            Cart(store_id=store.id, session_id="fresh"),
        ]
    )
    await db_session.commit()

    result = await maintenance_tasks._expire_stale_carts()

    assert result == {"status": "completed", "abandoned": 1}
    async with worker_sessions() as session:
        carts = (await session.execute(select(Cart).order_by(Cart.session_id))).scalars().all()
    assert [(c.session_id, c.status) for c in carts] == [
        ("fresh", CartStatus.ACTIVE),
        ("idle", CartStatus.ABANDONED),
    ]


@pytest.mark.asyncio
async def test_cart_changed_today_is_not_abandoned(worker_sessions, db_session, store, make_product):
    tee = await make_product("Logo Tee")
    cap = await make_product("Snapback", price="60.00")
    carts = CartService(db_session)
    cart = await carts.add_item(store, "returning", tee.id)
    cart.updated_at = datetime.now(timezone.utc) - timedelta(days=settings.cart_abandon_after_days + 5)
    await db_session.commit()

    await carts.add_item(store, "returning", cap.id)
    await db_session.commit()

    result = await maintenance_tasks._expire_stale_carts()

    assert result == {"status": "completed", "abandoned": 0}


@pytest.mark.asyncio
async def test_purge_expired_preview_tokens(worker_sessions, db_session, store):
    now = datetime.now(timezone.utc)
    db_session.add_all(
        [
            StorePreviewToken(store_id=store.id, token="a" * 64, expires_at=now - timedelta(hours=1)),
            StorePreviewToken(store_id=store.id, token="b" * 64, expires_at=now + timedelta(hours=1)),
        ]
    )
    await db_session.commit()

    result = await maintenance_tasks._purge_expired_preview_tokens()

    assert result == {"status": "completed", "removed": 1}


def test_enqueue_respects_setting(monkeypatch):
    calls = []
    monkeypatch.setattr(bulk_tasks.process_bulk_batch, "delay", lambda *args: calls.append(args))

    monkeypatch.setattr(settings, "bulk_processing_enqueue", False)
    bulk_tasks.enqueue_bulk_batch("batch-1", "store-1")
    assert calls == []

    monkeypatch.setattr(settings, "bulk_processing_enqueue", True)
    bulk_tasks.enqueue_bulk_batch("batch-1", "store-1")
    assert calls == [("batch-1", "store-1")]
