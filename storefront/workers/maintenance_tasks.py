"""Periodic cleanup of preview tokens and idle carts."""

import asyncio
from datetime import datetime, timedelta, timezone

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.repositories.cart_repo import CartRepository
from storefront.db.session import async_session_factory
from storefront.services.store_lifecycle import StoreLifecycleService
from storefront.workers.celery_app import celery_app

logger = get_logger(__name__)


async def _purge_expired_preview_tokens() -> dict:
    async with async_session_factory() as session:
        removed = await StoreLifecycleService(session).purge_expired_tokens()
        await session.commit()
    return {"status": "completed", "removed": removed}


async def _expire_stale_carts() -> dict:
    cutoff = datetime.now(timezone.utc) - timedelta(days=settings.cart_abandon_after_days)
    async with async_session_factory() as session:
        abandoned = await CartRepository(session).mark_abandoned(cutoff)
        await session.commit()
    return {"status": "completed", "abandoned": abandoned}


@celery_app.task(bind=True)
def purge_expired_preview_tokens(self) -> dict:
    """Delete storefront preview tokens past their expiry."""
    logger.info("Starting preview token purge")
    return asyncio.run(_purge_expired_preview_tokens())


@celery_app.task(bind=True)
def expire_stale_carts(self) -> dict:
    """Mark carts untouched for ``cart_abandon_after_days`` as abandoned."""
    logger.info("Starting stale cart expiry")
    return asyncio.run(_expire_stale_carts())
