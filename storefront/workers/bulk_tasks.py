"""Background processing of bulk image batches."""

import asyncio
from typing import Optional

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.session import async_session_factory
from storefront.services.bulk.processor import BulkProcessor
from storefront.services.llm import get_llm_client
from storefront.workers.celery_app import celery_app

logger = get_logger(__name__)


async def _process_bulk_batch(batch_id: str, store_id: Optional[str] = None) -> dict:
    async with async_session_factory() as session:
        processor = BulkProcessor(session, get_llm_client())
        result = await processor.process_batch(batch_id, store_id)
    return {
        "status": "completed" if result.success else "failed",
        "batch_id": batch_id,
        "groups": len(result.product_groups),
        "drafts_created": result.products_created,
        "errors": len(result.errors),
    }


@celery_app.task(bind=True)
def process_bulk_batch(self, batch_id: str, store_id: Optional[str] = None) -> dict:
    """Group, edit and draft the images of one batch."""
    logger.info("Starting bulk batch task", extra={"batch_id": batch_id})
    return asyncio.run(_process_bulk_batch(batch_id, store_id))


def enqueue_bulk_batch(batch_id: str, store_id: Optional[str] = None) -> None:
    """Hand a committed batch to the worker queue."""
    if not settings.bulk_processing_enqueue:
        logger.info("Bulk enqueue disabled, batch left pending", extra={"batch_id": batch_id})
        return
    process_bulk_batch.delay(batch_id, store_id)
