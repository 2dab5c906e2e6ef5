"""Creating and querying bulk batches."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.errors import LimitExceededError, NotFoundError, ValidationFailedError
from storefront.core.logging import get_logger
from storefront.db.repositories.bulk_repo import BulkBatchRepository
from storefront.models.ai import UsageOperation
from storefront.models.bulk import BatchStatus, BulkBatch
from storefront.models.store import Store
from storefront.services.usage_limits import UsageLimitService, get_limits

logger = get_logger(__name__)

DEFAULT_BATCH_CONFIG = {
    "generate_lifestyle": True,
    "remove_background": True,
    "create_products": True,
}


class BulkBatchService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.batches = BulkBatchRepository(session)

    async def create_batch(
        self,
        store: Store,
        source_urls: list[str],
        name: Optional[str] = None,
        config: Optional[dict] = None,
    ) -> BulkBatch:
        """Validate the upload and the daily limit, then create a pending batch."""
        urls = [u for u in (source_urls or []) if u]
        if not urls:
            raise ValidationFailedError("sourceUrls are required")
        if len(urls) > settings.bulk_max_images:
            raise ValidationFailedError(f"Maximum {settings.bulk_max_images} images per batch")

        daily_limit = get_limits(store).bulk_batches
        day_start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        created_today = await self.batches.count_created_since(store.id, day_start)
        if created_today >= daily_limit:
            raise LimitExceededError(
                f"Daily limit reached ({daily_limit} batches per day)",
                {"limit": daily_limit, "used": created_today},
            )

        batch = await self.batches.create(
            {
                "store_id": store.id,
                "name": name or f"Batch {datetime.now(timezone.utc):%Y-%m-%d %H:%M}",
                "status": BatchStatus.PENDING,
                "source_urls": urls,
                "total_images": len(urls),
                "processed_count": 0,
                "failed_count": 0,
                "config": {**DEFAULT_BATCH_CONFIG, **(config or {})},
                "product_groups": [],
                "error_log": [],
            }
        )
        await UsageLimitService(self.session).record_usage(store.id, UsageOperation.BULK_BATCH)
        logger.info("Bulk batch created", extra={"batch_id": batch.id, "images": len(urls)})
        return batch

    async def get_batch(self, store_id: str, batch_id: str) -> BulkBatch:
        batch = await self.batches.get(batch_id, tenant_id=store_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)
        return batch

    async def list_batches(
        self, store_id: str, status: Optional[BatchStatus] = None, limit: int = 20
    ) -> Sequence[BulkBatch]:
        return await self.batches.list_for_store(store_id, status=status, limit=limit)
