"""Bulk photo-to-draft batches from the assistant."""

from typing import Any, Callable, Optional

from storefront.agents.base import BaseAgent
from storefront.agents.types import AgentResult
from storefront.core.errors import StorefrontError
from storefront.db.repositories.store_repo import StoreRepository
from storefront.services.bulk.batch_service import BulkBatchService

BatchEnqueuer = Callable[..., None]


class BulkDealsAgent(BaseAgent):
    agent_type = "bulk_deals"

    def __init__(self, *args: Any, enqueue: Optional[BatchEnqueuer] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.enqueue = enqueue

    async def execute(self, action: str, params: dict[str, Any]) -> AgentResult:
        try:
            params = self.validate_input(action, params)
            if action == "create_batch":
                return await self.create_batch(params)
            if action == "batch_status":
                return await self.batch_status(params["batch_id"])
        except (StorefrontError, ValueError) as exc:
            return self.format_error(action.replace("_", " "), exc)
        return self.format_error(action, f"Unknown bulk action: {action}")

    async def create_batch(self, params: dict[str, Any]) -> AgentResult:
        store = await StoreRepository(self.session).get(self.store_id, tenant_id=None)
        batch = await BulkBatchService(self.session).create_batch(
            store,
            params["image_urls"],
            name=params.get("name"),
            config={
                "generate_lifestyle": params["generate_lifestyle"],
                "remove_background": params["remove_background"],
                "create_products": params["create_products"],
            },
        )
        if self.enqueue is not None:
            # Queue only after the batch row is visible to the worker
            await self.session.commit()
            self.enqueue(batch.id, self.store_id)
        return self.format_success(
            {"batch_id": batch.id, "status": batch.status.value, "total_images": batch.total_images},
            f"Started processing {batch.total_images} images",
        )

    async def batch_status(self, batch_id: str) -> AgentResult:
        batch = await BulkBatchService(self.session).get_batch(self.store_id, batch_id)
        return self.format_success(
            {
                "batch_id": batch.id,
                "status": batch.status.value,
                "processed_count": batch.processed_count,
                "failed_count": batch.failed_count,
                "total_images": batch.total_images,
                "current_product": batch.current_product,
            }
        )
