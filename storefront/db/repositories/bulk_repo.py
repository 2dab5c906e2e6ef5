"""Bulk batch and generated asset repositories."""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.repositories.base import BaseRepository
from storefront.models.bulk import BatchStatus, BulkBatch, GeneratedAsset


class BulkBatchRepository(BaseRepository[BulkBatch]):
    def __init__(self, session: AsyncSession):
        super().__init__(BulkBatch, session)

    async def list_for_store(
        self,
        store_id: str,
        status: Optional[BatchStatus] = None,
        limit: int = 20,
    ) -> Sequence[BulkBatch]:
        query = select(BulkBatch).where(BulkBatch.store_id == store_id)
        if status:
            query = query.where(BulkBatch.status == status)
        query = query.order_by(BulkBatch.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_created_since(self, store_id: str, since: datetime) -> int:
        query = select(func.count()).select_from(BulkBatch).where(
            BulkBatch.store_id == store_id, BulkBatch.created_at >= since
        )
        result = await self.session.execute(query)
        return result.scalar_one()


class GeneratedAssetRepository(BaseRepository[GeneratedAsset]):
    def __init__(self, session: AsyncSession):
        super().__init__(GeneratedAsset, session)

    async def list_for_batch(self, batch_id: str) -> Sequence[GeneratedAsset]:
        query = (
            select(GeneratedAsset)
            .where(GeneratedAsset.batch_id == batch_id)
            .order_by(GeneratedAsset.created_at)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def link_to_draft(self, asset_ids: list[str], draft_id: str) -> None:
        if not asset_ids:
            return
        await self.session.execute(
            update(GeneratedAsset).where(GeneratedAsset.id.in_(asset_ids)).values(draft_id=draft_id)
        )

    async def link_drafts_to_product(self, draft_id: str, product_id: str) -> None:
        await self.session.execute(
            update(GeneratedAsset)
            .where(GeneratedAsset.draft_id == draft_id)
            .values(product_id=product_id)
        )
