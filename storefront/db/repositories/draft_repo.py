"""Product draft repository."""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.repositories.base import BaseRepository
from storefront.models.draft import DraftStatus, ProductDraft


class ProductDraftRepository(BaseRepository[ProductDraft]):
    def __init__(self, session: AsyncSession):
        super().__init__(ProductDraft, session)

    async def list_for_store(
        self,
        store_id: str,
        status: Optional[DraftStatus] = None,
        batch_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Sequence[ProductDraft]:
        query = select(ProductDraft).where(ProductDraft.store_id == store_id)
        if status:
            query = query.where(ProductDraft.status == status)
        if batch_id:
            query = query.where(ProductDraft.batch_id == batch_id)
        query = query.order_by(ProductDraft.created_at, ProductDraft.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_many(self, store_id: str, draft_ids: list[str]) -> Sequence[ProductDraft]:
        if not draft_ids:
            return []
        query = select(ProductDraft).where(
            ProductDraft.store_id == store_id, ProductDraft.id.in_(draft_ids)
        )
        result = await self.session.execute(query)
        return result.scalars().all()
