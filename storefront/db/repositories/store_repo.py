"""Store, domain and preview-token repositories."""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.repositories.base import BaseRepository
from storefront.models.store import Store, StoreDomain, StorePreviewToken


class StoreRepository(BaseRepository[Store]):
    def __init__(self, session: AsyncSession):
        super().__init__(Store, session)

    async def get_by_slug(self, slug: str) -> Optional[Store]:
        return await self.get_by_field("slug", slug)


class StoreDomainRepository(BaseRepository[StoreDomain]):
    def __init__(self, session: AsyncSession):
        super().__init__(StoreDomain, session)

    async def get_store_slug_for_domain(self, domain: str) -> Optional[str]:
        """Slug of the store owning a verified custom domain."""
        query = (
            select(Store.slug)
            .join(StoreDomain, StoreDomain.store_id == Store.id)
            .where(StoreDomain.domain == domain, StoreDomain.is_verified == True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_store(self, store_id: str) -> Sequence[StoreDomain]:
        query = select(StoreDomain).where(StoreDomain.store_id == store_id).order_by(StoreDomain.domain)
        result = await self.session.execute(query)
        return result.scalars().all()


class PreviewTokenRepository(BaseRepository[StorePreviewToken]):
    def __init__(self, session: AsyncSession):
        super().__init__(StorePreviewToken, session)

    async def get_by_token(self, token: str) -> Optional[StorePreviewToken]:
        return await self.get_by_field("token", token)

    async def delete_expired(self, now: datetime, store_id: Optional[str] = None) -> int:
        """Delete expired tokens, optionally for one store. Returns rows removed."""
        stmt = delete(StorePreviewToken).where(StorePreviewToken.expires_at < now)
        if store_id:
            stmt = stmt.where(StorePreviewToken.store_id == store_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
