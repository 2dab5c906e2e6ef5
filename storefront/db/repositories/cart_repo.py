"""Cart repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.repositories.base import BaseRepository
from storefront.models.cart import Cart, CartStatus


class CartRepository(BaseRepository[Cart]):
    def __init__(self, session: AsyncSession):
        super().__init__(Cart, session)

    async def get_active(self, store_id: str, session_id: str) -> Optional[Cart]:
        """Active cart for a storefront session, with items loaded."""
        query = (
            select(Cart)
            .where(
                Cart.store_id == store_id,
                Cart.session_id == session_id,
                Cart.status == CartStatus.ACTIVE,
            )
            .options(selectinload(Cart.items))
            .order_by(Cart.created_at.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def mark_abandoned(self, updated_before: datetime) -> int:
        stmt = (
            update(Cart)
            .where(Cart.status == CartStatus.ACTIVE, Cart.updated_at < updated_before)
            .values(status=CartStatus.ABANDONED)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
