"""Order repository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.repositories.base import BaseRepository
from storefront.models.order import Order, OrderStatus


class OrderRepository(BaseRepository[Order]):
    def __init__(self, session: AsyncSession):
        super().__init__(Order, session)

    async def get_with_details(self, store_id: str, order_id: str) -> Optional[Order]:
        """Order with items and status history loaded."""
        query = (
            select(Order)
            .where(Order.id == order_id, Order.store_id == store_id)
            .options(selectinload(Order.items), selectinload(Order.history))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_store(
        self,
        store_id: str,
        status: Optional[OrderStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[Sequence[Order], int]:
        query = select(Order).where(Order.store_id == store_id)
        if status:
            query = query.where(Order.status == status)

        total = (
            await self.session.execute(select(func.count()).select_from(query.subquery()))
        ).scalar_one()

        query = (
            query.options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return result.scalars().all(), total

    async def order_number_exists(self, order_number: str) -> bool:
        query = select(func.count()).select_from(Order).where(Order.order_number == order_number)
        return (await self.session.execute(query)).scalar_one() > 0

    async def revenue_since(self, store_id: str, since: datetime) -> tuple[int, Decimal]:
        """Count and total of non-cancelled orders created since ``since``."""
        query = select(func.count(), func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.store_id == store_id,
            Order.created_at >= since,
            Order.status != OrderStatus.CANCELLED,
        )
        count, total = (await self.session.execute(query)).one()
        return count, Decimal(str(total))
