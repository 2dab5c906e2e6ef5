"""AI task log and usage counter repositories."""

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.repositories.base import BaseRepository
from storefront.models.ai import AITask, AIUsage, UsageOperation


class AITaskRepository(BaseRepository[AITask]):
    def __init__(self, session: AsyncSession):
        super().__init__(AITask, session)

    async def list_recent(self, store_id: str, limit: int = 50) -> Sequence[AITask]:
        query = (
            select(AITask)
            .where(AITask.store_id == store_id)
            .order_by(AITask.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return result.scalars().all()


class AIUsageRepository(BaseRepository[AIUsage]):
    def __init__(self, session: AsyncSession):
        super().__init__(AIUsage, session)

    async def get_for_day(
        self, store_id: str, operation: UsageOperation, day: date
    ) -> Optional[AIUsage]:
        query = select(AIUsage).where(
            AIUsage.store_id == store_id,
            AIUsage.operation == operation,
            AIUsage.usage_date == day,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_day(self, store_id: str, day: date) -> Sequence[AIUsage]:
        query = select(AIUsage).where(AIUsage.store_id == store_id, AIUsage.usage_date == day)
        result = await self.session.execute(query)
        return result.scalars().all()
