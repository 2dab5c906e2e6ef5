"""Subscription plan limits for a store."""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.db.repositories.product_repo import ProductRepository
from storefront.models.ai import AITask
from storefront.models.store import Store

# product_limit, ai_generation_limit (per month), transaction_fee (%)
PLANS: dict[str, tuple[int, int, float]] = {
    "starter": (100, 50, 1.5),
    "growth": (500, 200, 1.0),
    "pro": (5000, 1000, 0.5),
}


@dataclass
class PlanLimits:
    product_limit: int
    ai_generation_limit: int
    transaction_fee: float
    products_used: int
    ai_generations_used: int

    @property
    def can_create_products(self) -> bool:
        return self.products_used < self.product_limit

    @property
    def can_use_ai(self) -> bool:
        return self.ai_generations_used < self.ai_generation_limit

    @property
    def remaining_products(self) -> int:
        return max(0, self.product_limit - self.products_used)

    @property
    def approaching_product_limit(self) -> bool:
        return self.products_used >= self.product_limit * settings.usage_warning_ratio


def resolve_plan(store: Store) -> tuple[int, int, float]:
    """Limits of the store's active plan, or the free tier."""
    if store.subscription_plan in PLANS and store.subscription_status == "active":
        return PLANS[store.subscription_plan]
    return (
        settings.free_product_limit,
        settings.free_ai_generation_limit,
        settings.default_transaction_fee,
    )


async def get_plan_limits(session: AsyncSession, store: Store) -> PlanLimits:
    product_limit, ai_limit, fee = resolve_plan(store)
    products_used = await ProductRepository(session).count_for_store(store.id)

    month_start = datetime.now(timezone.utc).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    ai_used = (
        await session.execute(
            select(func.count())
            .select_from(AITask)
            .where(AITask.store_id == store.id, AITask.created_at >= month_start)
        )
    ).scalar_one()

    return PlanLimits(
        product_limit=product_limit,
        ai_generation_limit=ai_limit,
        transaction_fee=fee,
        products_used=products_used,
        ai_generations_used=ai_used,
    )
