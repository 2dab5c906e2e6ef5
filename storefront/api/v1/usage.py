"""AI usage and plan limits for the current store."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store
from storefront.db.session import get_db
from storefront.models.store import Store
from storefront.schemas.assistant import UsageSummaryResponse
from storefront.services.plan_limits import PLANS, get_plan_limits
from storefront.services.usage_limits import UsageLimitService

router = APIRouter()


@router.get("/", response_model=UsageSummaryResponse)
async def get_usage(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Today's usage against the store's daily limits."""
    return await UsageLimitService(db).get_usage_summary(store)


@router.get("/plan")
async def get_plan(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> dict:
    limits = await get_plan_limits(db, store)
    plan_active = store.subscription_plan in PLANS and store.subscription_status == "active"
    return {
        "plan": store.subscription_plan if plan_active else "free",
        "product_limit": limits.product_limit,
        "products_used": limits.products_used,
        "remaining_products": limits.remaining_products,
        "ai_generation_limit": limits.ai_generation_limit,
        "ai_generations_used": limits.ai_generations_used,
        "transaction_fee": limits.transaction_fee,
        "approaching_product_limit": limits.approaching_product_limit,
    }
