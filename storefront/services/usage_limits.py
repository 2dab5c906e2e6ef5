"""Daily AI usage limits per store.

Limits come from ``store.settings["ai_preferences"]["daily_limits"]`` with
per-key fallback to the configured defaults. Checks fail open: if usage
cannot be read, the operation is allowed and the error is logged.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.repositories.ai_repo import AIUsageRepository
from storefront.models.ai import UsageOperation
from storefront.models.store import Store

logger = get_logger(__name__)


@dataclass
class DailyLimits:
    text_tokens: int
    bulk_batches: int
    image_generation: int
    screenshot_analysis: int


@dataclass
class DailyUsage:
    text_tokens: int = 0
    bulk_batches: int = 0
    image_generation: int = 0
    screenshot_analysis: int = 0


@dataclass
class UsageCheck:
    allowed: bool
    reason: Optional[str] = None
    remaining: Optional[int] = None


def today() -> date:
    return datetime.now(timezone.utc).date()


def get_limits(store: Store) -> DailyLimits:
    prefs = (store.settings or {}).get("ai_preferences") or {}
    configured = prefs.get("daily_limits") or {}
    return DailyLimits(
        text_tokens=int(configured.get("text_tokens", settings.default_daily_text_tokens)),
        bulk_batches=int(configured.get("bulk_batches", settings.default_daily_bulk_batches)),
        image_generation=int(
            configured.get("image_generation", settings.default_daily_image_generation)
        ),
        screenshot_analysis=int(
            configured.get("screenshot_analysis", settings.default_daily_screenshot_analysis)
        ),
    )


class UsageLimitService:
    """Reads and records daily AI usage for stores."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = AIUsageRepository(session)

    async def get_today_usage(self, store_id: str) -> DailyUsage:
        usage = DailyUsage()
        for row in await self.repo.list_for_day(store_id, today()):
            if row.operation == UsageOperation.TEXT_GENERATION:
                usage.text_tokens += row.tokens_used
            elif row.operation == UsageOperation.BULK_BATCH:
                usage.bulk_batches += row.count
            elif row.operation == UsageOperation.IMAGE_GENERATION:
                usage.image_generation += row.count
            elif row.operation == UsageOperation.SCREENSHOT_ANALYSIS:
                usage.screenshot_analysis += row.count
        return usage

    async def check_usage_limit(
        self,
        store: Store,
        operation: UsageOperation,
        estimated_tokens: int = 0,
        estimated_count: int = 1,
    ) -> UsageCheck:
        try:
            limits = get_limits(store)
            usage = await self.get_today_usage(store.id)
        except SQLAlchemyError:
            logger.exception("Usage lookup failed, allowing operation")
            return UsageCheck(allowed=True)

        if operation == UsageOperation.TEXT_GENERATION:
            remaining = limits.text_tokens - usage.text_tokens
            if remaining < estimated_tokens:
                return UsageCheck(False, f"Daily text limit reached ({limits.text_tokens} tokens)", max(0, remaining))
            return UsageCheck(True, remaining=remaining)

        if operation == UsageOperation.BULK_BATCH:
            remaining = limits.bulk_batches - usage.bulk_batches
            if remaining <= 0:
                return UsageCheck(False, f"Daily bulk batch limit reached ({limits.bulk_batches} batches)", 0)
            return UsageCheck(True, remaining=remaining)

        if operation == UsageOperation.IMAGE_GENERATION:
            remaining = limits.image_generation - usage.image_generation
            if remaining < estimated_count:
                return UsageCheck(False, f"Daily image limit reached ({limits.image_generation} images)", max(0, remaining))
            return UsageCheck(True, remaining=remaining)

        remaining = limits.screenshot_analysis - usage.screenshot_analysis
        if remaining <= 0:
            return UsageCheck(False, f"Daily screenshot limit reached ({limits.screenshot_analysis})", 0)
        return UsageCheck(True, remaining=remaining)

    async def record_usage(
        self,
        store_id: str,
        operation: UsageOperation,
        tokens_used: int = 0,
        count: int = 1,
        cost_estimate: Decimal = Decimal("0"),
    ) -> None:
        """Add to today's counter row, creating it on first use."""
        row = await self.repo.get_for_day(store_id, operation, today())
        if row is None:
            await self.repo.create(
                {
                    "store_id": store_id,
                    "operation": operation,
                    "usage_date": today(),
                    "count": count,
                    "tokens_used": tokens_used,
                    "cost_estimate": cost_estimate,
                }
            )
            return
        await self.repo.update(
            row,
            {
                "count": row.count + count,
                "tokens_used": row.tokens_used + tokens_used,
                "cost_estimate": (row.cost_estimate or Decimal("0")) + cost_estimate,
            },
        )

    async def get_usage_summary(self, store: Store) -> dict:
        limits = get_limits(store)
        usage = await self.get_today_usage(store.id)

        def pct(used: int, limit: int) -> float:
            return round(used / limit * 100, 1) if limit > 0 else 100.0

        percentages = {
            "text_tokens": pct(usage.text_tokens, limits.text_tokens),
            "bulk_batches": pct(usage.bulk_batches, limits.bulk_batches),
            "image_generation": pct(usage.image_generation, limits.image_generation),
            "screenshot_analysis": pct(usage.screenshot_analysis, limits.screenshot_analysis),
        }
        threshold = settings.usage_warning_ratio * 100
        warnings = [
            f"{name.replace('_', ' ').capitalize()} usage at {value:g}% of daily limit"
            for name, value in percentages.items()
            if value >= threshold
        ]
        return {
            "date": today().isoformat(),
            "limits": limits.__dict__,
            "usage": usage.__dict__,
            "percentages": percentages,
            "warnings": warnings,
        }
