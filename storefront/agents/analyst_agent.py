"""Store reporting actions."""

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import desc, func, select

from storefront.agents.base import BaseAgent
from storefront.agents.types import AgentResult
from storefront.db.repositories.order_repo import OrderRepository
from storefront.db.repositories.product_repo import ProductRepository
from storefront.models.order import Order, OrderItem, OrderStatus

PERIODS = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


class AnalystAgent(BaseAgent):
    agent_type = "analyst"

    async def execute(self, action: str, params: dict[str, Any]) -> AgentResult:
        try:
            params = self.validate_input(action, params)
        except ValueError as exc:
            return self.format_error(action.replace("_", " "), exc)

        if action == "store_summary":
            return await self.store_summary(params["period"])
        if action == "top_products":
            return await self.top_products(params["limit"])
        return self.format_error(action, f"Unknown analyst action: {action}")

    async def store_summary(self, period: str) -> AgentResult:
        since = datetime.now(timezone.utc) - PERIODS[period]
        by_status = await ProductRepository(self.session).count_by_status(self.store_id)
        order_count, revenue = await OrderRepository(self.session).revenue_since(self.store_id, since)
        return self.format_success(
            {
                "period": period,
                "products": {"total": sum(by_status.values()), **by_status},
                "orders": order_count,
                "revenue": str(revenue),
            },
            f"{order_count} orders in the last {period}",
        )

    async def top_products(self, limit: int) -> AgentResult:
        query = (
            select(
                OrderItem.product_id,
                OrderItem.product_name,
                func.sum(OrderItem.quantity).label("units"),
                func.sum(OrderItem.total_price).label("revenue"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.store_id == self.store_id, Order.status != OrderStatus.CANCELLED)
            .group_by(OrderItem.product_id, OrderItem.product_name)
            .order_by(desc("units"))
            .limit(limit)
        )
        rows = (await self.session.execute(query)).all()
        return self.format_success(
            {
                "products": [
                    {
                        "product_id": row.product_id,
                        "name": row.product_name,
                        "units": int(row.units or 0),
                        "revenue": str(row.revenue or 0),
                    }
                    for row in rows
                ]
            }
        )
