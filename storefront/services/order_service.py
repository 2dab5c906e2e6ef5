"""Checkout and order management."""

import secrets
import string
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import ConflictError, NotFoundError, ValidationFailedError
from storefront.core.logging import get_logger
from storefront.db.repositories.order_repo import OrderRepository
from storefront.models.cart import CartStatus
from storefront.models.order import Order, OrderItem, OrderStatus, OrderStatusHistory
from storefront.models.store import Store
from storefront.services.cart_service import CartService, cart_total
from storefront.services.plan_limits import resolve_plan

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
CENTS = Decimal("0.01")


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
    return f"ORD-{now:%Y%m%d}-{suffix}"


def platform_fee(subtotal: Decimal, fee_percent: float) -> Decimal:
    return (subtotal * Decimal(str(fee_percent)) / Decimal("100")).quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.orders = OrderRepository(session)

    async def _unique_order_number(self) -> str:
        while True:
            number = generate_order_number()
            if not await self.orders.order_number_exists(number):
                return number

    async def checkout(self, store: Store, session_id: str, customer: dict[str, Any]) -> Order:
        """Convert the session's cart into a pending order."""
        cart = await CartService(self.session).get_cart(store, session_id)
        if cart is None or not cart.items:
            raise ValidationFailedError("Cart is empty")

        subtotal = cart_total(cart).quantize(CENTS)
        _, _, fee_percent = resolve_plan(store)

        order = Order(
            store_id=store.id,
            cart_id=cart.id,
            order_number=await self._unique_order_number(),
            customer_name=customer["name"],
            customer_email=customer.get("email"),
            customer_phone=customer.get("phone"),
            shipping_address=customer.get("shipping_address"),
            payment_method=customer.get("payment_method"),
            notes=customer.get("notes"),
            status=OrderStatus.PENDING,
            subtotal=subtotal,
            platform_fee=platform_fee(subtotal, fee_percent),
            total_amount=subtotal,
            currency=store.currency,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    product_name=(item.product_snapshot or {}).get("name", ""),
                    variant=item.variant,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=(item.unit_price * item.quantity).quantize(CENTS),
                )
                for item in cart.items
            ],
            history=[OrderStatusHistory(status=OrderStatus.PENDING, comment="Order placed")],
        )
        self.session.add(order)
        cart.status = CartStatus.CONVERTED
        await self.session.flush()

        logger.info(
            "Order placed",
            extra={"store_id": store.id, "order_number": order.order_number, "total": str(order.total_amount)},
        )
        return order

    async def get_order(self, store_id: str, order_id: str) -> Order:
        order = await self.orders.get_with_details(store_id, order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(
        self,
        store_id: str,
        status: Optional[OrderStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[Sequence[Order], int]:
        return await self.orders.list_for_store(store_id, status=status, skip=skip, limit=limit)

    async def update_status(
        self,
        store_id: str,
        order_id: str,
        status: OrderStatus,
        comment: Optional[str] = None,
        changed_by: Optional[str] = None,
    ) -> Order:
        order = await self.get_order(store_id, order_id)
        if status not in ALLOWED_TRANSITIONS[order.status]:
            raise ConflictError(
                f"Cannot change order status from {order.status.value} to {status.value}"
            )
        order.status = status
        order.history.append(
            OrderStatusHistory(status=status, comment=comment, changed_by=changed_by)
        )
        await self.session.flush()
        logger.info(
            "Order status updated",
            extra={"order_id": order.id, "status": status.value},
        )
        return order
