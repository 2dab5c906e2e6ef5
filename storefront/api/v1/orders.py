"""Merchant order endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store, get_current_user
from storefront.db.session import get_db
from storefront.models.order import OrderStatus
from storefront.models.store import Store
from storefront.schemas.order import (
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
)
from storefront.services.order_service import OrderService

router = APIRouter()


@router.get("/", response_model=OrderListResponse)
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    items, total = await OrderService(db).list_orders(
        store.id, status=status_filter, skip=skip, limit=limit
    )
    return OrderListResponse(
        items=[OrderSummaryResponse.model_validate(o) for o in items],
        total=total,
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService(db).get_order(store.id, order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    status_in: OrderStatusUpdate,
    store: Store = Depends(get_current_store),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Move an order along its fulfilment workflow."""
    order = await OrderService(db).update_status(
        store.id,
        order_id,
        status_in.status,
        comment=status_in.comment,
        changed_by=current_user.get("user_id"),
    )
    await db.commit()
    return order
