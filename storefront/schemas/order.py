"""Cart, checkout and order schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from storefront.models.order import OrderStatus
from storefront.services.cart_service import MAX_QUANTITY


# ===== Cart Schemas =====


class CartItemAdd(BaseModel):
    product_id: str
    variant: Optional[str] = None
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    variant: Optional[str] = None
    quantity: int
    unit_price: Decimal
    product_snapshot: Optional[dict] = None

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    id: Optional[str] = None
    items: List[CartItemResponse] = []
    item_count: int = 0
    total: Decimal = Decimal("0")
    currency: str


# ===== Checkout / Order Schemas =====


class CheckoutRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    shipping_address: Optional[dict] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class OrderItemResponse(BaseModel):
    id: str
    product_id: Optional[str] = None
    product_name: str
    variant: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class OrderStatusHistoryResponse(BaseModel):
    status: OrderStatus
    comment: Optional[str] = None
    changed_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    customer_name: str
    status: OrderStatus
    total_amount: Decimal
    currency: str
    created_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(OrderSummaryResponse):
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[dict] = None
    subtotal: Decimal
    platform_fee: Decimal
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemResponse] = []
    history: List[OrderStatusHistoryResponse] = []


class OrderListResponse(BaseModel):
    items: List[OrderSummaryResponse]
    total: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    comment: Optional[str] = Field(None, max_length=500)
