"""Shopper cart models."""

import enum
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.db.base import Base, TimestampMixin, UUID


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    CONVERTED = "converted"
    MERGED = "merged"
    ABANDONED = "abandoned"


class Cart(Base, TimestampMixin):
    """Anonymous shopping cart keyed by the storefront session id."""

    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    store_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[CartStatus] = mapped_column(SQLEnum(CartStatus), default=CartStatus.ACTIVE)

    items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at",
    )


class CartItem(Base, TimestampMixin):
    __tablename__ = "cart_items"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    cart_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    variant: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Name, image and price at the time the item was added
    product_snapshot: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    cart: Mapped["Cart"] = relationship("Cart", back_populates="items")
