"""Category and Product models."""

import enum
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import (
    String,
    Boolean,
    JSON,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.db.base import Base, TimestampMixin, UUID

if TYPE_CHECKING:
    from storefront.models.store import Store


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class AIConfidence(str, enum.Enum):
    """How much of an AI-generated record came from parsed model output."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(Base, TimestampMixin):
    """Store-specific product category."""

    __tablename__ = "categories"

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
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    products: Mapped[list["Product"]] = relationship(
        "Product", back_populates="category_rel", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("store_id", "slug", name="uq_category_store_slug"),
    )


class Product(Base, TimestampMixin):
    """Sellable product of a store.

    ``price`` is nullable so AI-created drafts can exist before the
    merchant sets one. ``category`` is the normalized category slug kept
    alongside the optional ``category_id`` FK.
    """

    __tablename__ = "products"

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
    category_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    batch_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("bulk_batches.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Identity
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Commerce
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    status: Mapped[ProductStatus] = mapped_column(
        SQLEnum(ProductStatus), default=ProductStatus.DRAFT
    )
    inventory: Mapped[int] = mapped_column(Integer, default=0)

    # Media and attributes
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    images: Mapped[list] = mapped_column(JSON, default=list)
    sizes: Mapped[list] = mapped_column(JSON, default=list)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    # AI provenance
    ai_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_confidence: Mapped[Optional[AIConfidence]] = mapped_column(
        SQLEnum(AIConfidence), nullable=True
    )

    store: Mapped["Store"] = relationship("Store")
    category_rel: Mapped[Optional["Category"]] = relationship(
        "Category", back_populates="products"
    )

    __table_args__ = (
        UniqueConstraint("store_id", "slug", name="uq_product_store_slug"),
    )
