"""AI-generated product drafts awaiting merchant review."""

import enum
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, JSON, Numeric, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base, TimestampMixin, UUID
from storefront.models.product import AIConfidence


class DraftStatus(str, enum.Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    PERSISTED = "persisted"
    DISCARDED = "discarded"


class ProductDraft(Base, TimestampMixin):
    __tablename__ = "product_drafts"

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
    batch_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("bulk_batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    product_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    suggested_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    sizes: Mapped[list] = mapped_column(JSON, default=list)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    image_urls: Mapped[list] = mapped_column(JSON, default=list)
    primary_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    status: Mapped[DraftStatus] = mapped_column(SQLEnum(DraftStatus), default=DraftStatus.DRAFT)
    ai_confidence: Mapped[Optional[AIConfidence]] = mapped_column(
        SQLEnum(AIConfidence), nullable=True
    )
