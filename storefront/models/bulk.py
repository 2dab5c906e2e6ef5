"""Bulk image-to-product batches and their generated assets."""

import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base, TimestampMixin, UUID


class BatchStatus(str, enum.Enum):
    """Batch lifecycle: pending -> analyzing -> processing -> completed | failed."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AssetType(str, enum.Enum):
    BACKGROUND_REMOVED = "background_removed"
    LIFESTYLE = "lifestyle"
    MODEL_SHOT = "model_shot"
    PRODUCT_IMAGE = "product_image"


class BulkBatch(Base, TimestampMixin):
    """A merchant upload of product photos to be grouped and turned into drafts.

    Attributes:
        product_groups: List of groups produced by the image grouper, each
            ``{"groupId", "productName", "category", "images", "mainImage"}``.
        config: ``{"generate_lifestyle", "remove_background", "create_products"}``.
        error_log: List of ``{"image", "error", "timestamp"}`` entries.
    """

    __tablename__ = "bulk_batches"

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
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[BatchStatus] = mapped_column(SQLEnum(BatchStatus), default=BatchStatus.PENDING)

    source_urls: Mapped[list] = mapped_column(JSON, default=list)
    total_images: Mapped[int] = mapped_column(Integer, default=0)
    processed_count: Mapped[int] = mapped_column(Integer, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, default=0)
    current_product: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    product_groups: Mapped[list] = mapped_column(JSON, default=list)
    config: Mapped[dict] = mapped_column(JSON, default=dict)
    error_log: Mapped[list] = mapped_column(JSON, default=list)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class GeneratedAsset(Base, TimestampMixin):
    """An image variant produced from a source photo."""

    __tablename__ = "generated_assets"

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
        ForeignKey("bulk_batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    product_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    draft_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("product_drafts.id", ondelete="SET NULL"),
        nullable=True,
    )
    asset_type: Mapped[AssetType] = mapped_column(SQLEnum(AssetType), nullable=False)
    source_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    generated_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
