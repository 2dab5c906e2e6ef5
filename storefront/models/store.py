"""Store (tenant) model and its domains and preview tokens."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.db.base import Base, TimestampMixin, UUID

if TYPE_CHECKING:
    from storefront.models.user import User
    from storefront.models.product import Product, Category


class StoreStatus(str, enum.Enum):
    """Store lifecycle status."""

    DRAFT = "draft"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class StoreType(str, enum.Enum):
    CLOTHING = "clothing"
    CAR_CARE = "car_care"
    GENERAL = "general"


class Store(Base, TimestampMixin):
    """A merchant's store. Every tenant-scoped row carries ``store_id``.

    Attributes:
        settings: Free-form store preferences. Recognised keys:
            {
                "ai_preferences": {
                    "daily_limits": {
                        "text_tokens": 500000,
                        "bulk_batches": 5,
                        "image_generation": 100,
                        "screenshot_analysis": 20
                    }
                }
            }
        branding: Theme colours and logo for the storefront.
    """

    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    status: Mapped[StoreStatus] = mapped_column(
        SQLEnum(StoreStatus), default=StoreStatus.DRAFT
    )
    store_type: Mapped[Optional[StoreType]] = mapped_column(SQLEnum(StoreType), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    branding: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Subscription
    subscription_plan: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    subscription_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(
        "User", back_populates="store", passive_deletes=True
    )
    domains: Mapped[list["StoreDomain"]] = relationship(
        "StoreDomain", back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
    preview_tokens: Mapped[list["StorePreviewToken"]] = relationship(
        "StorePreviewToken", back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_active(self) -> bool:
        return self.status == StoreStatus.ACTIVE


class StoreDomain(Base, TimestampMixin):
    """Custom domain mapped to a store."""

    __tablename__ = "store_domains"

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
    domain: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    store: Mapped["Store"] = relationship("Store", back_populates="domains")


class StorePreviewToken(Base, TimestampMixin):
    """Time-limited token that lets the owner view an unpublished store."""

    __tablename__ = "store_preview_tokens"

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
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    store: Mapped["Store"] = relationship("Store", back_populates="preview_tokens")
