"""AI task log and daily usage counters."""

import enum
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base, TimestampMixin, UUID


class UsageOperation(str, enum.Enum):
    TEXT_GENERATION = "text_generation"
    BULK_BATCH = "bulk_batch"
    IMAGE_GENERATION = "image_generation"
    SCREENSHOT_ANALYSIS = "screenshot_analysis"


class AITask(Base, TimestampMixin):
    """One agent action executed on behalf of a store."""

    __tablename__ = "ai_tasks"

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
    agent: Mapped[str] = mapped_column(String(50), nullable=False)
    task_type: Mapped[str] = mapped_column(String(100), nullable=False)
    input_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    output_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, default=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tokens_used: Mapped[int] = mapped_column(Integer, default=0)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class AIUsage(Base, TimestampMixin):
    """Per-store, per-operation daily usage counter."""

    __tablename__ = "ai_usage"

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
    operation: Mapped[UsageOperation] = mapped_column(SQLEnum(UsageOperation), nullable=False)
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)
    count: Mapped[int] = mapped_column(Integer, default=0)
    tokens_used: Mapped[int] = mapped_column(Integer, default=0)
    cost_estimate: Mapped[Decimal] = mapped_column(Numeric(12, 6), default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("store_id", "operation", "usage_date", name="uq_ai_usage_store_op_date"),
    )
