"""Bulk batch schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.models.bulk import AssetType, BatchStatus


class BatchConfig(BaseModel):
    generate_lifestyle: bool = True
    remove_background: bool = True
    create_products: bool = True


class BulkBatchCreate(BaseModel):
    source_urls: List[str] = Field(default_factory=list)
    name: Optional[str] = Field(None, max_length=255)
    config: BatchConfig = Field(default_factory=BatchConfig)


class BulkBatchResponse(BaseModel):
    id: str
    store_id: str
    name: Optional[str] = None
    status: BatchStatus
    source_urls: List[str] = []
    total_images: int
    processed_count: int
    failed_count: int
    current_product: Optional[str] = None
    product_groups: List[Dict[str, Any]] = []
    config: Dict[str, Any] = {}
    error_log: List[Dict[str, Any]] = []
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GeneratedAssetResponse(BaseModel):
    id: str
    batch_id: Optional[str] = None
    draft_id: Optional[str] = None
    product_id: Optional[str] = None
    asset_type: AssetType
    source_url: str
    generated_url: str
    created_at: datetime

    class Config:
        from_attributes = True
