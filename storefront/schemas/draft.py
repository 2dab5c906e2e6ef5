"""Product draft schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models.draft import DraftStatus
from storefront.models.product import AIConfidence


class DraftUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    suggested_price: Optional[Decimal] = Field(None, ge=0)
    sizes: Optional[List[str]] = None
    gender: Optional[str] = None
    primary_image_url: Optional[str] = None
    tags: Optional[List[str]] = None


class DraftResponse(BaseModel):
    id: str
    store_id: str
    batch_id: Optional[str] = None
    product_id: Optional[str] = None
    name: str
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = None
    suggested_price: Optional[Decimal] = None
    sizes: List[str] = []
    gender: Optional[str] = None
    image_urls: List[str] = []
    primary_image_url: Optional[str] = None
    tags: List[str] = []
    status: DraftStatus
    ai_confidence: Optional[AIConfidence] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PersistDraftsRequest(BaseModel):
    draft_ids: List[str] = Field(..., min_length=1)
    publish: bool = False


class PersistDraftsResponse(BaseModel):
    created_product_ids: List[str]
    skipped_draft_ids: List[str]
