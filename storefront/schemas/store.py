"""Store, domain and preview-token schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models.store import StoreStatus, StoreType


class StoreUpdate(BaseModel):
    """Store settings update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    store_type: Optional[StoreType] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    settings: Optional[dict] = None
    branding: Optional[dict] = None


class StoreResponse(BaseModel):
    id: str
    name: Optional[str] = None
    slug: str
    status: StoreStatus
    store_type: Optional[StoreType] = None
    currency: str
    published_at: Optional[datetime] = None
    settings: Optional[dict] = None
    branding: Optional[dict] = None
    subscription_plan: Optional[str] = None
    subscription_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublishValidationResponse(BaseModel):
    valid: bool
    missing: List[str] = []


class StoreDomainCreate(BaseModel):
    domain: str = Field(..., min_length=3, max_length=255, pattern=r"^[a-z0-9.-]+$")


class StoreDomainResponse(BaseModel):
    id: str
    domain: str
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PreviewTokenResponse(BaseModel):
    token: str
    expires_at: datetime

    class Config:
        from_attributes = True


class PreviewValidationResponse(BaseModel):
    valid: bool
    store_id: Optional[str] = None
