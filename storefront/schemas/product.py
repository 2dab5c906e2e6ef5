"""Product and Category schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models.product import AIConfidence, ProductStatus


# ===== Category Schemas =====


class CategoryBase(BaseModel):
    """Base category schema."""

    name: str = Field(..., min_length=1, max_length=100)
    name_ar: Optional[str] = Field(None, max_length=100)
    sort_order: int = Field(default=0)


class CategoryCreate(CategoryBase):
    """Category creation schema."""

    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")


class CategoryUpdate(BaseModel):
    """Category update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_ar: Optional[str] = Field(None, max_length=100)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(CategoryBase):
    """Category response schema."""

    id: str
    store_id: str
    slug: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ===== Product Schemas =====


class ProductBase(BaseModel):
    """Base product schema."""

    name: str = Field(..., min_length=1, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    category_id: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    inventory: int = Field(default=0, ge=0)
    images: List[str] = []
    sizes: List[str] = []
    gender: Optional[str] = None
    tags: List[str] = []


class ProductCreate(ProductBase):
    """Product creation schema."""

    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9-]+$")
    status: ProductStatus = ProductStatus.DRAFT


class ProductUpdate(BaseModel):
    """Product update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    category_id: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    inventory: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    gender: Optional[str] = None
    tags: Optional[List[str]] = None


class ProductResponse(ProductBase):
    """Product response schema."""

    id: str
    store_id: str
    slug: str
    currency: str
    status: ProductStatus
    image_url: Optional[str] = None
    batch_id: Optional[str] = None
    ai_generated: bool
    ai_confidence: Optional[AIConfidence] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    items: List[ProductResponse]
    total: int


class BulkPublishRequest(BaseModel):
    product_ids: List[str] = Field(..., min_length=1)
    publish: bool = True


class BulkPriceUpdate(BaseModel):
    product_ids: List[str] = Field(..., min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    percent_change: Optional[float] = Field(None, gt=-100, le=1000)


class BulkUpdateResponse(BaseModel):
    updated: int


# ===== Public storefront =====


class PublicProductResponse(BaseModel):
    """Product as shown to shoppers."""

    id: str
    name: str
    name_ar: Optional[str] = None
    slug: str
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    currency: str
    image_url: Optional[str] = None
    images: List[str] = []
    sizes: List[str] = []
    in_stock: bool

    class Config:
        from_attributes = True
