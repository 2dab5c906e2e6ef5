"""Pydantic schemas for request/response validation."""

from storefront.schemas.auth import LoginRequest, RefreshTokenRequest, TokenResponse
from storefront.schemas.store import StoreResponse, StoreUpdate
from storefront.schemas.product import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from storefront.schemas.draft import DraftResponse, DraftUpdate
from storefront.schemas.bulk import BulkBatchCreate, BulkBatchResponse
from storefront.schemas.order import CartResponse, CheckoutRequest, OrderResponse
from storefront.schemas.assistant import AssistantRequest, UsageSummaryResponse

__all__ = [
    "LoginRequest",
    "RefreshTokenRequest",
    "TokenResponse",
    "StoreResponse",
    "StoreUpdate",
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "DraftResponse",
    "DraftUpdate",
    "BulkBatchCreate",
    "BulkBatchResponse",
    "CartResponse",
    "CheckoutRequest",
    "OrderResponse",
    "AssistantRequest",
    "UsageSummaryResponse",
]
