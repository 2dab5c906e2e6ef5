"""SQLAlchemy models."""

from storefront.models.store import Store, StoreDomain, StorePreviewToken, StoreStatus, StoreType
from storefront.models.user import User
from storefront.models.product import Category, Product, ProductStatus, AIConfidence
from storefront.models.draft import ProductDraft, DraftStatus
from storefront.models.cart import Cart, CartItem, CartStatus
from storefront.models.order import Order, OrderItem, OrderStatusHistory, OrderStatus
from storefront.models.bulk import BulkBatch, GeneratedAsset, BatchStatus, AssetType
from storefront.models.ai import AITask, AIUsage, UsageOperation

__all__ = [
    "Store",
    "StoreDomain",
    "StorePreviewToken",
    "StoreStatus",
    "StoreType",
    "User",
    "Category",
    "Product",
    "ProductStatus",
    "AIConfidence",
    "ProductDraft",
    "DraftStatus",
    "Cart",
    "CartItem",
    "CartStatus",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "OrderStatus",
    "BulkBatch",
    "GeneratedAsset",
    "BatchStatus",
    "AssetType",
    "AITask",
    "AIUsage",
    "UsageOperation",
]
