"""Repository layer for data access."""

from storefront.db.repositories.base import BaseRepository, USE_CURRENT_TENANT
from storefront.db.repositories.store_repo import (
    StoreRepository,
    StoreDomainRepository,
    PreviewTokenRepository,
)
from storefront.db.repositories.user_repo import UserRepository
from storefront.db.repositories.product_repo import ProductRepository, CategoryRepository
from storefront.db.repositories.draft_repo import ProductDraftRepository
from storefront.db.repositories.bulk_repo import BulkBatchRepository, GeneratedAssetRepository
from storefront.db.repositories.order_repo import OrderRepository
from storefront.db.repositories.cart_repo import CartRepository
from storefront.db.repositories.ai_repo import AITaskRepository, AIUsageRepository

__all__ = [
    "BaseRepository",
    "USE_CURRENT_TENANT",
    "StoreRepository",
    "StoreDomainRepository",
    "PreviewTokenRepository",
    "UserRepository",
    "ProductRepository",
    "CategoryRepository",
    "ProductDraftRepository",
    "BulkBatchRepository",
    "GeneratedAssetRepository",
    "OrderRepository",
    "CartRepository",
    "AITaskRepository",
    "AIUsageRepository",
]
