"""API v1 router."""

from fastapi import APIRouter

from storefront.api.v1 import auth, stores, categories, products, drafts, bulk_batches
from storefront.api.v1 import orders, usage, assistant, media, storefront

router = APIRouter()

# Merchant admin APIs
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(stores.router, prefix="/stores", tags=["Stores"])
router.include_router(categories.router, prefix="/categories", tags=["Categories"])
router.include_router(products.router, prefix="/products", tags=["Products"])
router.include_router(drafts.router, prefix="/drafts", tags=["Product Drafts"])
router.include_router(bulk_batches.router, prefix="/bulk-batches", tags=["Bulk Batches"])
router.include_router(orders.router, prefix="/orders", tags=["Orders"])
router.include_router(usage.router, prefix="/usage", tags=["Usage"])
router.include_router(assistant.router, prefix="/assistant", tags=["AI Assistant"])

# Public APIs
router.include_router(media.router, prefix="/media", tags=["Media"])
router.include_router(storefront.router, prefix="/storefront", tags=["Storefront"])
