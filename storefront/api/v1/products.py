"""Merchant product endpoints."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store
from storefront.core.errors import ValidationFailedError
from storefront.db.session import get_db
from storefront.models.product import ProductStatus
from storefront.models.store import Store
from storefront.schemas.product import (
    BulkPriceUpdate,
    BulkPublishRequest,
    BulkUpdateResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/", response_model=ProductListResponse)
async def list_products(
    q: Optional[str] = Query(None, description="Search name and description"),
    category: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    status_filter: Optional[ProductStatus] = Query(None, alias="status"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> ProductListResponse:
    items, total = await CatalogService(db).search_products(
        store.id,
        query_text=q,
        category=category,
        category_id=category_id,
        status=status_filter,
        min_price=min_price,
        max_price=max_price,
        skip=skip,
        limit=limit,
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in items],
        total=total,
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_in: ProductCreate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    product = await CatalogService(db).create_product(store, product_in.model_dump())
    await db.commit()
    return product


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService(db).get_product(store.id, product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_in: ProductUpdate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    product = await CatalogService(db).update_product(
        store.id, product_id, product_in.model_dump(exclude_unset=True)
    )
    await db.commit()
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> None:
    await CatalogService(db).delete_product(store.id, product_id)
    await db.commit()


@router.post("/bulk/publish", response_model=BulkUpdateResponse)
async def bulk_publish(
    request: BulkPublishRequest,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> BulkUpdateResponse:
    """Publish (active) or unpublish (draft) several products."""
    new_status = ProductStatus.ACTIVE if request.publish else ProductStatus.DRAFT
    updated = await CatalogService(db).set_status_bulk(store.id, request.product_ids, new_status)
    await db.commit()
    return BulkUpdateResponse(updated=updated)


@router.post("/bulk/prices", response_model=BulkUpdateResponse)
async def bulk_update_prices(
    request: BulkPriceUpdate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> BulkUpdateResponse:
    if request.price is None and request.percent_change is None:
        raise ValidationFailedError("Either price or percent_change is required")
    products = await CatalogService(db).update_prices_bulk(
        store.id,
        request.product_ids,
        price=request.price,
        percent_change=request.percent_change,
    )
    await db.commit()
    return BulkUpdateResponse(updated=len(products))
