"""Category endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store
from storefront.db.session import get_db
from storefront.models.store import Store
from storefront.schemas.product import CategoryCreate, CategoryResponse, CategoryUpdate
from storefront.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(
    include_inactive: bool = Query(False),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService(db).list_categories(store.id, include_inactive=include_inactive)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_in: CategoryCreate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    category = await CatalogService(db).create_category(store.id, category_in.model_dump())
    await db.commit()
    return category


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    category = await CatalogService(db).update_category(
        store.id, category_id, category_in.model_dump(exclude_unset=True)
    )
    await db.commit()
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> None:
    await CatalogService(db).delete_category(store.id, category_id)
    await db.commit()
