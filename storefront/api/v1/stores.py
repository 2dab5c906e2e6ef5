"""Merchant store settings, publishing and domains."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store, get_current_superuser
from storefront.core.errors import ConflictError, NotFoundError
from storefront.db.repositories.store_repo import StoreDomainRepository, StoreRepository
from storefront.db.session import get_db
from storefront.models.store import Store, StoreStatus
from storefront.schemas.store import (
    PreviewTokenResponse,
    PublishValidationResponse,
    StoreDomainCreate,
    StoreDomainResponse,
    StoreResponse,
    StoreUpdate,
)
from storefront.services.store_lifecycle import StoreLifecycleService

router = APIRouter()


@router.get("/me", response_model=StoreResponse)
async def get_my_store(store: Store = Depends(get_current_store)) -> Store:
    return store


@router.patch("/me", response_model=StoreResponse)
async def update_my_store(
    store_in: StoreUpdate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> Store:
    for field, value in store_in.model_dump(exclude_unset=True).items():
        setattr(store, field, value)
    await db.commit()
    await db.refresh(store)
    return store


@router.get("/me/publish-validation", response_model=PublishValidationResponse)
async def validate_publishing(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> PublishValidationResponse:
    """What is still missing before the store can go live."""
    result = await StoreLifecycleService(db).validate_for_publishing(store)
    return PublishValidationResponse(valid=result.valid, missing=result.missing)


@router.post("/me/publish", response_model=StoreResponse)
async def publish_store(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> Store:
    store = await StoreLifecycleService(db).publish(store)
    await db.commit()
    return store


@router.post("/me/unpublish", response_model=StoreResponse)
async def unpublish_store(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> Store:
    store = await StoreLifecycleService(db).unpublish(store)
    await db.commit()
    return store


@router.post("/me/preview-token", response_model=PreviewTokenResponse, status_code=status.HTTP_201_CREATED)
async def create_preview_token(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    """Token that lets the owner view the storefront before publishing."""
    token = await StoreLifecycleService(db).create_preview_token(store)
    await db.commit()
    return token


@router.get("/me/domains", response_model=List[StoreDomainResponse])
async def list_domains(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await StoreDomainRepository(db).list_for_store(store.id)


@router.post("/me/domains", response_model=StoreDomainResponse, status_code=status.HTTP_201_CREATED)
async def add_domain(
    domain_in: StoreDomainCreate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    """Register a custom domain; it resolves once verified."""
    repo = StoreDomainRepository(db)
    if await repo.get_by_field("domain", domain_in.domain):
        raise ConflictError(f"Domain '{domain_in.domain}' is already registered")
    domain = await repo.create({"store_id": store.id, "domain": domain_in.domain, "is_verified": False})
    await db.commit()
    return domain


@router.delete("/me/domains/{domain_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_domain(
    domain_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = StoreDomainRepository(db)
    domain = await repo.get(domain_id, tenant_id=store.id)
    if domain is None:
        raise NotFoundError("Domain", domain_id)
    await repo.delete(domain)
    await db.commit()


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_store(
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete the store so onboarding can start over."""
    await StoreLifecycleService(db).delete_store(store)
    await db.commit()


@router.get("/", response_model=List[StoreResponse])
async def list_stores(
    status_filter: Optional[StoreStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: dict = Depends(get_current_superuser),
    db: AsyncSession = Depends(get_db),
) -> List[Store]:
    """All stores on the platform (platform admins only)."""
    query = select(Store).order_by(Store.created_at.desc()).offset(skip).limit(limit)
    if status_filter:
        query = query.where(Store.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/{store_id}/suspend", response_model=StoreResponse)
async def suspend_store(
    store_id: str,
    _: dict = Depends(get_current_superuser),
    db: AsyncSession = Depends(get_db),
) -> Store:
    store = await StoreRepository(db).get(store_id)
    if not store:
        raise NotFoundError("Store", store_id)
    await StoreLifecycleService(db).suspend(store)
    await db.commit()
    await db.refresh(store)
    return store
