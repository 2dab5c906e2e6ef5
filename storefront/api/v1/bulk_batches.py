"""Bulk photo upload batches."""

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_batch_enqueuer, get_current_store, get_llm
from storefront.core.errors import ConflictError
from storefront.db.repositories.bulk_repo import GeneratedAssetRepository
from storefront.db.session import get_db
from storefront.models.bulk import BatchStatus
from storefront.models.store import Store
from storefront.schemas.bulk import BulkBatchCreate, BulkBatchResponse, GeneratedAssetResponse
from storefront.services.bulk.batch_service import BulkBatchService
from storefront.services.bulk.processor import BulkProcessor
from storefront.services.llm import LLMClient

router = APIRouter()


@router.post("/", response_model=BulkBatchResponse, status_code=status.HTTP_201_CREATED)
async def create_batch(
    batch_in: BulkBatchCreate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
    enqueue: Callable[..., None] = Depends(get_batch_enqueuer),
):
    """Create a pending batch and queue it for processing."""
    batch = await BulkBatchService(db).create_batch(
        store,
        batch_in.source_urls,
        name=batch_in.name,
        config=batch_in.config.model_dump(),
    )
    await db.commit()
    enqueue(batch.id, store.id)
    return batch


@router.get("/", response_model=List[BulkBatchResponse])
async def list_batches(
    status_filter: Optional[BatchStatus] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await BulkBatchService(db).list_batches(store.id, status=status_filter, limit=limit)


@router.get("/{batch_id}", response_model=BulkBatchResponse)
async def get_batch(
    batch_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    """Batch with its live progress counters."""
    return await BulkBatchService(db).get_batch(store.id, batch_id)


@router.get("/{batch_id}/assets", response_model=List[GeneratedAssetResponse])
async def list_batch_assets(
    batch_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    batch = await BulkBatchService(db).get_batch(store.id, batch_id)
    return await GeneratedAssetRepository(db).list_for_batch(batch.id)


@router.post("/{batch_id}/process", response_model=BulkBatchResponse)
async def process_batch(
    batch_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """Run a pending batch in the request, for setups without a worker."""
    service = BulkBatchService(db)
    batch = await service.get_batch(store.id, batch_id)
    if batch.status != BatchStatus.PENDING:
        raise ConflictError(f"Batch is already {batch.status.value}")
    await BulkProcessor(db, llm).process_batch(batch.id, store.id)
    return await service.get_batch(store.id, batch_id)
