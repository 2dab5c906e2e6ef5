"""Review AI-generated product drafts and turn them into products."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_store
from storefront.db.session import get_db
from storefront.models.draft import DraftStatus
from storefront.models.store import Store
from storefront.schemas.draft import (
    DraftResponse,
    DraftUpdate,
    PersistDraftsRequest,
    PersistDraftsResponse,
)
from storefront.services.draft_service import DraftService

router = APIRouter()


@router.get("/", response_model=List[DraftResponse])
async def list_drafts(
    status_filter: Optional[DraftStatus] = Query(None, alias="status"),
    batch_id: Optional[str] = Query(None),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await DraftService(db).list_drafts(store.id, status=status_filter, batch_id=batch_id)


@router.post("/persist", response_model=PersistDraftsResponse)
async def persist_drafts(
    request: PersistDraftsRequest,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
) -> PersistDraftsResponse:
    """Create catalog products from the selected drafts."""
    result = await DraftService(db).persist(store, request.draft_ids, publish=request.publish)
    await db.commit()
    return PersistDraftsResponse(
        created_product_ids=result.created_product_ids,
        skipped_draft_ids=result.skipped_draft_ids,
    )


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    return await DraftService(db).get_draft(store.id, draft_id)


@router.patch("/{draft_id}", response_model=DraftResponse)
async def update_draft(
    draft_id: str,
    draft_in: DraftUpdate,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    draft = await DraftService(db).update_draft(
        store.id, draft_id, draft_in.model_dump(exclude_unset=True)
    )
    await db.commit()
    return draft


@router.post("/{draft_id}/approve", response_model=DraftResponse)
async def approve_draft(
    draft_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    draft = await DraftService(db).approve(store.id, draft_id)
    await db.commit()
    return draft


@router.post("/{draft_id}/discard", response_model=DraftResponse)
async def discard_draft(
    draft_id: str,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    draft = await DraftService(db).discard(store.id, draft_id)
    await db.commit()
    return draft
