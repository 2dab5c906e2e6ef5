"""Merchant AI assistant."""

from typing import Callable, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.agents.orchestrator import Orchestrator
from storefront.agents.types import OrchestratorResult
from storefront.api.deps import get_batch_enqueuer, get_current_store, get_llm
from storefront.db.repositories.ai_repo import AITaskRepository
from storefront.db.session import get_db
from storefront.models.store import Store
from storefront.schemas.assistant import AITaskResponse, AssistantRequest
from storefront.services.llm import LLMClient

router = APIRouter()


@router.post("/", response_model=OrchestratorResult)
async def run_assistant(
    request: AssistantRequest,
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
    enqueue: Callable[..., None] = Depends(get_batch_enqueuer),
) -> OrchestratorResult:
    """Plan and run the merchant's request across the store agents.

    Destructive plans come back with ``confirmation_required``; resend the
    same message with ``confirmed=true`` to run them.
    """
    orchestrator = Orchestrator(db, store, llm, enqueue_batch=enqueue)
    result = await orchestrator.execute_request(
        request.message,
        context=request.context,
        image_urls=request.image_urls or None,
        confirmed=request.confirmed,
        history=[m.model_dump() for m in request.history],
    )
    await db.commit()
    return result


@router.get("/tasks", response_model=List[AITaskResponse])
async def list_tasks(
    limit: int = Query(50, ge=1, le=200),
    store: Store = Depends(get_current_store),
    db: AsyncSession = Depends(get_db),
):
    """Recent agent actions for this store."""
    return await AITaskRepository(db).list_recent(store.id, limit=limit)
