"""Review and persistence of AI-generated product drafts."""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import ConflictError, NotFoundError
from storefront.core.logging import get_logger
from storefront.db.repositories.bulk_repo import GeneratedAssetRepository
from storefront.db.repositories.draft_repo import ProductDraftRepository
from storefront.models.draft import DraftStatus, ProductDraft
from storefront.models.product import ProductStatus
from storefront.models.store import Store
from storefront.services.catalog_service import CatalogService

logger = get_logger(__name__)

EDITABLE_STATUSES = {DraftStatus.DRAFT, DraftStatus.APPROVED}


@dataclass
class PersistResult:
    created_product_ids: list[str] = field(default_factory=list)
    skipped_draft_ids: list[str] = field(default_factory=list)


class DraftService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.drafts = ProductDraftRepository(session)

    async def get_draft(self, store_id: str, draft_id: str) -> ProductDraft:
        draft = await self.drafts.get(draft_id, tenant_id=store_id)
        if draft is None:
            raise NotFoundError("Draft", draft_id)
        return draft

    async def list_drafts(
        self,
        store_id: str,
        status: Optional[DraftStatus] = None,
        batch_id: Optional[str] = None,
    ) -> Sequence[ProductDraft]:
        return await self.drafts.list_for_store(store_id, status=status, batch_id=batch_id)

    async def update_draft(self, store_id: str, draft_id: str, data: dict[str, Any]) -> ProductDraft:
        draft = await self.get_draft(store_id, draft_id)
        if draft.status not in EDITABLE_STATUSES:
            raise ConflictError(f"Draft is {draft.status.value} and can no longer be edited")
        return await self.drafts.update(draft, data)

    async def approve(self, store_id: str, draft_id: str) -> ProductDraft:
        return await self._transition(store_id, draft_id, DraftStatus.APPROVED)

    async def discard(self, store_id: str, draft_id: str) -> ProductDraft:
        return await self._transition(store_id, draft_id, DraftStatus.DISCARDED)

    async def _transition(self, store_id: str, draft_id: str, status: DraftStatus) -> ProductDraft:
        draft = await self.get_draft(store_id, draft_id)
        if draft.status not in EDITABLE_STATUSES:
            raise ConflictError(f"Draft is {draft.status.value} and cannot be {status.value}")
        draft.status = status
        await self.session.flush()
        return draft

    async def persist(self, store: Store, draft_ids: list[str], publish: bool = False) -> PersistResult:
        """Create products from drafts. Already persisted or discarded drafts are skipped."""
        catalog = CatalogService(self.session)
        assets = GeneratedAssetRepository(self.session)
        result = PersistResult()

        drafts = list(await self.drafts.get_many(store.id, draft_ids))
        found = {d.id for d in drafts}
        missing = [d for d in draft_ids if d not in found]

        for draft in drafts:
            if draft.status not in EDITABLE_STATUSES:
                result.skipped_draft_ids.append(draft.id)
                continue

            images = list(draft.image_urls or [])
            product = await catalog.create_product(
                store,
                {
                    "name": draft.name,
                    "name_ar": draft.name_ar,
                    "description": draft.description,
                    "description_ar": draft.description_ar,
                    "category": draft.category,
                    "price": draft.suggested_price,
                    "images": images,
                    "image_url": draft.primary_image_url or (images[0] if images else None),
                    "sizes": list(draft.sizes or []),
                    "gender": draft.gender,
                    "tags": list(draft.tags or []),
                    "batch_id": draft.batch_id,
                    "status": ProductStatus.ACTIVE if publish and draft.suggested_price is not None else ProductStatus.DRAFT,
                    "ai_generated": True,
                    "ai_confidence": draft.ai_confidence,
                },
            )
            draft.product_id = product.id
            draft.status = DraftStatus.PERSISTED
            await assets.link_drafts_to_product(draft.id, product.id)
            result.created_product_ids.append(product.id)

        await self.session.flush()
        if missing:
            logger.warning("Persist requested for unknown drafts", extra={"draft_ids": missing})
            result.skipped_draft_ids.extend(missing)

        logger.info(
            "Drafts persisted",
            extra={"store_id": store.id, "created_count": len(result.created_product_ids)},
        )
        return result
