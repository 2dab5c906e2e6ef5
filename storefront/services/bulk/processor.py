"""Run a bulk batch: group photos, generate image variants, create drafts."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.errors import NotFoundError
from storefront.core.logging import get_logger
from storefront.db.repositories.bulk_repo import BulkBatchRepository
from storefront.models.bulk import AssetType, BatchStatus, BulkBatch, GeneratedAsset
from storefront.services import asset_storage
from storefront.services.bulk.image_grouper import ImageGrouper, ProductGroup
from storefront.services.bulk.product_creator import ProductCreator
from storefront.services.llm import LLMClient

logger = get_logger(__name__)

BACKGROUND_REMOVAL_PROMPT = "Remove background, transparent background, product only, clean cutout"
LIFESTYLE_PROMPT = (
    "Product in urban street scene, lifestyle photography, natural lighting, "
    "authentic streetwear vibe"
)

# Substrings of image-generation errors worth retrying
RETRYABLE_MARKERS = ("503", "429", "500", "timeout")

AssetSaver = Callable[[str, bytes, str, str], str]


@dataclass
class ProcessedImage:
    original: str
    variants: dict[str, str] = field(default_factory=dict)
    # (asset type, generated url, prompt) for rows written after the group finishes
    assets: list[tuple[AssetType, str, str]] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        return {"original": self.original, **self.variants}


@dataclass
class ProcessingResult:
    success: bool
    product_groups: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)
    products_created: int = 0


def _is_retryable(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MARKERS) or isinstance(
        error, (asyncio.TimeoutError, TimeoutError)
    )


async def process_with_retry(fn: Callable[[], Awaitable[str]]) -> str:
    """Call ``fn`` with up to one retry per configured backoff delay."""
    delays = settings.agent_retry_backoff
    for attempt in range(len(delays) + 1):
        try:
            return await fn()
        except Exception as exc:
            logger.warning("Image generation attempt %d failed: %s", attempt + 1, exc)
            if attempt < len(delays) and _is_retryable(exc):
                await asyncio.sleep(delays[attempt])
                continue
            raise
    raise RuntimeError("unreachable")


class BulkProcessor:
    """Drives one batch through analyzing -> processing -> completed | failed.

    Progress is committed at each stage so pollers see it while the batch runs.
    """

    def __init__(
        self,
        session: AsyncSession,
        llm: LLMClient,
        asset_saver: Optional[AssetSaver] = None,
    ):
        self.session = session
        self.llm = llm
        self.batches = BulkBatchRepository(session)
        self.asset_saver = asset_saver or asset_storage.save_asset

    async def _update(self, batch: BulkBatch, **fields: Any) -> None:
        for key, value in fields.items():
            setattr(batch, key, value)
        await self.session.commit()

    async def _log_error(self, batch: BulkBatch, image: str, error: str) -> None:
        entry = {
            "image": image,
            "error": error,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        # Reassign so the JSON column is flagged dirty
        batch.error_log = [*(batch.error_log or []), entry]

    async def _generate_variant(
        self, store_id: str, source_url: str, prompt: str, prefix: str
    ) -> str:
        async def attempt() -> str:
            image = await self.llm.edit_image(prompt, source_url)
            return self.asset_saver(store_id, image.data, image.mime_type, prefix)

        return await process_with_retry(attempt)

    async def _process_image(
        self, store_id: str, url: str, config: dict, semaphore: asyncio.Semaphore
    ) -> ProcessedImage:
        result = ProcessedImage(original=url)
        async with semaphore:
            try:
                if config.get("remove_background"):
                    generated = await self._generate_variant(
                        store_id, url, BACKGROUND_REMOVAL_PROMPT, "bg"
                    )
                    result.variants["background_removed"] = generated
                    result.assets.append((AssetType.BACKGROUND_REMOVED, generated, "Background removal"))

                if config.get("generate_lifestyle"):
                    generated = await self._generate_variant(
                        store_id, url, LIFESTYLE_PROMPT, "lifestyle"
                    )
                    result.variants["lifestyle"] = generated
                    result.assets.append((AssetType.LIFESTYLE, generated, "Lifestyle shot generation"))
            except Exception as exc:
                result.error = str(exc) or exc.__class__.__name__
        return result

    async def process_group_images(
        self, batch: BulkBatch, group: ProductGroup
    ) -> tuple[list[ProcessedImage], list[str]]:
        """Process a group's images concurrently; returns results and created asset ids."""
        semaphore = asyncio.Semaphore(settings.max_parallel_images)
        results = await asyncio.gather(
            *(self._process_image(batch.store_id, url, batch.config or {}, semaphore) for url in group.images)
        )

        asset_ids: list[str] = []
        for processed in results:
            for asset_type, generated_url, prompt in processed.assets:
                asset = GeneratedAsset(
                    store_id=batch.store_id,
                    batch_id=batch.id,
                    asset_type=asset_type,
                    source_url=processed.original,
                    generated_url=generated_url,
                    prompt=prompt,
                )
                self.session.add(asset)
                await self.session.flush()
                asset_ids.append(asset.id)

            if processed.error:
                await self._log_error(batch, processed.original, processed.error)
                batch.failed_count = (batch.failed_count or 0) + 1
            else:
                batch.processed_count = (batch.processed_count or 0) + 1

        await self.session.commit()
        return results, asset_ids

    async def process_batch(self, batch_id: str, store_id: Optional[str] = None) -> ProcessingResult:
        batch = await self.batches.get(batch_id, tenant_id=store_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)

        logger.info("Bulk batch started", extra={"batch_id": batch.id, "images": len(batch.source_urls or [])})
        config = batch.config or {}

        try:
            await self._update(batch, status=BatchStatus.ANALYZING, current_product="Analyzing images...")

            grouper = ImageGrouper(self.llm)
            groups = await grouper.group(list(batch.source_urls or []))
            await self._update(
                batch,
                product_groups=[g.to_dict() for g in groups],
                status=BatchStatus.PROCESSING,
                current_product=f"Processing {len(groups)} product groups...",
            )

            asset_ids_by_group: dict[str, list[str]] = {}
            for index, group in enumerate(groups, start=1):
                await self._update(
                    batch, current_product=f"Processing: {group.name} ({index}/{len(groups)})"
                )
                processed, asset_ids = await self.process_group_images(batch, group)
                group.processed_images = [p.to_dict() for p in processed]
                asset_ids_by_group[group.id] = asset_ids

            products_created = 0
            if config.get("create_products"):
                await self._update(batch, current_product="Creating draft products...")
                creator = ProductCreator(self.session, self.llm)
                products_created = await creator.create_draft_products(
                    groups, batch.store_id, batch.id, asset_ids_by_group
                )

            await self._update(
                batch,
                status=BatchStatus.COMPLETED,
                completed_at=datetime.now(timezone.utc),
                current_product=None,
                product_groups=[g.to_dict() for g in groups],
            )
            logger.info(
                "Bulk batch completed",
                extra={
                    "batch_id": batch.id,
                    "groups": len(groups),
                    "drafts_created": products_created,
                    "failed_images": batch.failed_count,
                },
            )
            return ProcessingResult(
                success=True,
                product_groups=[g.to_dict() for g in groups],
                errors=[{"image": e["image"], "error": e["error"]} for e in batch.error_log or []],
                products_created=products_created,
            )
        except Exception as exc:
            logger.exception("Bulk processing error", extra={"batch_id": batch_id})
            await self.session.rollback()
            batch = await self.batches.get(batch_id, tenant_id=None)
            if batch is None:
                raise
            await self._log_error(batch, "batch", str(exc))
            await self._update(batch, status=BatchStatus.FAILED)
            return ProcessingResult(
                success=False,
                errors=[{"image": e["image"], "error": e["error"]} for e in batch.error_log or []],
            )
