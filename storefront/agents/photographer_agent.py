"""Product photo editing on behalf of the merchant."""

from typing import Any, Callable, Optional

from storefront.agents.base import BaseAgent
from storefront.agents.types import AgentResult
from storefront.core.errors import NotFoundError, StorefrontError
from storefront.core.logging import get_logger
from storefront.db.repositories.product_repo import ProductRepository
from storefront.db.repositories.store_repo import StoreRepository
from storefront.models.ai import UsageOperation
from storefront.models.bulk import AssetType, GeneratedAsset
from storefront.services import asset_storage
from storefront.services.bulk.processor import BACKGROUND_REMOVAL_PROMPT, process_with_retry
from storefront.services.llm import LLMClient
from storefront.services.usage_limits import UsageLimitService

logger = get_logger(__name__)

AssetSaver = Callable[[str, bytes, str, str], str]

STYLE_PROMPTS = {
    "clean": "Clean white background, professional product photography, studio lighting, high resolution",
    "lifestyle": "Lifestyle photography, natural lighting, urban environment, streetwear aesthetic",
    "studio": "Professional studio shot, dramatic lighting, fashion photography style",
    "urban": "Urban street photography, graffiti background, authentic streetwear vibe",
}

LIFESTYLE_TEMPLATE = (
    "Product in {setting}, lifestyle photography, natural lighting, model wearing/using product, "
    "authentic streetwear vibe, high fashion editorial"
)
MODEL_SHOT_TEMPLATE = (
    "{gender} fashion model wearing the product, professional fashion photography, "
    "studio lighting, full body shot, streetwear editorial style"
)


class PhotographerAgent(BaseAgent):
    """Edits product photos with the image model.

    Every action is checked against the store's daily ``image_generation``
    limit up front and charged per generated image afterwards.
    """

    agent_type = "photographer"

    def __init__(
        self,
        *args: Any,
        llm: LLMClient,
        asset_saver: Optional[AssetSaver] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.llm = llm
        self.asset_saver = asset_saver or asset_storage.save_asset
        self.usage = UsageLimitService(self.session)

    async def execute(self, action: str, params: dict[str, Any]) -> AgentResult:
        handler = getattr(self, f"_{action}", None)
        if handler is None:
            return self.format_error(action, f"Unknown photographer action: {action}")
        try:
            params = self.validate_input(action, params)
            return await handler(params)
        except (StorefrontError, ValueError) as exc:
            return self.format_error(action.replace("_", " "), exc)

    async def _generate_image(self, params: dict[str, Any]) -> AgentResult:
        prompt = f"{params['prompt']}. {STYLE_PROMPTS[params['style']]}"
        jobs = [(params["image_urls"][0], prompt, AssetType.PRODUCT_IMAGE, "product")]
        return await self._run(jobs, params.get("product_id"), "Generated {count} images")

    async def _remove_background(self, params: dict[str, Any]) -> AgentResult:
        jobs = [(url, BACKGROUND_REMOVAL_PROMPT, AssetType.BACKGROUND_REMOVED, "bg") for url in params["image_urls"]]
        return await self._run(jobs, params.get("product_id"), "Removed background from {count} images")

    async def _generate_lifestyle(self, params: dict[str, Any]) -> AgentResult:
        prompt = LIFESTYLE_TEMPLATE.format(setting=params["setting"])
        jobs = [(url, prompt, AssetType.LIFESTYLE, "lifestyle") for url in params["image_urls"]]
        return await self._run(jobs, params.get("product_id"), "Generated {count} lifestyle shots")

    async def _generate_model_shot(self, params: dict[str, Any]) -> AgentResult:
        prompt = MODEL_SHOT_TEMPLATE.format(gender=params["gender"])
        jobs = [(url, prompt, AssetType.MODEL_SHOT, "model") for url in params["image_urls"]]
        return await self._run(jobs, params.get("product_id"), "Generated {count} model shots")

    async def _batch_process(self, params: dict[str, Any]) -> AgentResult:
        operations = {
            "remove_background": (BACKGROUND_REMOVAL_PROMPT, AssetType.BACKGROUND_REMOVED, "bg"),
            "generate_lifestyle": (
                LIFESTYLE_TEMPLATE.format(setting="urban street scene"),
                AssetType.LIFESTYLE,
                "lifestyle",
            ),
            "generate_model_shot": (
                MODEL_SHOT_TEMPLATE.format(gender="neutral"),
                AssetType.MODEL_SHOT,
                "model",
            ),
        }
        jobs = [
            (url, *operations[operation])
            for url in params["image_urls"]
            for operation in params["operations"]
        ]
        return await self._run(jobs, params.get("product_id"), "Processed {count} images")

    async def _run(
        self,
        jobs: list[tuple[str, str, AssetType, str]],
        product_id: Optional[str],
        message: str,
    ) -> AgentResult:
        if product_id and await ProductRepository(self.session).get(product_id, tenant_id=self.store_id) is None:
            raise NotFoundError("Product", product_id)
        store = await StoreRepository(self.session).get(self.store_id, tenant_id=None)
        check = await self.usage.check_usage_limit(
            store, UsageOperation.IMAGE_GENERATION, estimated_count=len(jobs)
        )
        if not check.allowed:
            return AgentResult(
                success=False,
                message="Daily image generation limit reached",
                error=check.reason,
            )

        generated: list[dict[str, Any]] = []
        errors: list[dict[str, str]] = []
        for index, (source_url, prompt, asset_type, prefix) in enumerate(jobs, start=1):
            try:
                generated.append(await self._generate(source_url, prompt, asset_type, prefix, product_id))
            except Exception as exc:
                logger.warning(
                    "Image generation failed",
                    extra={"store_id": self.store_id, "source_url": source_url, "error": str(exc)},
                )
                errors.append({"image_url": source_url, "operation": asset_type.value, "error": str(exc)})
            self.report_progress(
                f"Processed image {index}/{len(jobs)}",
                {"current": index, "total": len(jobs)},
            )

        if generated:
            await self.usage.record_usage(
                self.store_id, UsageOperation.IMAGE_GENERATION, count=len(generated)
            )
        if not generated:
            return AgentResult(
                success=False,
                message="Failed to generate any images",
                data={"images": [], "errors": errors},
                error=errors[0]["error"] if errors else None,
            )
        return self.format_success(
            {"images": generated, "errors": errors},
            message.format(count=len(generated)),
        )

    async def _generate(
        self,
        source_url: str,
        prompt: str,
        asset_type: AssetType,
        prefix: str,
        product_id: Optional[str],
    ) -> dict[str, Any]:
        async def attempt() -> str:
            image = await self.llm.edit_image(prompt, source_url)
            return self.asset_saver(self.store_id, image.data, image.mime_type, prefix)

        url = await process_with_retry(attempt)
        asset = GeneratedAsset(
            store_id=self.store_id,
            product_id=product_id,
            asset_type=asset_type,
            source_url=source_url,
            generated_url=url,
            prompt=prompt,
        )
        self.session.add(asset)
        await self.session.flush()
        return {
            "source_url": source_url,
            "image_url": url,
            "asset_id": asset.id,
            "asset_type": asset_type.value,
        }
