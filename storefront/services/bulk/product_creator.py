"""Turn processed image groups into product drafts."""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.repositories.ai_repo import AITaskRepository
from storefront.db.repositories.bulk_repo import GeneratedAssetRepository
from storefront.db.repositories.draft_repo import ProductDraftRepository
from storefront.db.repositories.product_repo import ProductRepository
from storefront.models.draft import DraftStatus
from storefront.models.product import AIConfidence
from storefront.services.bulk.image_grouper import ProductGroup
from storefront.services.llm import LLMClient, extract_json_object

logger = get_logger(__name__)

DEFAULT_SIZES = ["S", "M", "L", "XL"]
GENDERS = {"men", "women", "unisex"}
PROCESSED_VARIANTS = ("background_removed", "lifestyle", "model_shot")

CATEGORY_MAP = {
    "t-shirts": "t-shirts",
    "tshirts": "t-shirts",
    "shirts": "t-shirts",
    "hoodies": "hoodies",
    "sweaters": "hoodies",
    "pants": "pants",
    "jeans": "pants",
    "jackets": "jackets",
    "outerwear": "jackets",
    "accessories": "accessories",
    "hats": "accessories",
    "bags": "accessories",
    "shoes": "shoes",
    "footwear": "shoes",
}

DETAILS_PROMPT = """Generate product details for a streetwear item:

Product Name: {name}
Category: {category}
Number of images: {image_count}

Generate:
1. A refined product name (2-4 words, streetwear-appropriate)
2. A compelling product description (2-3 sentences)
3. Suggested available sizes
4. Target gender (men, women, or unisex)

Return as JSON:
{{
  "name": "Product Name",
  "description": "Product description",
  "suggestedSizes": ["S", "M", "L", "XL"],
  "gender": "unisex"
}}

Return ONLY valid JSON."""


@dataclass
class ProductDetails:
    name: str
    description: str
    sizes: list[str] = field(default_factory=lambda: list(DEFAULT_SIZES))
    gender: str = "unisex"
    from_model: bool = False
    tokens_used: int = 0


@dataclass
class PriceSuggestion:
    suggested: Decimal
    minimum: Decimal
    maximum: Decimal
    sample_size: int


def map_category(name: str) -> str:
    normalized = (name or "").lower().strip()
    return CATEGORY_MAP.get(normalized, normalized)


def collect_all_images(group: ProductGroup) -> list[str]:
    """Main image, then originals, then processed variants, without duplicates."""
    images: list[str] = []
    candidates = [group.main_image, *group.images]
    for processed in group.processed_images:
        candidates.extend(processed.get(v) for v in PROCESSED_VARIANTS)
    for url in candidates:
        if url and url not in images:
            images.append(url)
    return images


def fallback_details(group: ProductGroup) -> ProductDetails:
    return ProductDetails(
        name=group.name,
        description=(
            f"Premium {group.category} from our streetwear collection. "
            "Designed for style and comfort."
        ),
    )


class ProductCreator:
    def __init__(self, session: AsyncSession, llm: LLMClient):
        self.session = session
        self.llm = llm
        self.drafts = ProductDraftRepository(session)
        self.assets = GeneratedAssetRepository(session)
        self.tasks = AITaskRepository(session)

    async def generate_product_details(self, group: ProductGroup) -> ProductDetails:
        prompt = DETAILS_PROMPT.format(
            name=group.name, category=group.category, image_count=len(group.images)
        )
        try:
            response = await self.llm.generate_text(prompt, model=settings.llm_model_flash)
        except Exception:
            logger.exception("Product detail generation failed", extra={"group_id": group.id})
            return fallback_details(group)

        parsed = extract_json_object(response.text)
        if parsed is None:
            return fallback_details(group)

        sizes = parsed.get("suggestedSizes") or parsed.get("sizes")
        gender = str(parsed.get("gender") or "unisex").lower()
        return ProductDetails(
            name=str(parsed.get("name") or group.name),
            description=str(parsed.get("description") or fallback_details(group).description),
            sizes=[str(s) for s in sizes] if isinstance(sizes, list) and sizes else list(DEFAULT_SIZES),
            gender=gender if gender in GENDERS else "unisex",
            from_model=True,
            tokens_used=response.tokens_used,
        )

    async def create_draft_products(
        self,
        groups: list[ProductGroup],
        store_id: str,
        batch_id: str,
        asset_ids_by_group: Optional[dict[str, list[str]]] = None,
    ) -> int:
        """Create one draft per group; a failing group is logged and skipped."""
        asset_ids_by_group = asset_ids_by_group or {}
        created = 0

        for group in groups:
            try:
                details = await self.generate_product_details(group)
                images = collect_all_images(group)
                pricing = await self.suggest_pricing(group.category, store_id)
                draft = await self.drafts.create(
                    {
                        "store_id": store_id,
                        "batch_id": batch_id,
                        "name": details.name,
                        "description": details.description,
                        "category": map_category(group.category),
                        "suggested_price": pricing.suggested if pricing else None,
                        "sizes": details.sizes,
                        "gender": details.gender,
                        "image_urls": images,
                        "primary_image_url": group.main_image,
                        "tags": [],
                        "status": DraftStatus.DRAFT,
                        "ai_confidence": AIConfidence.HIGH if details.from_model else AIConfidence.LOW,
                    }
                )
                await self.assets.link_to_draft(asset_ids_by_group.get(group.id, []), draft.id)
                await self.tasks.create(
                    {
                        "store_id": store_id,
                        "agent": "product",
                        "task_type": "bulk_product_create",
                        "input_data": {"group_id": group.id, "batch_id": batch_id},
                        "output_data": {
                            "draft_id": draft.id,
                            "image_count": len(images),
                            "category": group.category,
                        },
                        "success": True,
                        "tokens_used": details.tokens_used,
                    }
                )
                created += 1
            except Exception:
                logger.exception("Error creating draft for group", extra={"group_id": group.id})

        return created

    async def suggest_pricing(self, category: str, store_id: str) -> Optional[PriceSuggestion]:
        """Average and range of priced products in the same category."""
        avg, low, high, count = await ProductRepository(self.session).price_stats(
            store_id, map_category(category)
        )
        if not count:
            return None
        return PriceSuggestion(
            suggested=Decimal(str(avg)).quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            minimum=Decimal(str(low)),
            maximum=Decimal(str(high)),
            sample_size=count,
        )
