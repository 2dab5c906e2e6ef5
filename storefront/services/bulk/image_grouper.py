"""Group product photos by the product they show.

Batches up to ``bulk_grouping_chunk_size`` images go to the model in one
call. Larger batches are analysed chunk by chunk and groups from different
chunks are merged when they look like the same product.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.services.llm import LLMClient, extract_json_array

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"

GROUPING_PROMPT = """Analyze these product images from a streetwear store and group them by product.

Images:
{image_list}

For each group, identify:
1. Which images show the same product (different angles/colors count as same product)
2. A suggested product name based on the image
3. The product category (t-shirts, hoodies, pants, jackets, accessories, etc.)
4. Which image should be the main/featured image

Return a JSON array with this exact format:
[
  {{
    "id": "group_1",
    "name": "Product Name",
    "category": "category",
    "mainImage": "image_url",
    "images": ["image_url1", "image_url2"]
  }}
]

Rules:
- Group similar products together (same item, different angles)
- Use descriptive streetwear-appropriate names
- Choose the best quality/angle image as mainImage
- Every image should be in exactly one group
- If an image is unclear, put it in its own group

Return ONLY valid JSON, no other text."""


@dataclass
class ProductGroup:
    id: str
    name: str
    category: str
    main_image: str
    images: list[str] = field(default_factory=list)
    processed_images: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "main_image": self.main_image,
            "images": list(self.images),
            "processed_images": [dict(p) for p in self.processed_images],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductGroup":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            category=str(data.get("category") or UNCATEGORIZED),
            main_image=str(data.get("main_image") or data.get("mainImage") or ""),
            images=[str(i) for i in data.get("images") or []],
            processed_images=list(data.get("processed_images") or []),
        )


def create_fallback_groups(image_urls: list[str]) -> list[ProductGroup]:
    """One group per image."""
    return [
        ProductGroup(
            id=f"group_{i}",
            name=f"Product {i}",
            category=UNCATEGORIZED,
            main_image=url,
            images=[url],
        )
        for i, url in enumerate(image_urls, start=1)
    ]


def validate_groups(raw_groups: list[Any], all_images: list[str]) -> list[ProductGroup]:
    """Make model output consistent with the input images.

    Unknown and already-assigned images are dropped, empty groups removed,
    the main image repaired, and images the model skipped appended as
    single-image groups.
    """
    known = set(all_images)
    used: set[str] = set()
    groups: list[ProductGroup] = []

    for raw in raw_groups:
        if not isinstance(raw, dict):
            continue
        group = ProductGroup.from_dict(raw)
        images = []
        for img in group.images:
            if img in known and img not in used and img not in images:
                images.append(img)
        if not images:
            continue
        used.update(images)
        group.images = images
        if group.main_image not in images:
            group.main_image = images[0]
        if not group.name:
            group.name = f"Product {len(groups) + 1}"
        groups.append(group)

    unused = [img for img in all_images if img not in used]
    for i, img in enumerate(unused, start=1):
        groups.append(
            ProductGroup(
                id=f"group_auto_{i}",
                name="Product (Auto)",
                category=UNCATEGORIZED,
                main_image=img,
                images=[img],
            )
        )

    return groups


def _significant_words(name: str) -> set[str]:
    return {w for w in name.lower().split() if len(w) > 2}


def is_similar_product(a: ProductGroup, b: ProductGroup) -> bool:
    """Same category and more than half of the significant name words shared."""
    if a.category != b.category:
        return False
    words_a = _significant_words(a.name)
    words_b = _significant_words(b.name)
    largest = max(len(words_a), len(words_b))
    if largest == 0:
        return False
    return len(words_a & words_b) / largest > settings.bulk_similarity_threshold


class ImageGrouper:
    def __init__(self, llm: LLMClient):
        self.llm = llm
        self.tokens_used = 0

    async def analyze_and_group(self, image_urls: list[str]) -> list[ProductGroup]:
        """One model call for a set of images; falls back to one group per image."""
        image_list = "\n".join(f"Image {i}: {url}" for i, url in enumerate(image_urls, start=1))
        try:
            response = await self.llm.generate_text(
                GROUPING_PROMPT.format(image_list=image_list),
                model=settings.llm_model_flash,
                image_urls=image_urls,
            )
        except Exception:
            logger.exception("Image grouping failed, using one group per image")
            return create_fallback_groups(image_urls)

        self.tokens_used += response.tokens_used
        raw = extract_json_array(response.text)
        if raw is None:
            logger.warning("Image grouping returned no JSON array", extra={"images": len(image_urls)})
            return create_fallback_groups(image_urls)
        return validate_groups(raw, image_urls)

    async def group(self, image_urls: list[str]) -> list[ProductGroup]:
        if not image_urls:
            return []

        chunk_size = settings.bulk_grouping_chunk_size
        if len(image_urls) <= chunk_size:
            return await self.analyze_and_group(image_urls)

        all_groups: list[ProductGroup] = []
        seen: set[str] = set()

        for start in range(0, len(image_urls), chunk_size):
            chunk = [url for url in image_urls[start:start + chunk_size] if url not in seen]
            if not chunk:
                continue

            for new_group in await self.analyze_and_group(chunk):
                existing: Optional[ProductGroup] = next(
                    (g for g in all_groups if is_similar_product(g, new_group)), None
                )
                if existing is not None:
                    existing.images.extend(new_group.images)
                else:
                    if any(g.id == new_group.id for g in all_groups):
                        new_group.id = f"{new_group.id}_{start // chunk_size + 1}"
                    all_groups.append(new_group)
                seen.update(new_group.images)

        return all_groups
