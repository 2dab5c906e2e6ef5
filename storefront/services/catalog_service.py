"""Product and category operations shared by the admin API and the product agent."""

import re
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import ConflictError, LimitExceededError, NotFoundError
from storefront.core.logging import get_logger
from storefront.db.repositories.product_repo import CategoryRepository, ProductRepository
from storefront.models.product import Category, Product, ProductStatus
from storefront.models.store import Store
from storefront.services.plan_limits import get_plan_limits

logger = get_logger(__name__)

_NON_SLUG = re.compile(r"[^\w]+", re.UNICODE)


def slugify(value: str) -> str:
    slug = _NON_SLUG.sub("-", value.strip().lower()).strip("-_")
    return slug or "product"


class CatalogService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)

    async def unique_slug(self, store_id: str, name: str) -> str:
        base = slugify(name)
        slug = base
        suffix = 2
        while await self.products.slug_exists(store_id, slug):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def get_product(self, store_id: str, product_id: str) -> Product:
        product = await self.products.get(product_id, tenant_id=store_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def create_product(self, store: Store, data: dict[str, Any]) -> Product:
        """Create a product, enforcing the plan's product limit."""
        limits = await get_plan_limits(self.session, store)
        if not limits.can_create_products:
            raise LimitExceededError(
                f"Product limit reached ({limits.product_limit}) for the current plan",
                {"product_limit": limits.product_limit, "products_used": limits.products_used},
            )

        data = dict(data)
        if data.get("category_id"):
            await self.get_category(store.id, data["category_id"])
        data["store_id"] = store.id
        data["slug"] = await self.unique_slug(store.id, data.get("slug") or data["name"])
        data.setdefault("currency", store.currency)
        images = data.get("images") or []
        if images and not data.get("image_url"):
            data["image_url"] = images[0]

        product = await self.products.create(data)
        logger.info("Product created", extra={"store_id": store.id, "product_id": product.id})
        return product

    async def update_product(self, store_id: str, product_id: str, data: dict[str, Any]) -> Product:
        product = await self.get_product(store_id, product_id)
        if data.get("category_id"):
            await self.get_category(store_id, data["category_id"])
        if "slug" in data and data["slug"] and data["slug"] != product.slug:
            data["slug"] = await self.unique_slug(store_id, data["slug"])
        return await self.products.update(product, data)

    async def delete_product(self, store_id: str, product_id: str) -> None:
        product = await self.get_product(store_id, product_id)
        await self.products.delete(product)

    async def set_status_bulk(
        self, store_id: str, product_ids: list[str], status: ProductStatus
    ) -> int:
        return await self.products.set_status(store_id, product_ids, status)

    async def update_prices_bulk(
        self,
        store_id: str,
        product_ids: list[str],
        price: Optional[Decimal] = None,
        percent_change: Optional[float] = None,
    ) -> list[Product]:
        """Set an absolute price or apply a percentage change to each product."""
        updated = []
        for product in await self.products.get_many(store_id, product_ids):
            if price is not None:
                product.price = Decimal(str(price))
            elif percent_change is not None and product.price is not None:
                factor = Decimal(str(1 + percent_change / 100))
                product.price = (product.price * factor).quantize(Decimal("0.01"))
            updated.append(product)
        await self.session.flush()
        return updated

    async def search_products(self, store_id: str, **filters: Any) -> tuple[Sequence[Product], int]:
        return await self.products.search(store_id, **filters)

    # Categories

    async def get_category(self, store_id: str, category_id: str) -> Category:
        category = await self.categories.get(category_id, tenant_id=store_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def list_categories(self, store_id: str, include_inactive: bool = False) -> Sequence[Category]:
        return await self.categories.list_for_store(store_id, include_inactive=include_inactive)

    async def create_category(self, store_id: str, data: dict[str, Any]) -> Category:
        data = dict(data)
        data["slug"] = slugify(data.get("slug") or data["name"])
        if await self.categories.get_by_slug(store_id, data["slug"]):
            raise ConflictError(f"Category '{data['slug']}' already exists")
        data["store_id"] = store_id
        return await self.categories.create(data)

    async def update_category(self, store_id: str, category_id: str, data: dict[str, Any]) -> Category:
        category = await self.get_category(store_id, category_id)
        return await self.categories.update(category, data)

    async def delete_category(self, store_id: str, category_id: str) -> None:
        category = await self.get_category(store_id, category_id)
        await self.categories.delete(category)
