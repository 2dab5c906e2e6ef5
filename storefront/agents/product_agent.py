"""Catalog actions on behalf of the merchant."""

from decimal import Decimal
from typing import Any

from storefront.agents.base import BaseAgent
from storefront.agents.types import AgentResult
from storefront.core.errors import StorefrontError
from storefront.db.repositories.store_repo import StoreRepository
from storefront.models.product import Product, ProductStatus
from storefront.services.catalog_service import CatalogService


def product_summary(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "price": str(product.price) if product.price is not None else None,
        "status": product.status.value,
        "category": product.category,
        "image_url": product.image_url,
        "inventory": product.inventory,
    }


class ProductAgent(BaseAgent):
    agent_type = "product"

    async def execute(self, action: str, params: dict[str, Any]) -> AgentResult:
        handler = getattr(self, f"_{action}", None)
        if handler is None:
            return self.format_error(action, f"Unknown product action: {action}")
        try:
            params = self.validate_input(action, params)
            return await handler(params)
        except (StorefrontError, ValueError) as exc:
            return self.format_error(action.replace("_", " "), exc)

    @property
    def catalog(self) -> CatalogService:
        return CatalogService(self.session)

    async def _search_products(self, params: dict[str, Any]) -> AgentResult:
        status = ProductStatus(params["status"]) if params.get("status") else None
        products, total = await self.catalog.search_products(
            self.store_id,
            query_text=params.get("query"),
            category=params.get("category"),
            status=status,
            limit=params["limit"],
        )
        return self.format_success(
            {"products": [product_summary(p) for p in products], "total": total},
            f"Found {total} products",
        )

    async def _get_product(self, params: dict[str, Any]) -> AgentResult:
        product = await self.catalog.get_product(self.store_id, params["product_id"])
        return self.format_success(product_summary(product))

    async def _create_product(self, params: dict[str, Any]) -> AgentResult:
        store = await StoreRepository(self.session).get(self.store_id, tenant_id=None)
        images = params.pop("image_urls", [])
        product = await self.catalog.create_product(store, {**params, "images": images, "ai_generated": True})
        return self.format_success(product_summary(product), f"Created product {product.name}")

    async def _update_product(self, params: dict[str, Any]) -> AgentResult:
        product_id = params.pop("product_id")
        updates = {k: v for k, v in params.items() if v is not None}
        if "status" in updates:
            updates["status"] = ProductStatus(updates["status"])
        product = await self.catalog.update_product(self.store_id, product_id, updates)
        return self.format_success(product_summary(product), f"Updated {product.name}")

    async def _delete_product(self, params: dict[str, Any]) -> AgentResult:
        await self.catalog.delete_product(self.store_id, params["product_id"])
        return self.format_success({"deleted": [params["product_id"]]}, "Product deleted")

    async def _delete_products_bulk(self, params: dict[str, Any]) -> AgentResult:
        requested = params["product_ids"]
        found = {p.id: p for p in await self.catalog.products.get_many(self.store_id, requested)}
        missing = [pid for pid in requested if pid not in found]
        if not found:
            return self.format_error("delete products", "None of the products were found")

        deleted = []
        for product_id in [pid for pid in requested if pid in found]:
            await self.catalog.products.delete(found[product_id])
            deleted.append(product_id)
            self.report_progress(
                f"Deleted {len(deleted)}/{len(found)} products",
                {"current": len(deleted), "total": len(found)},
            )
        message = f"Deleted {len(deleted)} products"
        if missing:
            message += f", {len(missing)} not found"
        return self.format_success({"deleted": deleted, "missing": missing}, message)

    async def _publish_products_bulk(self, params: dict[str, Any]) -> AgentResult:
        status = ProductStatus.ACTIVE if params["publish"] else ProductStatus.DRAFT
        count = await self.catalog.set_status_bulk(self.store_id, params["product_ids"], status)
        verb = "Published" if params["publish"] else "Unpublished"
        return self.format_success({"updated": count, "status": status.value}, f"{verb} {count} products")

    async def _update_prices_bulk(self, params: dict[str, Any]) -> AgentResult:
        if params.get("price") is None and params.get("percent_change") is None:
            raise ValueError("Either price or percent_change is required")
        total = len(params["product_ids"])
        updated = []
        for index, product_id in enumerate(params["product_ids"], start=1):
            products = await self.catalog.update_prices_bulk(
                self.store_id,
                [product_id],
                price=Decimal(str(params["price"])) if params.get("price") is not None else None,
                percent_change=params.get("percent_change"),
            )
            updated.extend(product_summary(p) for p in products)
            self.report_progress(
                f"Updated prices {index}/{total}",
                {"current": index, "total": total},
            )
        return self.format_success({"products": updated}, f"Updated prices for {len(updated)} products")
