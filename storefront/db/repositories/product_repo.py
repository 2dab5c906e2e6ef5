"""Category and Product repositories."""

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.repositories.base import BaseRepository
from storefront.models.product import Category, Product, ProductStatus


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def get_by_slug(self, store_id: str, slug: str) -> Optional[Category]:
        query = select(Category).where(Category.store_id == store_id, Category.slug == slug)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_store(
        self, store_id: str, include_inactive: bool = False
    ) -> Sequence[Category]:
        """Categories of a store sorted by sort_order, then name."""
        query = select(Category).where(Category.store_id == store_id)
        if not include_inactive:
            query = query.where(Category.is_active == True)
        query = query.order_by(Category.sort_order, Category.name)
        result = await self.session.execute(query)
        return result.scalars().all()


class ProductRepository(BaseRepository[Product]):
    """Repository for Product model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)

    async def get_by_slug(self, store_id: str, slug: str) -> Optional[Product]:
        query = select(Product).where(Product.store_id == store_id, Product.slug == slug)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def slug_exists(self, store_id: str, slug: str) -> bool:
        query = select(func.count()).select_from(Product).where(
            Product.store_id == store_id, Product.slug == slug
        )
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def search(
        self,
        store_id: str,
        query_text: Optional[str] = None,
        category: Optional[str] = None,
        category_id: Optional[str] = None,
        status: Optional[ProductStatus] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[Sequence[Product], int]:
        """Filtered product page plus the total matching count."""
        query = select(Product).where(Product.store_id == store_id)

        if query_text:
            pattern = f"%{query_text}%"
            query = query.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.name_ar.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
        if category:
            query = query.where(Product.category == category)
        if category_id:
            query = query.where(Product.category_id == category_id)
        if status:
            query = query.where(Product.status == status)
        if min_price is not None:
            query = query.where(Product.price >= min_price)
        if max_price is not None:
            query = query.where(Product.price <= max_price)

        count_result = await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        query = query.order_by(Product.created_at.desc(), Product.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all(), total

    async def get_many(self, store_id: str, product_ids: list[str]) -> Sequence[Product]:
        if not product_ids:
            return []
        query = select(Product).where(Product.store_id == store_id, Product.id.in_(product_ids))
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_for_store(
        self, store_id: str, status: Optional[ProductStatus] = None
    ) -> int:
        query = select(func.count()).select_from(Product).where(Product.store_id == store_id)
        if status:
            query = query.where(Product.status == status)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_by_status(self, store_id: str) -> dict[str, int]:
        query = (
            select(Product.status, func.count())
            .where(Product.store_id == store_id)
            .group_by(Product.status)
        )
        result = await self.session.execute(query)
        return {status.value: count for status, count in result.all()}

    async def set_status(
        self, store_id: str, product_ids: list[str], status: ProductStatus
    ) -> int:
        stmt = (
            update(Product)
            .where(Product.store_id == store_id, Product.id.in_(product_ids))
            .values(status=status)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def price_stats(
        self, store_id: str, category: str
    ) -> tuple[Optional[Decimal], Optional[Decimal], Optional[Decimal], int]:
        """Average, min, max and count of priced products in a category."""
        query = select(
            func.avg(Product.price),
            func.min(Product.price),
            func.max(Product.price),
            func.count(Product.price),
        ).where(
            Product.store_id == store_id,
            Product.category == category,
            Product.price.is_not(None),
        )
        result = await self.session.execute(query)
        avg, low, high, count = result.one()
        return avg, low, high, count
