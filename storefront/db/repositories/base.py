"""Generic async repository with optional store scoping."""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.tenancy import get_current_tenant_id
from storefront.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class _UseCurrentTenant:
    def __repr__(self) -> str:
        return "USE_CURRENT_TENANT"


# Sentinel: resolve the store id from the request context at call time
USE_CURRENT_TENANT: Any = _UseCurrentTenant()


class BaseRepository(Generic[ModelType]):
    """CRUD operations shared by every repository.

    Models that carry a ``store_id`` column are filtered by store when a
    tenant id is given (or resolved from context via ``USE_CURRENT_TENANT``).
    Passing ``tenant_id=None`` disables the filter.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _resolve_tenant(self, tenant_id: Optional[str]) -> Optional[str]:
        if tenant_id is USE_CURRENT_TENANT:
            return get_current_tenant_id()
        return tenant_id

    def _scoped(self, query, tenant_id: Optional[str]):
        tenant_id = self._resolve_tenant(tenant_id)
        if tenant_id and hasattr(self.model, "store_id"):
            query = query.where(self.model.store_id == tenant_id)
        return query

    async def get(
        self, id: str, tenant_id: Optional[str] = USE_CURRENT_TENANT
    ) -> Optional[ModelType]:
        query = self._scoped(select(self.model).where(self.model.id == id), tenant_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        tenant_id: Optional[str] = USE_CURRENT_TENANT,
    ) -> Sequence[ModelType]:
        query = self._scoped(select(self.model), tenant_id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, tenant_id: Optional[str] = USE_CURRENT_TENANT) -> int:
        query = self._scoped(select(func.count()).select_from(self.model), tenant_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def create(self, data: dict) -> ModelType:
        obj = self.model(**data)
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def update(self, obj: ModelType, data: dict) -> ModelType:
        for field, value in data.items():
            setattr(obj, field, value)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.session.execute(query)
        return result.scalars().first()
