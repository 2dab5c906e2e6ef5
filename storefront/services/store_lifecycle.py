"""Store publishing, preview tokens and deletion."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.errors import ConflictError, ValidationFailedError
from storefront.core.logging import get_logger
from storefront.core.security import generate_preview_token
from storefront.db.repositories.product_repo import ProductRepository
from storefront.db.repositories.store_repo import PreviewTokenRepository
from storefront.models.product import ProductStatus
from storefront.models.store import Store, StorePreviewToken, StoreStatus

logger = get_logger(__name__)


@dataclass
class PublishValidation:
    valid: bool
    missing: list[str] = field(default_factory=list)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class StoreLifecycleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.tokens = PreviewTokenRepository(session)

    async def validate_for_publishing(self, store: Store) -> PublishValidation:
        missing = []
        active = await ProductRepository(self.session).count_for_store(
            store.id, status=ProductStatus.ACTIVE
        )
        if active == 0:
            missing.append("active_products")
        if not store.name:
            missing.append("store_name")
        if not store.store_type:
            missing.append("store_type")
        return PublishValidation(valid=not missing, missing=missing)

    @staticmethod
    def _ensure_not_suspended(store: Store) -> None:
        if store.status == StoreStatus.SUSPENDED:
            raise ConflictError("Store is suspended")

    async def publish(self, store: Store) -> Store:
        self._ensure_not_suspended(store)
        validation = await self.validate_for_publishing(store)
        if not validation.valid:
            raise ValidationFailedError(
                "Store does not meet publishing requirements",
                {"missing": validation.missing},
            )
        store.status = StoreStatus.ACTIVE
        store.published_at = datetime.now(timezone.utc)
        await self.session.flush()
        logger.info("Store published", extra={"store_id": store.id})
        return store

    async def unpublish(self, store: Store) -> Store:
        self._ensure_not_suspended(store)
        store.status = StoreStatus.DRAFT
        await self.session.flush()
        logger.info("Store unpublished", extra={"store_id": store.id})
        return store

    async def suspend(self, store: Store) -> Store:
        """Take a store offline at platform level. The merchant cannot republish it."""
        store.status = StoreStatus.SUSPENDED
        await self.session.flush()
        logger.warning("Store suspended", extra={"store_id": store.id})
        return store

    async def create_preview_token(self, store: Store) -> StorePreviewToken:
        now = datetime.now(timezone.utc)
        await self.tokens.delete_expired(now, store_id=store.id)
        return await self.tokens.create(
            {
                "store_id": store.id,
                "token": generate_preview_token(),
                "expires_at": now + timedelta(hours=settings.preview_token_ttl_hours),
            }
        )

    async def validate_preview_token(self, token: str) -> tuple[bool, Optional[str]]:
        """``(valid, store_id)``; an expired token is deleted."""
        row = await self.tokens.get_by_token(token)
        if row is None:
            return False, None
        if _as_utc(row.expires_at) < datetime.now(timezone.utc):
            await self.tokens.delete(row)
            return False, None
        return True, row.store_id

    async def purge_expired_tokens(self) -> int:
        return await self.tokens.delete_expired(datetime.now(timezone.utc))

    async def delete_store(self, store: Store) -> None:
        """Remove the store so the owner can restart onboarding."""
        store_id = store.id
        await self.session.delete(store)
        await self.session.flush()
        logger.info("Store deleted", extra={"store_id": store_id})
