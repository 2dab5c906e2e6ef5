"""API dependencies for authentication, store resolution and shared clients."""

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.context import update_context
from storefront.core.logging import get_logger
from storefront.core.security import decode_token
from storefront.core.tenancy import set_current_tenant_id
from storefront.db.repositories.store_repo import StoreRepository
from storefront.db.session import get_db
from storefront.models.store import Store
from storefront.services.llm import LLMClient, get_llm_client
from storefront.services.store_lifecycle import StoreLifecycleService
from storefront.services.tenant_resolver import resolve_store
from storefront.workers.bulk_tasks import enqueue_bulk_batch

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)

# Development mode mock user for unauthenticated requests
DEV_MOCK_USER = {
    "user_id": "00000000-0000-0000-0000-000000000001",
    "tenant_id": None,
    "roles": ["super_admin"],
    "email": "dev@storefront.dev",
}


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Get current authenticated user from JWT token.

    In development mode with no token, returns a mock super admin user.
    """
    if settings.debug and (credentials is None or not credentials.credentials):
        logger.warning("Using DEV_MOCK_USER for unauthenticated request")
        return DEV_MOCK_USER

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if not payload or payload.is_refresh:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.tenant_id:
        set_current_tenant_id(payload.tenant_id)

    return {
        "user_id": payload.sub,
        "tenant_id": payload.tenant_id,
        "roles": payload.roles or [],
    }


def _is_platform_admin(user: dict) -> bool:
    return bool(set(settings.platform_admin_roles) & set(user.get("roles", [])))


async def get_current_superuser(
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Ensure current user is a platform admin (super_admin or platform_admin)."""
    if not _is_platform_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform admin access required",
        )
    return current_user


async def get_current_store_admin(
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Ensure current user is a store owner/admin or a platform admin."""
    allowed_roles = set(settings.store_admin_roles) | set(settings.platform_admin_roles)
    if not allowed_roles.intersection(current_user.get("roles", [])):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


async def get_current_store(
    x_store_id: Optional[str] = Header(None),
    current_user: dict = Depends(get_current_store_admin),
    db: AsyncSession = Depends(get_db),
) -> Store:
    """The store an admin request operates on.

    Store admins always get their own store; platform admins pick one with
    the ``X-Store-Id`` header.
    """
    store_id = current_user.get("tenant_id")
    if _is_platform_admin(current_user) and x_store_id:
        store_id = x_store_id
    if not store_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User must belong to a store",
        )

    store = await StoreRepository(db).get(store_id, tenant_id=None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Store not found",
        )
    set_current_tenant_id(store.id)
    update_context(tenant_id=store.id)
    return store


async def get_storefront_store(
    request: Request,
    x_tenant_override: Optional[str] = Header(None),
    x_preview_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Store:
    """Resolve the public store from the Host header.

    Stores that are not live are only served with a valid preview token for
    that store.
    """
    store = await resolve_store(db, request.headers.get("host", ""), x_tenant_override)
    if not store.is_active:
        valid, token_store_id = (False, None)
        if x_preview_token:
            valid, token_store_id = await StoreLifecycleService(db).validate_preview_token(x_preview_token)
            await db.commit()
        if not valid or token_store_id != store.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Store not found",
            )
    set_current_tenant_id(store.id)
    update_context(tenant_id=store.id)
    return store


async def get_session_id(x_session_id: Optional[str] = Header(None)) -> Optional[str]:
    """Anonymous shopper session used to key carts."""
    return x_session_id


def get_llm() -> LLMClient:
    return get_llm_client()


def get_batch_enqueuer() -> Callable[..., None]:
    return enqueue_bulk_batch
