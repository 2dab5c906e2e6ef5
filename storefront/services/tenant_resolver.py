"""Resolve which store a storefront request is for."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.errors import NotFoundError
from storefront.core.logging import get_logger
from storefront.db.repositories.store_repo import StoreDomainRepository, StoreRepository
from storefront.models.store import Store

logger = get_logger(__name__)

LOCAL_HOSTS = {"localhost", "127.0.0.1"}


def slug_from_host(host: str, root_domains: Optional[list[str]] = None) -> Optional[str]:
    """Store slug encoded in the host name, or None when the host needs a domain lookup.

    Handles ``localhost``, ``<slug>.localhost`` and ``<slug>.<root domain>``;
    a leading ``www.`` label is skipped. A bare root domain is the default store.
    """
    host = host.split(":")[0].lower().strip()
    if not host:
        return None

    if host in LOCAL_HOSTS:
        return settings.default_tenant_slug

    parts = host.split(".")

    if host.endswith(".localhost"):
        if parts[0] == "www" and len(parts) > 2:
            return parts[1]
        return parts[0]

    for root in root_domains if root_domains is not None else settings.root_domains:
        if host in (root, "www." + root):
            return settings.default_tenant_slug
        if not host.endswith("." + root):
            continue
        if len(parts) >= 3:
            if parts[0] == "www" and len(parts) > 3:
                return parts[1]
            if parts[0] != "www":
                return parts[0]

    return None


async def resolve_tenant_slug(
    session: AsyncSession,
    host: str,
    override: Optional[str] = None,
) -> str:
    """Slug for a request: override header, then host rules, then custom domains, then the default."""
    if override:
        return override

    slug = slug_from_host(host)
    if slug:
        return slug

    domain = host.split(":")[0].lower().strip()
    if domain:
        try:
            custom = await StoreDomainRepository(session).get_store_slug_for_domain(domain)
        except SQLAlchemyError:
            logger.exception("Error resolving tenant from custom domain", extra={"domain": domain})
            custom = None
        if custom:
            return custom

    return settings.default_tenant_slug


async def resolve_store(
    session: AsyncSession,
    host: str,
    override: Optional[str] = None,
) -> Store:
    slug = await resolve_tenant_slug(session, host, override)
    store = await StoreRepository(session).get_by_slug(slug)
    if store is None:
        raise NotFoundError("Store", slug)
    return store
