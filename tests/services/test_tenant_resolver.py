"""Tests for resolving the store behind a storefront host."""

import pytest

from storefront.core.errors import NotFoundError
from storefront.models.store import StoreDomain
from storefront.services.tenant_resolver import resolve_store, resolve_tenant_slug, slug_from_host

ROOTS = ["storefront.app"]


@pytest.mark.parametrize(
    "host, expected",
    [
        ("localhost", "demo"),
        ("127.0.0.1:8000", "demo"),
        ("acme.localhost:3000", "acme"),
        ("www.acme.localhost", "acme"),
        ("acme.storefront.app", "acme"),
        ("www.acme.storefront.app", "acme"),
        ("ACME.Storefront.App", "acme"),
        ("storefront.app", "demo"),
        ("www.storefront.app", "demo"),
        ("shop.example.com", None),
        ("", None),
    ],
)
def test_slug_from_host(host, expected):
    assert slug_from_host(host, ROOTS) == expected


@pytest.mark.asyncio
async def test_override_wins(db_session):
    assert await resolve_tenant_slug(db_session, "acme.localhost", override="other") == "other"


@pytest.mark.asyncio
async def test_verified_custom_domain(db_session, store):
    db_session.add(StoreDomain(store_id=store.id, domain="shop.example.com", is_verified=True))
    db_session.add(StoreDomain(store_id=store.id, domain="pending.example.com", is_verified=False))
    await db_session.commit()

    assert await resolve_tenant_slug(db_session, "shop.example.com:443") == store.slug
    assert await resolve_tenant_slug(db_session, "pending.example.com") == "demo"


@pytest.mark.asyncio
async def test_root_domain_skips_custom_domain_lookup(db_session, store, monkeypatch):
    monkeypatch.setattr("storefront.core.config.settings.root_domains", ROOTS)
    db_session.add(StoreDomain(store_id=store.id, domain="www.storefront.app", is_verified=True))
    await db_session.commit()

    assert await resolve_tenant_slug(db_session, "www.storefront.app") == "demo"
    assert await resolve_tenant_slug(db_session, "storefront.app:443") == "demo"


@pytest.mark.asyncio
async def test_resolve_store(db_session, store):
    resolved = await resolve_store(db_session, "test", override=store.slug)

    assert resolved.id == store.id


@pytest.mark.asyncio
async def test_unknown_store_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        await resolve_store(db_session, "ghost.localhost")
