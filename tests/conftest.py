"""Pytest configuration and fixtures."""

from decimal import Decimal
from typing import Callable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

import storefront.models  # noqa: F401  registers tables on Base.metadata
from storefront.api.deps import get_batch_enqueuer, get_current_user, get_llm
from storefront.core.config import settings
from storefront.db.base import Base
from storefront.db.session import get_db
from storefront.main import app
from storefront.models.product import Product, ProductStatus
from storefront.models.store import Store, StoreStatus, StoreType
from storefront.services.llm import GeneratedImage, LLMResponse

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


class FakeLLM:
    """Stands in for the Gemini client.

    ``replies`` are returned in order by ``generate_text``; a reply may be an
    exception instance to raise instead. When the queue is empty ``default``
    is returned.
    """

    def __init__(self, replies: Optional[list] = None, default: str = "OK"):
        self.replies = list(replies or [])
        self.default = default
        self.prompts: list[str] = []
        self.image_calls: list[tuple[str, str]] = []
        self.image_error: Optional[Exception] = None

    async def generate_text(self, prompt, model=None, image_urls=None, json_output=False):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(text=reply, tokens_used=10)

    async def edit_image(self, prompt, source_url):
        self.image_calls.append((prompt, source_url))
        if self.image_error is not None:
            raise self.image_error
        return GeneratedImage(data=b"\x89PNG", mime_type="image/png")


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    """Retries run without sleeping."""
    monkeypatch.setattr(settings, "agent_retry_backoff", [0, 0, 0])


@pytest_asyncio.fixture
async def async_engine():
    """Create async test engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Create async test session."""
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def store(db_session) -> Store:
    """A live clothing store."""
    store = Store(
        name="Street Threads",
        slug="street-threads",
        status=StoreStatus.ACTIVE,
        store_type=StoreType.CLOTHING,
        currency="SAR",
    )
    db_session.add(store)
    await db_session.commit()
    return store


@pytest.fixture
def make_product(db_session, store) -> Callable:
    """Factory for products in the test store."""

    async def _make(
        name: str = "Black Hoodie",
        price: str = "100.00",
        status: ProductStatus = ProductStatus.ACTIVE,
        **kwargs,
    ) -> Product:
        slug = kwargs.pop("slug", name.lower().replace(" ", "-"))
        product = Product(
            store_id=kwargs.pop("store_id", store.id),
            name=name,
            slug=slug,
            price=Decimal(price) if price is not None else None,
            status=status,
            inventory=kwargs.pop("inventory", 5),
            **kwargs,
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _make


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def enqueued() -> list:
    """Batch ids handed to the queue by the API."""
    return []


@pytest_asyncio.fixture
async def client(db_session, store, fake_llm, enqueued):
    """Create test client with overridden dependencies.

    Requests are authenticated as the owner of ``store``.
    """

    async def override_get_db():
        yield db_session

    async def override_get_current_user():
        return {
            "user_id": "00000000-0000-0000-0000-000000000002",
            "tenant_id": store.id,
            "roles": ["store_owner"],
        }

    def override_get_batch_enqueuer():
        def enqueue(batch_id: str, store_id: Optional[str] = None) -> None:
            enqueued.append(batch_id)

        return enqueue

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_llm] = lambda: fake_llm
    app.dependency_overrides[get_batch_enqueuer] = override_get_batch_enqueuer

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def storefront_headers(store) -> dict:
    """Headers a shopper's browser sends to the test store."""
    return {"X-Tenant-Override": store.slug, "X-Session-Id": "shopper-session-1"}


@pytest.fixture
def make_llm() -> Callable[..., FakeLLM]:
    """Builds a FakeLLM with queued replies."""
    return FakeLLM
