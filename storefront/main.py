"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.agents import definitions  # noqa: F401  registers agent descriptors
from storefront.api.v1 import router as api_v1_router
from storefront.core.config import settings
from storefront.core.errors import setup_error_handlers
from storefront.core.logging import configure_logging, get_logger
from storefront.db.session import engine
from storefront.middleware.request_context import RequestContextMiddleware

logger = get_logger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info(
        "Starting storefront API",
        extra={
            "env": settings.app_env,
            "root_domains": settings.root_domains,
            "llm_configured": bool(settings.google_api_key),
        },
    )
    yield
    await engine.dispose()


app = FastAPI(
    title="Storefront Platform API",
    description="Multi-tenant storefront and merchant admin with AI assistants",
    version=VERSION,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    openapi_url="/api/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# Storefront themes run on other origins and send the tenant/session headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
)
app.add_middleware(RequestContextMiddleware)

app.include_router(api_v1_router, prefix="/api/v1")
setup_error_handlers(app)


@app.get("/health")
async def health_check() -> dict:
    return {"status": "healthy", "version": VERSION}
