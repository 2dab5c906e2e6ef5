"""Domain exceptions and the JSON error responses the API returns.

Every error body carries ``detail`` and ``code``; ``request_id`` is added
when the request-context middleware assigned one, so merchants can quote it
to support.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.context import get_context_value
from storefront.core.logging import get_logger

logger = get_logger(__name__)


class StorefrontError(Exception):
    """Base class for service-layer errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "STOREFRONT_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__(message, {"resource": resource})


class ValidationFailedError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_FAILED"


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class LimitExceededError(StorefrontError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "LIMIT_EXCEEDED"


def error_response(status_code: int, code: str, detail: Any, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"detail": detail, "code": code}
    content.update({k: v for k, v in extra.items() if v})
    request_id = get_context_value("request_id")
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.warning(
        "Request failed: %s",
        exc.message,
        extra={"code": exc.code, "path": request.url.path},
    )
    return error_response(exc.status_code, exc.code, exc.message, details=exc.details)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, "HTTP_ERROR", exc.detail)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Validation error",
        errors=jsonable_encoder(exc.errors()),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error", extra={"path": request.url.path})
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "DB_ERROR", "Database error")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
