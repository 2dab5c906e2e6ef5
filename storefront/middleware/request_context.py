import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from storefront.core.context import set_context
from storefront.core.logging import get_logger
from storefront.core.security import decode_token

logger = get_logger("storefront.requests")


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
    ):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid4())
        request.state.request_id = request_id

        ctx = {
            "request_id": request_id,
            "ip_address": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        }

        # Identity is only read here; dependencies do the actual auth checks
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            payload = decode_token(auth_header.split(" ", 1)[1])
            if payload:
                ctx["user_id"] = payload.sub
                ctx["tenant_id"] = payload.tenant_id
                ctx["roles"] = payload.roles

        set_context(ctx)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)

        logger.info(
            "%s %s %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={"status_code": response.status_code, "duration_ms": duration_ms},
        )
        response.headers["X-Request-Id"] = request_id
        return response
