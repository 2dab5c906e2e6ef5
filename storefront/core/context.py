from contextvars import ContextVar
from typing import Dict, Any

# Per-request metadata, empty outside a request
request_context: ContextVar[Dict[str, Any]] = ContextVar("request_context", default={})


def set_context(context: Dict[str, Any]) -> None:
    """Set the context for the current request.

    Usually called from middleware or a dependency.
    """
    request_context.set(context)


def get_context() -> Dict[str, Any]:
    """Return the current request context, or an empty dict."""
    return request_context.get()


def update_context(**kwargs: Any) -> None:
    ctx = request_context.get().copy()
    ctx.update(kwargs)
    request_context.set(ctx)


def get_context_value(key: str, default: Any = None) -> Any:
    return request_context.get().get(key, default)
