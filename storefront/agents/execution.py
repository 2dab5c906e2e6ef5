"""Timeout and retry policy for agent and LLM calls."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def get_agent_timeout(agent_type: str) -> float:
    """Seconds an agent call may run before it is abandoned."""
    return settings.agent_timeouts.get(agent_type, settings.agent_default_timeout)


def get_backoff_delay(attempt: int) -> float:
    """Delay before retry ``attempt`` (0-based), clamped to the last configured delay."""
    backoff = settings.agent_retry_backoff
    return backoff[min(attempt, len(backoff) - 1)]


def is_retryable_error(error: BaseException) -> bool:
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    message = str(error).upper()
    return any(marker in message for marker in settings.agent_retryable_errors)


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    message: Optional[str] = None,
) -> T:
    """Await with a deadline; raises ``TimeoutError`` with a readable message."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise TimeoutError(message or f"Operation timed out after {seconds:g}s") from exc


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    agent_type: str,
    max_attempts: Optional[int] = None,
) -> T:
    """Run ``fn`` under the agent timeout, retrying retryable failures with backoff.

    Non-retryable errors propagate immediately; after the last attempt the
    last error propagates.
    """
    attempts = max_attempts or settings.agent_retry_max_attempts
    timeout = get_agent_timeout(agent_type)

    for attempt in range(attempts):
        try:
            return await with_timeout(
                fn(), timeout, f"{agent_type} agent timed out after {timeout:g}s"
            )
        except Exception as exc:
            if attempt == attempts - 1 or not is_retryable_error(exc):
                raise
            delay = get_backoff_delay(attempt)
            logger.warning(
                "Retryable error from %s agent, retrying in %ss",
                agent_type,
                delay,
                extra={"attempt": attempt + 1, "error": str(exc)},
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")
