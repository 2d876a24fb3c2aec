"""
Resilience Infrastructure.

Circuit breaker listener and composed call guard for remote store access.

The guard is always applied in this order (outside-in):
    Circuit Breaker (aiobreaker) → Semaphore → Timeout → Call

Failed operations are never retried automatically; re-submitting is a user
action.

Usage:
    from notekeep.backend.core.resilience import create_circuit_breaker, guarded_call

    breaker = create_circuit_breaker("store", fail_max=5, timeout_duration=30)
    response = await guarded_call(
        breaker, semaphore, 10.0, client.request, "GET", "/notes",
    )
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

import aiobreaker

from notekeep.backend.core.exceptions import RemoteError, RemoteTimeoutError
from notekeep.backend.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Circuit breaker listener that emits structured resilience events.

    Every state transition is logged with a standardized set of fields
    so that resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/notekeep.jsonl
    """

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        event_map = {
            "open": "circuit_breaker_opened",
            "half-open": "circuit_breaker_half_open",
            "closed": "circuit_breaker_closed",
        }
        new_str = _state_name(new_state)
        event = event_map.get(new_str, f"circuit_breaker_{new_str}")
        log_level = "error" if new_str == "open" else "info"

        getattr(logger, log_level)(
            f"Circuit breaker {self.dependency}: {_state_name(old_state)} → {new_str}",
            extra={
                "resilience_event": event,
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
            },
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra={
                "resilience_event": "circuit_breaker_failure",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
                "error": str(exception),
            },
        )


def _state_name(state: Any) -> str:
    """Normalize breaker states (enum members, state objects or plain strings)."""
    name = getattr(state, "name", None)
    if isinstance(name, str):
        return name.lower().replace("_", "-")
    return str(state).lower()


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 30,
) -> aiobreaker.CircuitBreaker:
    """Create a circuit breaker with structured logging.

    Args:
        dependency: Name of the external dependency (for logging)
        fail_max: Number of failures before opening
        timeout_duration: Seconds to wait before half-open test

    Returns:
        Configured CircuitBreaker instance
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        listeners=[ResilienceLogger(dependency)],
    )


async def guarded_call(
    breaker: aiobreaker.CircuitBreaker,
    semaphore: asyncio.Semaphore,
    timeout_seconds: float,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Run a coroutine function behind the breaker, a semaphore and a timeout.

    Raises:
        RemoteTimeoutError: If the call exceeds timeout_seconds
        RemoteError: If the breaker is open or rejects the call
    """

    async def _bounded() -> T:
        async with semaphore:
            try:
                async with asyncio.timeout(timeout_seconds):
                    return await func(*args, **kwargs)
            except TimeoutError as e:
                raise RemoteTimeoutError(
                    f"Remote store did not answer within {timeout_seconds:g}s"
                ) from e

    try:
        return await breaker.call_async(_bounded)
    except aiobreaker.CircuitBreakerError as e:
        raise RemoteError("Remote store temporarily unavailable", code="SYS_CIRCUIT_OPEN") from e
