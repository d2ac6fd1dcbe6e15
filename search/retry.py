# search/retry.py

from typing import Awaitable, Callable, TypeVar

from core.exceptions import IndexTimeout, IndexUnavailable
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (IndexUnavailable, IndexTimeout)


async def call_with_retries(
    operation: str,
    call: Callable[[], Awaitable[T]],
    retries: int = 0,
) -> T:
    """Run ``call``, retrying store unavailability and timeouts.

    Args:
        operation: Name used in log events
        call: Zero-argument coroutine factory, invoked once per attempt
        retries: Extra attempts after the first; 0 disables retrying

    Returns:
        Result of the first successful attempt

    Raises:
        The last store error once attempts are exhausted; any other error
        immediately
    """
    attempt = 0
    while True:
        try:
            return await call()
        except RETRYABLE_ERRORS as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                "store_call.retrying",
                operation=operation,
                attempt=attempt,
                retries=retries,
                error=str(e),
            )
