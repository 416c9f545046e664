"""
Bounded retry for filesystem operations that may fail from transient contention.
"""

import asyncio
import logging
from typing import Any, Callable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 5


async def retry_io(
    func: Callable[..., T],
    *args: Any,
    retries: int = MAX_RETRIES,
    description: str = "",
) -> T:
    """
    Runs a blocking filesystem call in a worker thread, retrying on OSError.

    The call is attempted once and then retried up to `retries` more times with
    no delay in between. When every attempt fails, the last error is re-raised.

    Args:
        func: The blocking callable to run.
        *args: Positional arguments for `func`.
        retries: Number of retries after the first attempt.
        description: Short label used in debug logs.

    Returns:
        Whatever `func` returns on its first successful attempt.
    """
    max_attempts = retries + 1
    label = description or getattr(func, "__name__", "operation")
    last_exception: OSError | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await asyncio.to_thread(func, *args)
        except OSError as e:
            last_exception = e
            log.debug(f"Attempt {attempt}/{max_attempts} of '{label}' failed: {e}")

    raise last_exception
