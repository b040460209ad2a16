"""Retry logic with a fixed delay for transient network failures.

Cloning over the device's (often flaky) connection is retried a fixed
number of times with a fixed pause between attempts.
"""

from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from forkswap.core.context import ForkSwapContext

# Type variable for decorated function return type
T = TypeVar("T")


def retry_with_delay(
    max_attempts: int,
    delay: float,
    *,
    ctx: "ForkSwapContext",
    retry_on: tuple[type[Exception], ...] = (RuntimeError,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a function up to max_attempts times, sleeping `delay` between tries.

    Sleeping goes through ctx.time and progress messages through ctx.feedback,
    so tests run instantly with FakeTime. On the final attempt the exception
    is re-raised to the caller.

    Args:
        max_attempts: Maximum number of attempts (at least 1)
        delay: Seconds to wait between attempts
        ctx: Context providing time and feedback
        retry_on: Exception types that trigger a retry; others propagate at once

    Example:
        @retry_with_delay(max_attempts=3, delay=2.0, ctx=ctx)
        def clone() -> None:
            ctx.git.clone(url, destination, branch=None)

    Raises:
        Exception: Re-raises the last exception after max_attempts exhausted
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempts = max(1, max_attempts)
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    remaining = attempts - attempt
                    if remaining == 0:
                        ctx.feedback.error(f"Operation failed after {attempts} attempts. {e}")
                        raise
                    ctx.feedback.warning(
                        f"Operation failed. Retrying... ({remaining} attempts remaining)"
                    )
                    ctx.time.sleep(delay)

            # Unreachable: the loop either returns or re-raises
            msg = f"Function {func.__name__} completed without result or exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator
