"""
Async Utility Functions

Retry and concurrency helpers used by the LLM client and the
evaluation service.
"""

import asyncio
from typing import Callable, Any, List, Awaitable, TypeVar
from functools import wraps
import random

from ..core.exceptions import ModelAPIError, RateLimitError
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def retry_with_backoff(max_retries: int = 3, base_delay: float = 1.0,
                       max_delay: float = 60.0, backoff_factor: float = 2.0,
                       jitter: bool = True):
    """
    Decorator for retry logic with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        backoff_factor: Multiplier for exponential backoff
        jitter: Add random jitter to prevent thundering herd
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except (RateLimitError, ModelAPIError, asyncio.TimeoutError) as e:
                    # Client errors other than 429 will not get better on retry
                    status = getattr(e, 'status_code', None)
                    if status is not None and 400 <= status < 500 and not isinstance(e, RateLimitError):
                        raise

                    if attempt == max_retries:
                        logger.error(f"Function {func.__name__} failed after {max_retries} retries: {str(e)}")
                        raise

                    delay = min(base_delay * (backoff_factor ** attempt), max_delay)

                    if jitter:
                        delay = delay * (0.5 + random.random() * 0.5)

                    if isinstance(e, RateLimitError) and e.retry_after:
                        delay = max(delay, min(e.retry_after, max_delay))

                    logger.warning(
                        f"Function {func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}), "
                        f"retrying in {delay:.2f}s: {str(e)}"
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator


async def gather_bounded(items: List[T], func: Callable[[T], Awaitable[R]],
                         max_concurrent: int = 5) -> List[R]:
    """
    Run ``func`` over ``items`` concurrently, at most ``max_concurrent`` at a time.

    Results keep the order of ``items``. Exceptions propagate.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_one(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(run_one(item) for item in items)))
