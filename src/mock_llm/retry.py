"""Bounded exponential backoff."""

from __future__ import annotations

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, initial_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt + 1``, doubling up to ``max_delay``."""

    return min(initial_delay * (2**attempt), max_delay)


def retry_with_backoff(
    func: Callable[[], T],
    *,
    attempts: int = 5,
    initial_delay: float = 0.5,
    max_delay: float = 5.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` until it succeeds, at most ``attempts`` times.

    The error from the final attempt is re-raised.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            if attempt == attempts - 1:
                raise
            delay = backoff_delay(attempt, initial_delay, max_delay)
            LOGGER.debug(
                "Attempt %s/%s failed (%s), retrying in %.2fs", attempt + 1, attempts, exc, delay
            )
            sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
