"""
Retry with exponential backoff for gateway calls.

Gateway calls report failure as a value, not an exception, so the retry loop
inspects the result. Only transport failures are retried: a service-reported
error or a malformed body will not change on a second attempt.
No state survives between calls.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry with exponential backoff. max_retries counts total attempts."""
    max_retries: int = 1
    base_delay_s: float = 0.5
    max_delay_s: float = 10.0
    backoff_factor: float = 1.5

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay_s * (self.backoff_factor ** (attempt - 1)), self.max_delay_s)


def retry_result(
    func: Callable[[], T],
    should_retry: Callable[[T], bool],
    retry_config: Optional[RetryConfig] = None,
) -> T:
    """
    Call `func` until `should_retry(result)` is false or attempts run out.

    Returns the last result; never raises on its own.
    """
    cfg = retry_config or RetryConfig()
    attempts = max(1, cfg.max_retries)
    result = func()
    for attempt in range(1, attempts):
        if not should_retry(result):
            break
        delay = cfg.delay_for(attempt)
        logger.debug("Attempt %d/%d failed, retrying in %.2fs", attempt, attempts, delay)
        time.sleep(delay)
        result = func()
    return result
