"""Opt-in caller-side retry for transient store failures.

The clients never retry on their own. Wrap an idempotent call (any of the
``add``-based status reports) when a conflict or an unavailable store should
be retried. ``replace``-based calls may already have landed when a transport
error is reported, so callers should re-read before retrying those.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from testsys_status.config.settings import get_settings
from testsys_status.errors import ConflictError, TransportError

T = TypeVar("T")

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (ConflictError, TransportError)


def retry_on_conflict(
    operation: Callable[[], T],
    *,
    max_retries: int | None = None,
    backoff_s: float | None = None,
) -> T:
    """Call ``operation`` until it succeeds or ``max_retries`` extra attempts fail.

    Unset arguments fall back to ``Settings.conflict_max_retries`` and
    ``Settings.conflict_backoff_s``.
    """
    if max_retries is None or backoff_s is None:
        settings = get_settings()
        if max_retries is None:
            max_retries = settings.conflict_max_retries
        if backoff_s is None:
            backoff_s = settings.conflict_backoff_s
    attempts = max(0, max_retries) + 1
    for attempt in range(attempts):
        try:
            return operation()
        except RETRYABLE_ERRORS as exc:
            if attempt == attempts - 1:
                raise
            logger.warning(
                "retry event=transient_failure attempt=%d max_attempts=%d error=%s",
                attempt + 1,
                attempts,
                exc,
            )
            if backoff_s > 0:
                time.sleep(backoff_s)
    raise AssertionError("unreachable")  # pragma: no cover
