"""Opt-in retry policy for callers of the Keenetic client.

The transport never retries on its own: every failure is raised from the
call that triggered it. Callers that want resilience against a router that
is rebooting or briefly unreachable can wrap their own operations with the
decorator built here (tenacity, exponential backoff).

Example usage:
    from keenetic_client.api.session import create_retry_decorator

    retry = create_retry_decorator(max_retries=5)

    @retry
    def fetch_system():
        return client.system.resources()

Write commands are not idempotent; only wrap operations that are safe to
replay.
"""

import logging
from typing import Any, Callable

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from keenetic_client.exceptions import ConnectionError, TimeoutError


def create_retry_decorator(
    max_retries: int = 5,
    min_wait: float = 1,
    max_wait: float = 60,
    log_level: int = logging.WARNING,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Create a tenacity retry decorator with exponential backoff.

    Retries only on ConnectionError and TimeoutError. Authentication and
    API errors are raised on the first attempt. After the last attempt the
    last error is re-raised.

    Args:
        max_retries: Maximum number of attempts (including the first).
        min_wait: Minimum wait time in seconds between retries.
        max_wait: Maximum wait time in seconds between retries.
        log_level: Log level for retry attempt messages.

    Backoff sequence (with min=1, max=60):
        Attempt 1: immediate
        Attempt 2: wait 1-2 seconds
        Attempt 3: wait 2-4 seconds
        ...
        Capped at 60 seconds max
    """
    # Get a stdlib logger for tenacity's before_sleep_log
    stdlib_logger = logging.getLogger(__name__)

    return retry(
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type((ConnectionError, TimeoutError)),
        before_sleep=before_sleep_log(stdlib_logger, log_level),
        reraise=True,
    )
