"""Polling helper for backends that apply changes asynchronously."""

import time
from collections.abc import Callable
from datetime import timedelta

from txtwire._logging import get_logger
from txtwire.exceptions import DnsProviderError, WaitTimeoutError

logger = get_logger(__name__)


def wait_for(
    description: str,
    timeout: timedelta,
    interval: timedelta,
    predicate: Callable[[], bool],
    provider: str | None = None,
) -> None:
    """Call predicate every interval until it returns True or timeout elapses.

    Provider errors raised by the predicate do not stop the polling; the last
    one is chained to the final WaitTimeoutError.

    Args:
        description: What is being waited for, used in logs and errors.
        timeout: Total time budget.
        interval: Delay between two attempts.
        predicate: Success condition.
        provider: Provider name for error messages.

    Raises:
        WaitTimeoutError: If the predicate never held within timeout.
    """
    deadline = time.monotonic() + timeout.total_seconds()
    last_error: DnsProviderError | None = None
    attempt = 0

    while True:
        attempt += 1
        try:
            if predicate():
                logger.debug("Wait complete", extra={"wait": description, "attempts": attempt})
                return
            last_error = None
        except DnsProviderError as e:
            last_error = e
            logger.debug("Wait attempt failed", extra={"wait": description, "error": str(e)})

        if time.monotonic() >= deadline:
            break
        time.sleep(interval.total_seconds())

    if last_error is not None:
        raise WaitTimeoutError(
            f"{description}: time limit exceeded: last error: {last_error}", provider
        ) from last_error
    raise WaitTimeoutError(f"{description}: time limit exceeded", provider)
