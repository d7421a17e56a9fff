"""
Convergence waits for asynchronous store-side processes.
"""

import time
from collections.abc import Callable

from ..constants import (
    CI_TIMEOUT_MULTIPLIER,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_TTL_MONITOR_SECONDS,
    LOCAL_TIMEOUT_MULTIPLIER,
)
from ..exceptions import ConfigurationError, ConvergenceTimeoutError
from ..logging_config import get_logger

logger = get_logger(__name__)


def compute_timeout_ms(
    ttl_seconds: int,
    in_ci: bool,
    default_sweep_interval_seconds: int = DEFAULT_TTL_MONITOR_SECONDS,
) -> int:
    """
    Compute how long to wait for expired documents to disappear.

    The TTL monitor sleeps for a fixed interval regardless of the index's
    expiry, so the wait covers at least one full monitor pass plus headroom
    for loaded hosts.

    Args:
        ttl_seconds: expireAfterSeconds of the TTL index
        in_ci: Whether the run is on a continuous-integration host
        default_sweep_interval_seconds: TTL monitor interval

    Returns:
        Timeout in milliseconds
    """
    multiplier = CI_TIMEOUT_MULTIPLIER if in_ci else LOCAL_TIMEOUT_MULTIPLIER
    return multiplier * max(default_sweep_interval_seconds, ttl_seconds) * 1000


def wait_until(
    predicate: Callable[[], bool],
    message: str,
    timeout_ms: int,
    interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Poll `predicate` until it returns True or the timeout elapses.

    Args:
        predicate: Condition to check
        message: Failure message
        timeout_ms: Time budget in milliseconds
        interval_ms: Sleep between checks in milliseconds
        clock: Monotonic clock returning seconds
        sleep: Sleep function taking seconds

    Raises:
        ConvergenceTimeoutError: If the predicate is still False at the deadline
    """
    if timeout_ms < 0:
        raise ConfigurationError("timeout_ms must be non-negative")
    if interval_ms < 1:
        raise ConfigurationError("interval_ms must be at least 1")

    start = clock()
    deadline = start + timeout_ms / 1000
    interval = interval_ms / 1000
    checks = 0

    while True:
        checks += 1
        if predicate():
            logger.debug(f"Condition met after {checks} checks ({clock() - start:.3f}s)")
            return

        remaining = deadline - clock()
        if remaining <= 0:
            raise ConvergenceTimeoutError(
                f"{message} (not satisfied after {timeout_ms} ms, {checks} checks)"
            )

        # Never sleep past the deadline
        sleep(min(interval, remaining))
