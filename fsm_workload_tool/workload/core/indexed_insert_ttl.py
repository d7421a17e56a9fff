"""
indexed_insert_ttl workload.

Creates a TTL index with a short expiry (5 seconds). Each thread inserts one
document per iteration; the first document a thread inserts is marked with
an extra `first` field. Teardown asserts that every thread's first document
has been removed by the store's TTL monitor.
"""

import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..constants import (
    FIRST_FIELD,
    TTL_FIELD,
    TTL_ITERATIONS,
    TTL_SECONDS,
    TTL_TAGS,
    TTL_THREAD_COUNT,
    TTL_WORKLOAD_NAME,
)
from ..exceptions import WorkloadAssertionError
from ..logging_config import get_logger
from ..models import InsertResult, StateName, ThreadData
from .convergence import compute_timeout_ms, wait_until
from .descriptor import RunContext, WorkloadDescriptor

logger = get_logger(__name__)

TIMEOUT_MESSAGE = "Expected oldest documents with TTL fields to be removed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _insert(ctx: RunContext, data: ThreadData, first: bool) -> InsertResult:
    document: dict[str, Any] = {TTL_FIELD: _now()}
    if first:
        document[FIRST_FIELD] = True

    result = ctx.store.insert(ctx.collection, document)
    data.has_initialized = True

    # Another workload sharing the collection can make counts meaningless
    if ctx.config.own_collection and result.n_inserted != 1:
        raise WorkloadAssertionError(
            f"unexpected insert count: expected 1, got {result.n_inserted} "
            f"(thread {data.tid}, {ctx.namespace})"
        )
    return result


def init(ctx: RunContext, data: ThreadData) -> None:
    """Insert the thread's marked first document."""
    _insert(ctx, data, first=True)


def insert(ctx: RunContext, data: ThreadData) -> None:
    """Insert an ordinary timestamped document."""
    # A walk that skipped init still marks its first document
    _insert(ctx, data, first=not data.has_initialized)


def setup(ctx: RunContext, shared: Mapping[str, Any]) -> None:
    """Create the TTL index before any worker starts."""
    ctx.store.create_index(
        ctx.collection, {TTL_FIELD: 1}, expire_after_seconds=shared["ttl_seconds"]
    )


def make_teardown(
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[RunContext, Mapping[str, Any]], None]:
    """
    Build the teardown hook.

    Args:
        clock: Monotonic clock used by the convergence wait
        sleep: Sleep function used by the convergence wait

    Returns:
        Teardown hook
    """

    def teardown(ctx: RunContext, shared: Mapping[str, Any]) -> None:
        if ctx.config.running_with_balancer:
            # Migration critical sections make TTL monitor rounds fail. The monitor
            # retries on its next pass, which may be too late for the wait below.
            ctx.balancer.disable_for_collection(ctx.namespace)
            ctx.balancer.join_current_round()

        if not ctx.config.own_collection:
            logger.info(f"Skipping TTL convergence check, {ctx.namespace} is shared")
            return

        timeout_ms = compute_timeout_ms(shared["ttl_seconds"], ctx.config.in_ci)
        logger.info(f"Waiting up to {timeout_ms} ms for first documents to expire")

        def first_documents_removed() -> bool:
            count = ctx.store.count(ctx.collection, {FIRST_FIELD: True})
            logger.debug(f"{count} first documents remain in {ctx.namespace}")
            return count == 0

        wait_until(
            first_documents_removed,
            TIMEOUT_MESSAGE,
            timeout_ms,
            ctx.config.poll_interval_ms,
            clock=clock,
            sleep=sleep,
        )

    return teardown


def build_workload(
    thread_count: int = TTL_THREAD_COUNT,
    iterations: int = TTL_ITERATIONS,
    ttl_seconds: int = TTL_SECONDS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WorkloadDescriptor:
    """
    Build the indexed_insert_ttl descriptor.

    Args:
        thread_count: Number of worker threads
        iterations: Steps per worker
        ttl_seconds: expireAfterSeconds of the TTL index
        clock: Clock for the teardown convergence wait
        sleep: Sleep for the teardown convergence wait

    Returns:
        Validated workload descriptor
    """
    return WorkloadDescriptor(
        name=TTL_WORKLOAD_NAME,
        thread_count=thread_count,
        iterations=iterations,
        states={StateName.INIT: init, StateName.INSERT: insert},
        transitions={
            StateName.INIT: {StateName.INSERT: 1},
            StateName.INSERT: {StateName.INSERT: 1},
        },
        data={"ttl_seconds": ttl_seconds},
        setup=setup,
        teardown=make_teardown(clock, sleep),
        tags=TTL_TAGS,
    )
