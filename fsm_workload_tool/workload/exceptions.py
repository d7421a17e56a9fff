"""
Custom exceptions for FSM workload runs.
"""


class WorkloadError(Exception):
    """Base exception for workload operations."""

    pass


class ConfigurationError(WorkloadError):
    """Workload descriptor or harness options are malformed."""

    pass


class WorkloadAssertionError(WorkloadError, AssertionError):
    """A state function postcondition failed. Aborts the run."""

    pass


class StoreError(WorkloadError):
    """Data store call failed."""

    pass


class StoreThrottlingError(StoreError):
    """Store throttled the request."""

    pass


class StorePermissionError(StoreError):
    """Store denied the request."""

    pass


class CollectionNotFoundError(StoreError):
    """Collection (or DynamoDB table) does not exist."""

    pass


class CollectionAlreadyExistsError(StoreError):
    """Collection (or DynamoDB table) already exists."""

    pass


class ConvergenceTimeoutError(WorkloadError):
    """Convergence wait exhausted its time budget."""

    pass
