"""
Registered workloads by name.
"""

from collections.abc import Callable

from ..constants import TTL_WORKLOAD_NAME
from ..exceptions import ConfigurationError
from . import indexed_insert_ttl
from .descriptor import WorkloadDescriptor

WORKLOADS: dict[str, Callable[..., WorkloadDescriptor]] = {
    TTL_WORKLOAD_NAME: indexed_insert_ttl.build_workload,
}


def get_workload(name: str, **overrides: int) -> WorkloadDescriptor:
    """
    Build a registered workload.

    Args:
        name: Workload name
        **overrides: Builder arguments (thread_count, iterations, ...)

    Returns:
        Workload descriptor

    Raises:
        ConfigurationError: If no workload has that name
    """
    try:
        builder = WORKLOADS[name]
    except KeyError:
        known = ", ".join(sorted(WORKLOADS))
        raise ConfigurationError(f"Unknown workload '{name}' (known: {known})")
    return builder(**{k: v for k, v in overrides.items() if v is not None})
