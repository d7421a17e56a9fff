"""
Collaborator interfaces a workload talks to.

Store adapters (MongoDB, DynamoDB) and balancer adapters implement these
protocols; workloads never touch a driver library directly.
"""

from typing import Any, Protocol

from ..models import InsertResult


class Store(Protocol):
    """Narrow document store interface."""

    def insert(self, collection: str, document: dict[str, Any]) -> InsertResult:
        """Insert one document. Raises StoreError on failure."""
        ...

    def create_index(
        self, collection: str, key_spec: dict[str, int], expire_after_seconds: int
    ) -> None:
        """Create a TTL index. Raises StoreError on failure."""
        ...

    def count(self, collection: str, filter: dict[str, Any]) -> int:
        """Count documents matching an equality filter."""
        ...

    def namespace(self, collection: str) -> str:
        """Full name of the collection."""
        ...

    def close(self) -> None:
        """Release connections held by the adapter."""
        ...


class Balancer(Protocol):
    """Chunk balancer control."""

    def disable_for_collection(self, namespace: str) -> None: ...

    def join_current_round(self) -> None: ...


class NullBalancer:
    """Balancer for deployments without a balancing subsystem."""

    def disable_for_collection(self, namespace: str) -> None:
        pass

    def join_current_round(self) -> None:
        pass
