"""Shared fixtures: an in-memory store, a fake clock and a recording balancer."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from fsm_workload_tool.workload.config import HarnessConfig
from fsm_workload_tool.workload.core.descriptor import RunContext
from fsm_workload_tool.workload.exceptions import StoreError
from fsm_workload_tool.workload.models import InsertResult


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeStore:
    """Thread-safe in-memory store.

    Documents carrying a TTL-indexed field are removed by sweep(). When
    `sweep_at` is set, count() sweeps once `clock()` reaches that value,
    standing in for the store's background TTL monitor.
    """

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        sweep_at: float | None = None,
        n_inserted: int = 1,
    ) -> None:
        self._lock = threading.Lock()
        self.documents: dict[str, list[dict[str, Any]]] = {}
        self.indexes: dict[str, list[tuple[dict[str, int], int]]] = {}
        self.count_calls = 0
        self.clock = clock
        self.sweep_at = sweep_at
        self.n_inserted = n_inserted
        self.fail_insert_after: int | None = None
        self.fail_create_index = False
        self.inserts = 0
        self.closed = 0

    def namespace(self, collection: str) -> str:
        return f"test.{collection}"

    def close(self) -> None:
        self.closed += 1

    def insert(self, collection: str, document: dict[str, Any]) -> InsertResult:
        with self._lock:
            if self.fail_insert_after is not None and self.inserts >= self.fail_insert_after:
                raise StoreError("insert rejected")
            self.inserts += 1
            self.documents.setdefault(collection, []).append(dict(document))
        return InsertResult(n_inserted=self.n_inserted)

    def create_index(
        self, collection: str, key_spec: dict[str, int], expire_after_seconds: int
    ) -> None:
        if self.fail_create_index:
            raise StoreError("index build failed")
        self.indexes.setdefault(collection, []).append((key_spec, expire_after_seconds))

    def count(self, collection: str, filter: dict[str, Any]) -> int:
        with self._lock:
            self.count_calls += 1
            if self.sweep_at is not None and self.clock is not None and self.clock() >= self.sweep_at:
                self._sweep(collection)
            docs = self.documents.get(collection, [])
            return sum(1 for d in docs if all(d.get(k) == v for k, v in filter.items()))

    def sweep(self, collection: str) -> None:
        with self._lock:
            self._sweep(collection)

    def _sweep(self, collection: str) -> None:
        fields = {field for spec, _ in self.indexes.get(collection, []) for field in spec}
        self.documents[collection] = [
            d for d in self.documents.get(collection, []) if not fields & set(d)
        ]


class RecordingBalancer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []

    def disable_for_collection(self, namespace: str) -> None:
        self.calls.append(("disable", namespace))

    def join_current_round(self) -> None:
        self.calls.append(("join",))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def balancer() -> RecordingBalancer:
    return RecordingBalancer()


@pytest.fixture
def run_ctx(store: FakeStore) -> RunContext:
    return RunContext(store=store, collection="ttl_coll", config=HarnessConfig(poll_interval_ms=1000))
