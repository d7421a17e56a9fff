"""Tests for the indexed_insert_ttl workload's states and hooks."""

from datetime import datetime

import pytest

from conftest import FakeStore
from fsm_workload_tool.workload.config import HarnessConfig
from fsm_workload_tool.workload.core import indexed_insert_ttl
from fsm_workload_tool.workload.core.descriptor import RunContext
from fsm_workload_tool.workload.exceptions import (
    ConvergenceTimeoutError,
    StoreError,
    WorkloadAssertionError,
)
from fsm_workload_tool.workload.models import StateName, ThreadData


@pytest.fixture
def data():
    return ThreadData(tid=0, shared={"ttl_seconds": 5})


class TestDescriptor:
    def test_defaults(self):
        descriptor = indexed_insert_ttl.build_workload()
        assert descriptor.name == "indexed_insert_ttl"
        assert descriptor.thread_count == 20
        assert descriptor.iterations == 200
        assert descriptor.data == {"ttl_seconds": 5}
        assert set(descriptor.states) == {StateName.INIT, StateName.INSERT}
        assert descriptor.transitions[StateName.INIT] == {StateName.INSERT: 1}
        assert descriptor.transitions[StateName.INSERT] == {StateName.INSERT: 1}
        assert descriptor.tags == ("uses_ttl",)

    def test_overrides(self):
        descriptor = indexed_insert_ttl.build_workload(thread_count=2, iterations=5, ttl_seconds=1)
        assert (descriptor.thread_count, descriptor.iterations) == (2, 5)
        assert descriptor.data["ttl_seconds"] == 1


class TestStates:
    def test_init_inserts_first_document(self, run_ctx, store, data):
        indexed_insert_ttl.init(run_ctx, data)

        [doc] = store.documents["ttl_coll"]
        assert doc["first"] is True
        assert isinstance(doc["indexed_insert_ttl"], datetime)
        assert data.has_initialized is True

    def test_insert_inserts_plain_document(self, run_ctx, store, data):
        data.has_initialized = True
        indexed_insert_ttl.insert(run_ctx, data)

        [doc] = store.documents["ttl_coll"]
        assert "first" not in doc
        assert isinstance(doc["indexed_insert_ttl"], datetime)

    def test_insert_before_init_marks_first_document(self, run_ctx, store, data):
        indexed_insert_ttl.insert(run_ctx, data)
        indexed_insert_ttl.insert(run_ctx, data)
        assert [d.get("first") for d in store.documents["ttl_coll"]] == [True, None]

    @pytest.mark.parametrize("state", [indexed_insert_ttl.init, indexed_insert_ttl.insert])
    @pytest.mark.parametrize("n_inserted", [0, 2])
    def test_unexpected_insert_count_is_fatal(self, state, n_inserted, data):
        ctx = RunContext(store=FakeStore(n_inserted=n_inserted), collection="ttl_coll")
        with pytest.raises(AssertionError, match="unexpected insert count"):
            state(ctx, data)

    def test_insert_count_not_checked_on_shared_collection(self, data):
        ctx = RunContext(
            store=FakeStore(n_inserted=0),
            collection="ttl_coll",
            config=HarnessConfig(own_collection=False),
        )
        indexed_insert_ttl.init(ctx, data)

    def test_store_error_propagates(self, run_ctx, store, data):
        store.fail_insert_after = 0
        with pytest.raises(StoreError):
            indexed_insert_ttl.init(run_ctx, data)

    def test_assertion_error_is_workload_error(self):
        assert issubclass(WorkloadAssertionError, AssertionError)


class TestSetup:
    def test_creates_ttl_index(self, run_ctx, store):
        indexed_insert_ttl.setup(run_ctx, {"ttl_seconds": 5})
        assert store.indexes["ttl_coll"] == [({"indexed_insert_ttl": 1}, 5)]

    def test_index_failure_propagates(self, run_ctx, store):
        store.fail_create_index = True
        with pytest.raises(StoreError):
            indexed_insert_ttl.setup(run_ctx, {"ttl_seconds": 5})


class TestTeardown:
    def test_converges_when_first_documents_expire(self, clock, data):
        store = FakeStore(clock=clock, sweep_at=60.0)
        ctx = RunContext(store=store, collection="ttl_coll", config=HarnessConfig(poll_interval_ms=1000))
        indexed_insert_ttl.setup(ctx, {"ttl_seconds": 5})
        indexed_insert_ttl.init(ctx, data)

        teardown = indexed_insert_ttl.make_teardown(clock, clock.sleep)
        teardown(ctx, {"ttl_seconds": 5})

        assert clock.now == pytest.approx(60.0)
        assert store.count("ttl_coll", {"first": True}) == 0

    def test_times_out_at_computed_boundary(self, clock, run_ctx, data):
        indexed_insert_ttl.init(run_ctx, data)
        teardown = indexed_insert_ttl.make_teardown(clock, clock.sleep)

        with pytest.raises(ConvergenceTimeoutError, match="oldest documents with TTL fields"):
            teardown(run_ctx, {"ttl_seconds": 5})
        assert clock.now == pytest.approx(120.0)

    def test_ci_timeout_is_longer(self, clock, store, data):
        ctx = RunContext(
            store=store, collection="ttl_coll", config=HarnessConfig(in_ci=True, poll_interval_ms=1000)
        )
        indexed_insert_ttl.init(ctx, data)
        teardown = indexed_insert_ttl.make_teardown(clock, clock.sleep)

        with pytest.raises(ConvergenceTimeoutError):
            teardown(ctx, {"ttl_seconds": 5})
        assert clock.now == pytest.approx(600.0)

    def test_disables_balancing_first(self, clock, store, balancer):
        ctx = RunContext(
            store=store,
            collection="ttl_coll",
            config=HarnessConfig(running_with_balancer=True),
            balancer=balancer,
        )
        indexed_insert_ttl.make_teardown(clock, clock.sleep)(ctx, {"ttl_seconds": 5})
        assert balancer.calls == [("disable", "test.ttl_coll"), ("join",)]

    def test_balancer_untouched_without_flag(self, clock, store, balancer):
        ctx = RunContext(store=store, collection="ttl_coll", balancer=balancer)
        indexed_insert_ttl.make_teardown(clock, clock.sleep)(ctx, {"ttl_seconds": 5})
        assert balancer.calls == []

    def test_shared_collection_skips_convergence_check(self, clock, data):
        store = FakeStore()
        ctx = RunContext(
            store=store, collection="ttl_coll", config=HarnessConfig(own_collection=False)
        )
        indexed_insert_ttl.init(ctx, data)
        indexed_insert_ttl.make_teardown(clock, clock.sleep)(ctx, {"ttl_seconds": 5})
        assert store.count_calls == 0
