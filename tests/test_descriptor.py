"""Tests for workload descriptor validation."""

import pytest

from fsm_workload_tool.workload.core.descriptor import WorkloadDescriptor
from fsm_workload_tool.workload.exceptions import ConfigurationError
from fsm_workload_tool.workload.models import StateName


def noop(ctx, data):
    pass


def make(**kwargs):
    params = {
        "name": "w",
        "thread_count": 2,
        "iterations": 3,
        "states": {StateName.INIT: noop, StateName.INSERT: noop},
        "transitions": {
            StateName.INIT: {StateName.INSERT: 1},
            StateName.INSERT: {StateName.INSERT: 1},
        },
    }
    params.update(kwargs)
    return WorkloadDescriptor(**params)


class TestValidation:
    def test_valid_descriptor(self):
        descriptor = make()
        assert descriptor.thread_count == 2
        assert descriptor.start_state is StateName.INIT

    @pytest.mark.parametrize("field", ["thread_count", "iterations"])
    def test_counts_must_be_positive(self, field):
        with pytest.raises(ConfigurationError, match=field.split("_")[0]):
            make(**{field: 0})

    @pytest.mark.parametrize("field", ["thread_count", "iterations"])
    @pytest.mark.parametrize("value", [2.5, True, "3"])
    def test_counts_must_be_integers(self, field, value):
        with pytest.raises(ConfigurationError, match="must be an integer"):
            make(**{field: value})

    def test_init_state_required(self):
        with pytest.raises(ConfigurationError, match="init"):
            make(
                states={StateName.INSERT: noop},
                transitions={StateName.INSERT: {StateName.INSERT: 1}},
            )

    def test_transition_target_must_be_defined(self):
        with pytest.raises(ConfigurationError, match="not a defined state"):
            make(
                states={StateName.INIT: noop},
                transitions={StateName.INIT: {StateName.INSERT: 1}},
            )

    def test_transition_source_must_be_defined(self):
        with pytest.raises(ConfigurationError, match="source"):
            make(
                states={StateName.INIT: noop},
                transitions={StateName.INSERT: {StateName.INIT: 1}},
            )

    def test_unknown_state_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown state"):
            make(states={StateName.INIT: noop, "bogus": noop})

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError, match="non-negative"):
            make(transitions={StateName.INIT: {StateName.INSERT: -1}})

    def test_non_numeric_weight_rejected(self):
        with pytest.raises(ConfigurationError, match="number"):
            make(transitions={StateName.INIT: {StateName.INSERT: "1"}})

    def test_all_zero_weights_rejected(self):
        with pytest.raises(ConfigurationError, match="zero"):
            make(transitions={StateName.INIT: {StateName.INSERT: 0}})

    def test_weights_need_not_sum_to_one(self):
        descriptor = make(
            transitions={StateName.INIT: {StateName.INSERT: 3, StateName.INIT: 1}}
        )
        assert descriptor.transitions[StateName.INIT][StateName.INSERT] == 3.0

    def test_state_without_outgoing_edges_allowed(self):
        descriptor = make(transitions={StateName.INIT: {StateName.INSERT: 1}})
        assert StateName.INSERT not in descriptor.transitions


class TestReadOnly:
    def test_mappings_are_frozen(self):
        descriptor = make(data={"ttl_seconds": 5})
        with pytest.raises(TypeError):
            descriptor.data["ttl_seconds"] = 10
        with pytest.raises(TypeError):
            descriptor.transitions[StateName.INIT][StateName.INIT] = 1

    def test_describe(self):
        info = make(data={"ttl_seconds": 5}, tags=("uses_ttl",)).describe()
        assert info["states"] == ["init", "insert"]
        assert info["transitions"] == {"init": {"insert": 1.0}, "insert": {"insert": 1.0}}
        assert info["data"] == {"ttl_seconds": 5}
        assert info["tags"] == ["uses_ttl"]
        assert info["has_setup"] is False
