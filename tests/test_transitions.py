"""Tests for the weighted random walk."""

import random

import pytest

from fsm_workload_tool.workload.core.transitions import TransitionTable
from fsm_workload_tool.workload.models import StateName

INIT = StateName.INIT
INSERT = StateName.INSERT


def test_ttl_walk_is_init_then_inserts():
    table = TransitionTable({INIT: {INSERT: 1}, INSERT: {INSERT: 1}})
    visited = list(table.walk(INIT, 200, random.Random(7)))
    assert visited == [INIT] + [INSERT] * 199


def test_walk_is_deterministic_for_a_seed():
    table = TransitionTable({INIT: {INIT: 1, INSERT: 2}, INSERT: {INIT: 1, INSERT: 1}})
    first = list(table.walk(INIT, 50, random.Random(42)))
    second = list(table.walk(INIT, 50, random.Random(42)))
    assert first == second
    assert len(first) == 50


def test_walk_stops_at_terminal_state():
    table = TransitionTable({INIT: {INSERT: 1}})
    assert list(table.walk(INIT, 10, random.Random(0))) == [INIT, INSERT]


def test_probabilities_are_normalized():
    table = TransitionTable({INIT: {INIT: 1, INSERT: 3}})
    probabilities = table.probabilities(INIT)
    assert probabilities[INIT] == pytest.approx(0.25)
    assert probabilities[INSERT] == pytest.approx(0.75)
    assert table.probabilities(INSERT) == {}


def test_zero_weight_edge_never_taken():
    table = TransitionTable({INIT: {INIT: 0, INSERT: 1}, INSERT: {INIT: 0, INSERT: 5}})
    rng = random.Random(3)
    assert all(table.next_state(INIT, rng) is INSERT for _ in range(100))


def test_sampling_follows_weights():
    table = TransitionTable({INIT: {INIT: 1, INSERT: 3}})
    rng = random.Random(1234)
    picks = [table.next_state(INIT, rng) for _ in range(4000)]
    assert picks.count(INSERT) / len(picks) == pytest.approx(0.75, abs=0.05)
