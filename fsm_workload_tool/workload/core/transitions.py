"""
Weighted random walk over a workload's transition table.
"""

import random
from collections.abc import Iterator, Mapping

from ..models import StateName


class TransitionTable:
    """Normalized transition probabilities keyed by source state."""

    def __init__(self, transitions: Mapping[StateName, Mapping[StateName, float]]):
        self._choices: dict[StateName, tuple[list[StateName], list[float]]] = {}
        for source, targets in transitions.items():
            total = sum(targets.values())
            if not targets or total <= 0:
                continue
            # Zero-weight edges are never taken
            edges = [(target, weight / total) for target, weight in targets.items() if weight > 0]
            self._choices[source] = ([t for t, _ in edges], [p for _, p in edges])

    def probabilities(self, state: StateName) -> dict[StateName, float]:
        """
        Get the normalized outgoing distribution of a state.

        Args:
            state: Source state

        Returns:
            Mapping of target state to probability (empty if terminal)
        """
        if state not in self._choices:
            return {}
        targets, weights = self._choices[state]
        return dict(zip(targets, weights))

    def next_state(self, state: StateName, rng: random.Random) -> StateName | None:
        """
        Sample the state that follows `state`.

        Returns:
            Next state, or None when `state` has no outgoing transitions
        """
        choice = self._choices.get(state)
        if choice is None:
            return None
        targets, weights = choice
        if len(targets) == 1:
            return targets[0]
        return rng.choices(targets, weights=weights, k=1)[0]

    def walk(self, start: StateName, steps: int, rng: random.Random) -> Iterator[StateName]:
        """
        Yield up to `steps` visited states beginning with `start`.

        The walk ends early when it reaches a state with no outgoing edges.
        """
        state: StateName | None = start
        for _ in range(steps):
            if state is None:
                return
            yield state
            state = self.next_state(state, rng)
