"""
Workload descriptor: the static bundle an FSM driver consumes.

A descriptor names its states, the weighted transitions between them, the
initial shared data and optional setup/teardown hooks. It is validated once
at construction and never mutated afterwards.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

from ..config import HarnessConfig
from ..exceptions import ConfigurationError
from ..models import StateName, ThreadData
from .store import Balancer, NullBalancer, Store


@dataclass(frozen=True)
class RunContext:
    """Handles every hook and state function receives."""

    store: Store
    collection: str
    config: HarnessConfig = field(default_factory=HarnessConfig)
    balancer: Balancer = field(default_factory=NullBalancer)

    @property
    def namespace(self) -> str:
        return self.store.namespace(self.collection)


class StateHandler(Protocol):
    def __call__(self, ctx: RunContext, data: ThreadData) -> None: ...


Hook = Callable[[RunContext, Mapping[str, Any]], None]


def _check_weight(source: StateName, target: StateName, weight: Any) -> float:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise ConfigurationError(
            f"Transition weight {source.value} -> {target.value} must be a number, got {weight!r}"
        )
    if weight < 0:
        raise ConfigurationError(
            f"Transition weight {source.value} -> {target.value} must be non-negative"
        )
    return float(weight)


@dataclass(frozen=True)
class WorkloadDescriptor:
    """Validated, read-only workload definition."""

    name: str
    thread_count: int
    iterations: int
    states: Mapping[StateName, StateHandler]
    transitions: Mapping[StateName, Mapping[StateName, float]]
    data: Mapping[str, Any] = field(default_factory=dict)
    setup: Hook | None = None
    teardown: Hook | None = None
    start_state: StateName = StateName.INIT
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for label, value in (("threadCount", self.thread_count), ("iterations", self.iterations)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{label} must be an integer, got {value!r}")
        if self.thread_count < 1:
            raise ConfigurationError(f"threadCount must be at least 1, got {self.thread_count}")
        if self.iterations < 1:
            raise ConfigurationError(f"iterations must be at least 1, got {self.iterations}")

        for state in self.states:
            if not isinstance(state, StateName):
                raise ConfigurationError(f"Unknown state {state!r}")
        if StateName.INIT not in self.states:
            raise ConfigurationError("Workload states must define 'init'")
        if self.start_state not in self.states:
            raise ConfigurationError(f"Start state '{self.start_state.value}' is not defined")

        transitions: dict[StateName, dict[StateName, float]] = {}
        for source, targets in self.transitions.items():
            if source not in self.states:
                raise ConfigurationError(f"Transition source {source!r} is not a defined state")
            checked: dict[StateName, float] = {}
            for target, weight in targets.items():
                if target not in self.states:
                    raise ConfigurationError(
                        f"Transition target {target!r} from '{source.value}' is not a defined state"
                    )
                checked[target] = _check_weight(source, target, weight)
            if checked and sum(checked.values()) <= 0:
                raise ConfigurationError(
                    f"Outgoing weights from '{source.value}' must not all be zero"
                )
            transitions[source] = checked

        # Freeze the mappings so the descriptor stays read-only after construction
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))
        object.__setattr__(
            self,
            "transitions",
            MappingProxyType({k: MappingProxyType(v) for k, v in transitions.items()}),
        )
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))
        object.__setattr__(self, "tags", tuple(self.tags))

    def describe(self) -> dict[str, Any]:
        """Return a JSON-friendly summary of the descriptor."""
        return {
            "name": self.name,
            "thread_count": self.thread_count,
            "iterations": self.iterations,
            "start_state": self.start_state.value,
            "states": [state.value for state in self.states],
            "transitions": {
                source.value: {target.value: weight for target, weight in targets.items()}
                for source, targets in self.transitions.items()
            },
            "data": dict(self.data),
            "has_setup": self.setup is not None,
            "has_teardown": self.teardown is not None,
            "tags": list(self.tags),
        }
