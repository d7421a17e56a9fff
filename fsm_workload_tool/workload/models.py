"""
Type models for FSM workload runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StateName(Enum):
    """Closed set of states a workload can declare."""

    INIT = "init"
    INSERT = "insert"


class RunState(Enum):
    """Lifecycle of a single workload run."""

    NOT_STARTED = "NotStarted"
    SETUP_RUNNING = "SetupRunning"
    WORKERS_RUNNING = "WorkersRunning"
    TEARDOWN_RUNNING = "TeardownRunning"
    CONVERGED = "Converged"
    TIMED_OUT = "TimedOut"
    ABORTED = "Aborted"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of a single store insert."""

    n_inserted: int


@dataclass
class ThreadData:
    """Thread-local record handed to every state function of one worker."""

    tid: int
    shared: dict[str, Any]
    has_initialized: bool = False
    steps: int = 0


@dataclass
class WorkerOutcome:
    """What one worker did before it stopped."""

    tid: int
    visited: list[StateName] = field(default_factory=list)
    error: BaseException | None = None


@dataclass
class RunReport:
    """Aggregated result of a workload run."""

    workload: str
    collection: str
    state: RunState = RunState.NOT_STARTED
    errors: list[str] = field(default_factory=list)
    workers: list[WorkerOutcome] = field(default_factory=list)
    started_at: float = 0.0
    finished_at: float = 0.0

    @property
    def duration(self) -> float:
        return self.finished_at - self.started_at

    @property
    def total_steps(self) -> int:
        return sum(len(w.visited) for w in self.workers)

    def to_dict(self) -> dict[str, Any]:
        return {
            "workload": self.workload,
            "collection": self.collection,
            "state": self.state.value,
            "threads": len(self.workers),
            "total_steps": self.total_steps,
            "duration_seconds": round(self.duration, 3),
            "errors": list(self.errors),
        }
