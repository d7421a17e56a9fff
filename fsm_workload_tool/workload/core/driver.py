"""
FSM driver: runs a workload descriptor against a store.

setup runs once, then `thread_count` workers each walk the transition table
for `iterations` steps, then teardown runs once. A fatal error in any worker
stops the others before their next step; teardown still runs.
"""

import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from ..exceptions import ConvergenceTimeoutError
from ..logging_config import get_logger
from ..models import RunReport, RunState, ThreadData, WorkerOutcome
from .descriptor import RunContext, WorkloadDescriptor
from .transitions import TransitionTable

logger = get_logger(__name__)


def _describe_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


class FSMDriver:
    """Runs one workload descriptor."""

    def __init__(
        self,
        descriptor: WorkloadDescriptor,
        ctx: RunContext,
        seed: int | None = None,
    ):
        """
        Initialize driver.

        Args:
            descriptor: Workload to run
            ctx: Store, collection, harness config and balancer
            seed: Base seed for the walks (worker i uses seed + i)
        """
        self.descriptor = descriptor
        self.ctx = ctx
        self.seed = seed
        self.table = TransitionTable(descriptor.transitions)
        self._abort = threading.Event()
        self.report = RunReport(workload=descriptor.name, collection=ctx.namespace)

    @property
    def state(self) -> RunState:
        return self.report.state

    def _transition(self, state: RunState) -> None:
        logger.info(f"{self.descriptor.name}: {self.report.state.value} -> {state.value}")
        self.report.state = state

    def _record(self, where: str, error: BaseException) -> None:
        message = f"{where}: {_describe_error(error)}"
        logger.error(message)
        self.report.errors.append(message)

    def _worker(self, tid: int) -> WorkerOutcome:
        outcome = WorkerOutcome(tid=tid)
        data = ThreadData(tid=tid, shared=dict(self.descriptor.data))
        rng = random.Random(None if self.seed is None else self.seed + tid)

        try:
            for state in self.table.walk(
                self.descriptor.start_state, self.descriptor.iterations, rng
            ):
                if self._abort.is_set():
                    logger.debug(f"Worker {tid} stopping after {data.steps} steps")
                    break
                self.descriptor.states[state](self.ctx, data)
                data.steps += 1
                outcome.visited.append(state)
        except Exception as e:
            outcome.error = e
            self._abort.set()
        return outcome

    def _run_workers(self) -> None:
        count = self.descriptor.thread_count
        logger.info(
            f"Starting {count} workers x {self.descriptor.iterations} iterations "
            f"on {self.ctx.namespace}"
        )
        with ThreadPoolExecutor(max_workers=count, thread_name_prefix="fsm-worker") as executor:
            futures = [executor.submit(self._worker, tid) for tid in range(count)]
            outcomes = [future.result() for future in futures]

        self.report.workers = outcomes
        for outcome in outcomes:
            if outcome.error is not None:
                self._record(f"worker {outcome.tid}", outcome.error)

    def run(self) -> RunReport:
        """
        Run setup, workers and teardown.

        Returns:
            Run report whose state is Converged, TimedOut or Aborted
        """
        if self.report.state is not RunState.NOT_STARTED:
            raise RuntimeError("A driver can only run once")

        self.report.started_at = time.time()
        shared = self.descriptor.data
        try:
            self._transition(RunState.SETUP_RUNNING)
            if self.descriptor.setup is not None:
                try:
                    self.descriptor.setup(self.ctx, shared)
                except Exception as e:
                    self._record("setup", e)
                    self._transition(RunState.ABORTED)
                    return self.report

            self._transition(RunState.WORKERS_RUNNING)
            self._run_workers()
            workers_failed = bool(self.report.errors)

            self._transition(RunState.TEARDOWN_RUNNING)
            timed_out = False
            teardown_failed = False
            if self.descriptor.teardown is not None:
                try:
                    self.descriptor.teardown(self.ctx, shared)
                except ConvergenceTimeoutError as e:
                    self._record("teardown", e)
                    timed_out = True
                except Exception as e:
                    self._record("teardown", e)
                    teardown_failed = True

            if workers_failed or teardown_failed:
                self._transition(RunState.ABORTED)
            elif timed_out:
                self._transition(RunState.TIMED_OUT)
            else:
                self._transition(RunState.CONVERGED)
            return self.report
        finally:
            self.report.finished_at = time.time()
