"""
Workload commands - inspect and run FSM workloads.
"""

import dataclasses
import random

import click

from ..config import HarnessConfig
from ..constants import (
    DEFAULT_COLLECTION_NAME,
    DEFAULT_DATABASE_NAME,
    DEFAULT_MONGODB_URI,
    EXIT_ABORTED,
    EXIT_CONVERGED,
    EXIT_STORE_ERROR,
    EXIT_TIMED_OUT,
)
from ..core.convergence import compute_timeout_ms
from ..core.descriptor import RunContext
from ..core.driver import FSMDriver
from ..core.dynamodb_client import DynamoDBStore
from ..core.mongo_client import MongoBalancer, MongoStore
from ..core.registry import WORKLOADS, get_workload
from ..core.store import Balancer, NullBalancer, Store
from ..core.table_operations import check_table_exists
from ..core.transitions import TransitionTable
from ..exceptions import CollectionNotFoundError, ConfigurationError, StoreError
from ..logging_config import get_logger, setup_logging
from ..models import RunState
from ..utils import error_json, error_text, output_json, output_text, validate_collection_name

logger = get_logger(__name__)

EXIT_CODES = {
    RunState.CONVERGED: EXIT_CONVERGED,
    RunState.TIMED_OUT: EXIT_TIMED_OUT,
    RunState.ABORTED: EXIT_ABORTED,
}

text_option = click.option("--text", is_flag=True, help="Output as human-readable text")
verbose_option = click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)


def _fail(ctx: click.Context, text: bool, error: str, solution: str, exit_code: int) -> None:
    if text:
        click.echo(error_text(error, solution), err=True)
    else:
        click.echo(error_json(error, solution, exit_code), err=True)
    ctx.exit(exit_code)


def build_store(
    backend: str,
    collection: str,
    uri: str,
    database: str,
    region: str | None,
    profile: str | None,
    with_balancer: bool,
) -> tuple[Store, Balancer]:
    """
    Create the store adapter and balancer for a backend.

    Returns:
        Tuple of (store, balancer)

    Raises:
        CollectionNotFoundError: If the DynamoDB table has not been created
        StoreError: If the adapter cannot be configured
    """
    if backend == "mongodb":
        mongo = MongoStore(uri, database)
        balancer: Balancer = MongoBalancer(mongo.client) if with_balancer else NullBalancer()
        return mongo, balancer
    if backend == "dynamodb":
        if not check_table_exists(collection, region, profile):
            raise CollectionNotFoundError(f"Table '{collection}' not found")
        return DynamoDBStore(region, profile), NullBalancer()
    raise ConfigurationError(f"Unknown backend '{backend}'")


@click.command("list")
@text_option
def list_command(text: bool) -> None:
    """List registered workloads.

    Examples:

    \b
        fsm-workload-tool workload list
    """
    names = sorted(WORKLOADS)
    if text:
        for name in names:
            output_text(name)
    else:
        output_json({"workloads": names})


@click.command("describe")
@click.argument("name")
@text_option
@click.pass_context
def describe_command(ctx: click.Context, name: str, text: bool) -> None:
    """Show a workload's threads, iterations, states and transitions.

    Examples:

    \b
        fsm-workload-tool workload describe indexed_insert_ttl

    \b
    Output Format:
        {"name": "indexed_insert_ttl", "thread_count": 20, "iterations": 200,
         "states": ["init", "insert"], "transitions": {...}, ...}
    """
    try:
        descriptor = get_workload(name)
    except ConfigurationError as e:
        _fail(ctx, text, str(e), "Run 'workload list' to see known workloads", 1)
        return

    info = descriptor.describe()
    table = TransitionTable(descriptor.transitions)
    info["probabilities"] = {
        state.value: {target.value: p for target, p in table.probabilities(state).items()}
        for state in descriptor.states
    }

    if text:
        output_text(f"Workload: {info['name']}")
        output_text(f"Threads: {info['thread_count']}")
        output_text(f"Iterations: {info['iterations']}")
        output_text(f"Start: {info['start_state']}")
        for source, targets in info["probabilities"].items():
            edges = ", ".join(f"{t} ({p:.2f})" for t, p in targets.items()) or "(terminal)"
            output_text(f"  {source} -> {edges}")
        output_text(f"Data: {info['data']}")
        output_text(f"Tags: {', '.join(info['tags'])}")
    else:
        output_json(info)


@click.command("walk")
@click.argument("name")
@click.option("--steps", type=click.IntRange(min=1), help="Steps to walk (default: iterations)")
@click.option("--seed", type=int, default=0, show_default=True, help="Random seed")
@text_option
@click.pass_context
def walk_command(
    ctx: click.Context, name: str, steps: int | None, seed: int, text: bool
) -> None:
    """Print the state sequence one worker would visit, without a store.

    Examples:

    \b
        fsm-workload-tool workload walk indexed_insert_ttl --steps 5 --seed 42
    """
    try:
        descriptor = get_workload(name)
    except ConfigurationError as e:
        _fail(ctx, text, str(e), "Run 'workload list' to see known workloads", 1)
        return

    table = TransitionTable(descriptor.transitions)
    visited = [
        state.value
        for state in table.walk(
            descriptor.start_state, steps or descriptor.iterations, random.Random(seed)
        )
    ]
    if text:
        output_text(" -> ".join(visited))
    else:
        output_json({"workload": name, "seed": seed, "states": visited})


@click.command("timeout")
@click.option("--ttl-seconds", type=click.IntRange(min=0), default=5, show_default=True)
@click.option("--ci", is_flag=True, help="Use the continuous-integration multiplier")
@text_option
def timeout_command(ttl_seconds: int, ci: bool, text: bool) -> None:
    """Show the TTL convergence timeout teardown would use.

    Examples:

    \b
        fsm-workload-tool workload timeout --ttl-seconds 5 --ci
    """
    timeout_ms = compute_timeout_ms(ttl_seconds, ci)
    if text:
        output_text(f"{timeout_ms} ms")
    else:
        output_json({"ttl_seconds": ttl_seconds, "in_ci": ci, "timeout_ms": timeout_ms})


@click.command("run")
@click.argument("name")
@click.option(
    "--backend",
    envvar="FSM_BACKEND",
    type=click.Choice(["mongodb", "dynamodb"]),
    default="mongodb",
    show_default=True,
    help="Store backend",
)
@click.option(
    "--collection",
    envvar="FSM_COLLECTION",
    default=DEFAULT_COLLECTION_NAME,
    show_default=True,
    help="Collection (DynamoDB table)",
)
@click.option("--uri", envvar="MONGODB_URI", default=DEFAULT_MONGODB_URI, help="MongoDB URI")
@click.option(
    "--database", envvar="MONGODB_DATABASE", default=DEFAULT_DATABASE_NAME, help="MongoDB database"
)
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", envvar="AWS_PROFILE", help="AWS profile")
@click.option("--threads", type=click.IntRange(min=1), help="Override thread count")
@click.option("--iterations", type=click.IntRange(min=1), help="Override iterations")
@click.option("--ttl-seconds", type=click.IntRange(min=0), help="Override TTL expiry")
@click.option("--seed", type=int, help="Base random seed for the walks")
@click.option(
    "--balancer/--no-balancer",
    default=None,
    help="Run is under a balancer [env: FSM_RUNNING_WITH_BALANCER]",
)
@click.option("--ci/--no-ci", default=None, help="CI-like host [env: FSM_IN_CI, CI]")
@click.option(
    "--own-collection/--not-own-collection",
    default=None,
    help="Workload owns its collection [env: FSM_OWN_COLLECTION]",
)
@click.option(
    "--poll-interval-ms",
    type=click.IntRange(min=1),
    help="Convergence poll interval [env: FSM_POLL_INTERVAL_MS]",
)
@text_option
@verbose_option
@click.pass_context
def run_command(
    ctx: click.Context,
    name: str,
    backend: str,
    collection: str,
    uri: str,
    database: str,
    region: str | None,
    profile: str | None,
    threads: int | None,
    iterations: int | None,
    ttl_seconds: int | None,
    seed: int | None,
    balancer: bool | None,
    ci: bool | None,
    own_collection: bool | None,
    poll_interval_ms: int | None,
    text: bool,
    verbose: int,
) -> None:
    """Run a workload: setup, concurrent workers, teardown.

    Exits 0 when the run converged, 1 when teardown timed out, 2 when the
    run aborted and 3 on store or configuration errors.

    Examples:

    \b
        # Run against a local mongod
        fsm-workload-tool workload run indexed_insert_ttl

    \b
        # Fewer threads, sharded cluster, CI host
        fsm-workload-tool workload run indexed_insert_ttl --threads 4 \\
            --uri mongodb://mongos:27017 --balancer --ci

    \b
        # DynamoDB table (create it first with create-table)
        fsm-workload-tool workload run indexed_insert_ttl --backend dynamodb \\
            --collection fsm-ttl

    \b
    Output Format:
        {"workload": "indexed_insert_ttl", "collection": "fsm_workloads.fsm-workload-tool",
         "state": "Converged", "threads": 20, "total_steps": 4000,
         "duration_seconds": 73.2, "errors": []}
    """
    setup_logging(verbose)

    try:
        overrides = {
            "running_with_balancer": balancer,
            "in_ci": ci,
            "own_collection": own_collection,
            "poll_interval_ms": poll_interval_ms,
        }
        config = dataclasses.replace(
            HarnessConfig.from_env(), **{k: v for k, v in overrides.items() if v is not None}
        )
        descriptor = get_workload(
            name, thread_count=threads, iterations=iterations, ttl_seconds=ttl_seconds
        )
        validate_collection_name(collection)
    except (ConfigurationError, ValueError) as e:
        _fail(ctx, text, str(e), "Check workload name and options", EXIT_STORE_ERROR)
        return

    logger.info(f"Running '{name}' on {backend} collection '{collection}'")
    logger.debug(f"Harness config: {config}")

    store: Store | None = None
    try:
        store, store_balancer = build_store(
            backend, collection, uri, database, region, profile, config.running_with_balancer
        )
        run_ctx = RunContext(
            store=store, collection=collection, config=config, balancer=store_balancer
        )
        report = FSMDriver(descriptor, run_ctx, seed=seed).run()
    except CollectionNotFoundError as e:
        solution = f"Run 'fsm-workload-tool workload create-table --table {collection}' first"
        _fail(ctx, text, str(e), solution, EXIT_STORE_ERROR)
        return
    except StoreError as e:
        _fail(ctx, text, str(e), "Check the store is reachable and credentials", EXIT_STORE_ERROR)
        return
    finally:
        if store is not None:
            store.close()

    if text:
        output_text(f"Workload: {report.workload}")
        output_text(f"Collection: {report.collection}")
        output_text(f"State: {report.state.value}")
        output_text(f"Steps: {report.total_steps}")
        output_text(f"Duration: {report.duration:.1f}s")
        for error in report.errors:
            output_text(f"  {error}")
    else:
        output_json(report.to_dict())

    ctx.exit(EXIT_CODES[report.state])
