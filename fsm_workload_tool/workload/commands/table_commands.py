"""
Table management commands for the DynamoDB backend.
"""

from typing import Literal

import click

from ..constants import DEFAULT_COLLECTION_NAME
from ..core.table_operations import create_table, drop_table
from ..exceptions import CollectionAlreadyExistsError, CollectionNotFoundError, StoreError
from ..logging_config import get_logger, setup_logging
from ..utils import error_json, error_text, output_json, output_text

logger = get_logger(__name__)


@click.command("create-table")
@click.option(
    "--table",
    envvar="FSM_COLLECTION",
    default=DEFAULT_COLLECTION_NAME,
    help="DynamoDB table name",
)
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", envvar="AWS_PROFILE", help="AWS profile")
@click.option(
    "--billing",
    type=click.Choice(["on-demand", "provisioned"]),
    default="on-demand",
    help="Billing mode (default: on-demand)",
)
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def create_table_command(
    ctx: click.Context,
    table: str,
    region: str | None,
    profile: str | None,
    billing: str,
    text: bool,
    verbose: int,
) -> None:
    """Create a DynamoDB table to run a workload against.

    The table is keyed by `_id`. TTL is enabled by the workload's setup.

    Examples:

    \b
        fsm-workload-tool workload create-table --table fsm-ttl

    \b
    Output Format:
        {"table": "...", "status": "ACTIVE", "arn": "..."}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Creating table '{table}'")
        logger.debug(f"Region: {region}, Billing: {billing}")

        billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = (
            "PAY_PER_REQUEST" if billing == "on-demand" else "PROVISIONED"
        )
        table_desc = create_table(table, region, profile, billing_mode)

        if text:
            output_text(f"Table '{table}' created")
            output_text(f"Status: {table_desc['TableStatus']}")
            output_text(f"ARN: {table_desc['TableArn']}")
        else:
            output_json(
                {
                    "table": table,
                    "status": table_desc["TableStatus"],
                    "arn": table_desc["TableArn"],
                }
            )

    except CollectionAlreadyExistsError as e:
        solution = f"Use a different table name or drop it with 'drop-table --table {table} --approve'"
        if text:
            click.echo(error_text(str(e), solution), err=True)
        else:
            click.echo(error_json(str(e), solution, 1), err=True)
        ctx.exit(1)

    except StoreError as e:
        if text:
            click.echo(error_text(str(e), "Check AWS credentials and permissions"), err=True)
        else:
            click.echo(error_json(str(e), "Check AWS credentials and permissions", 3), err=True)
        ctx.exit(3)


@click.command("drop-table")
@click.option(
    "--table",
    envvar="FSM_COLLECTION",
    default=DEFAULT_COLLECTION_NAME,
    help="DynamoDB table name",
)
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", envvar="AWS_PROFILE", help="AWS profile")
@click.option("--approve", is_flag=True, help="Required flag to confirm table deletion")
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def drop_table_command(
    ctx: click.Context,
    table: str,
    region: str | None,
    profile: str | None,
    approve: bool,
    text: bool,
    verbose: int,
) -> None:
    """Drop a workload table. Requires --approve.

    Examples:

    \b
        fsm-workload-tool workload drop-table --table fsm-ttl --approve
    """
    setup_logging(verbose)

    if not approve:
        message = f"Refusing to drop table '{table}' without --approve"
        if text:
            click.echo(error_text(message, "Re-run with --approve"), err=True)
        else:
            click.echo(error_json(message, "Re-run with --approve", 2), err=True)
        ctx.exit(2)

    try:
        logger.info(f"Dropping table '{table}'")
        table_desc = drop_table(table, region, profile)

        if text:
            output_text(f"Table '{table}' is being deleted")
        else:
            output_json({"table": table, "status": table_desc["TableStatus"]})

    except CollectionNotFoundError as e:
        if text:
            click.echo(error_text(str(e), "Check the table name"), err=True)
        else:
            click.echo(error_json(str(e), "Check the table name", 1), err=True)
        ctx.exit(1)

    except StoreError as e:
        if text:
            click.echo(error_text(str(e), "Check AWS credentials and permissions"), err=True)
        else:
            click.echo(error_json(str(e), "Check AWS credentials and permissions", 3), err=True)
        ctx.exit(3)
