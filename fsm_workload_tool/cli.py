"""CLI entry point for fsm-workload-tool."""

import click

from fsm_workload_tool.workload.commands.table_commands import (
    create_table_command,
    drop_table_command,
)
from fsm_workload_tool.workload.commands.workload_commands import (
    describe_command,
    list_command,
    run_command,
    timeout_command,
    walk_command,
)


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """Run finite-state-machine concurrency workloads against a document store"""
    pass


@main.group("workload")
def workload() -> None:
    """FSM workloads: inspect, simulate and run"""
    pass


# Register inspection commands
workload.add_command(list_command)
workload.add_command(describe_command)
workload.add_command(walk_command)
workload.add_command(timeout_command)

# Register run command
workload.add_command(run_command)

# Register table commands
workload.add_command(create_table_command)
workload.add_command(drop_table_command)

if __name__ == "__main__":
    main()
