"""
Utility functions for workload commands.
"""

import json
from typing import Any


def format_namespace(database: str, collection: str) -> str:
    """
    Format a full collection namespace.

    Args:
        database: Database name
        collection: Collection name

    Returns:
        Namespace (e.g., 'fsm_workloads.indexed_insert_ttl')
    """
    return f"{database}.{collection}"


def output_json(data: dict[str, Any], quiet: bool = False) -> None:
    """
    Output JSON to stdout.

    Args:
        data: Data to output as JSON
        quiet: If True, suppress output
    """
    if not quiet:
        print(json.dumps(data, default=str))


def output_text(message: str, quiet: bool = False) -> None:
    """
    Output text to stdout.

    Args:
        message: Message to output
        quiet: If True, suppress output
    """
    if not quiet:
        print(message)


def error_json(error: str, solution: str, exit_code: int) -> str:
    """
    Format error as a JSON line.

    Args:
        error: Error message
        solution: Solution suggestion
        exit_code: Exit code

    Returns:
        JSON-encoded error document
    """
    return json.dumps({"error": error, "solution": solution, "exit_code": exit_code})


def error_text(error: str, solution: str) -> str:
    """
    Format error as human-readable text.

    Args:
        error: Error message
        solution: Solution suggestion

    Returns:
        Formatted error message
    """
    return f"Error: {error}\n\nSolution: {solution}"


def validate_collection_name(name: str) -> bool:
    """
    Validate a collection name usable by both MongoDB and DynamoDB.

    Args:
        name: Collection name to validate

    Returns:
        True if valid

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Collection name cannot be empty")
    if len(name) < 3 or len(name) > 255:
        raise ValueError("Collection name must be between 3 and 255 characters")
    if not all(c.isalnum() or c in "-_." for c in name):
        raise ValueError(
            "Collection name can only contain alphanumeric characters, hyphens, "
            "underscores, and periods"
        )
    return True
