"""
Table management operations for the DynamoDB backend.
"""

from typing import Any, Literal

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..constants import ATTR_ID
from ..exceptions import CollectionAlreadyExistsError, CollectionNotFoundError, StoreError


def create_table(
    table_name: str,
    region: str | None = None,
    profile: str | None = None,
    billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = "PAY_PER_REQUEST",
) -> dict[str, Any]:
    """
    Create a DynamoDB table to hold a workload collection.

    Args:
        table_name: Table name
        region: AWS region (optional)
        profile: AWS profile (optional)
        billing_mode: Billing mode (PAY_PER_REQUEST or PROVISIONED)

    Returns:
        Table description

    Raises:
        CollectionAlreadyExistsError: If table already exists
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    dynamodb = session.client("dynamodb")

    kwargs: dict[str, Any] = {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": ATTR_ID, "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": ATTR_ID, "AttributeType": "S"}],
        "BillingMode": billing_mode,
        "Tags": [
            {"Key": "ManagedBy", "Value": "fsm-workload-tool"},
            {"Key": "Purpose", "Value": "fsm-workload"},
        ],
    }
    if billing_mode == "PROVISIONED":
        kwargs["ProvisionedThroughput"] = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 25}

    try:
        response = dynamodb.create_table(**kwargs)
        dynamodb.get_waiter("table_exists").wait(TableName=table_name)
        return response["TableDescription"]  # type: ignore[no-any-return]
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            raise CollectionAlreadyExistsError(f"Table '{table_name}' already exists")
        raise StoreError(f"Failed to create table: {e}")


def drop_table(
    table_name: str, region: str | None = None, profile: str | None = None
) -> dict[str, Any]:
    """
    Drop a workload table.

    Raises:
        CollectionNotFoundError: If table does not exist
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    dynamodb = session.client("dynamodb")

    try:
        response = dynamodb.delete_table(TableName=table_name)
        return response["TableDescription"]  # type: ignore[no-any-return]
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceNotFoundException":
            raise CollectionNotFoundError(f"Table '{table_name}' not found")
        raise StoreError(f"Failed to drop table: {e}")


def check_table_exists(
    table_name: str, region: str | None = None, profile: str | None = None
) -> bool:
    """
    Check if table exists.

    Returns:
        True if table exists, False otherwise
    """
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
        dynamodb = session.client("dynamodb")
    except BotoCoreError as e:
        raise StoreError(f"AWS configuration error: {e}") from e

    try:
        dynamodb.describe_table(TableName=table_name)
        return True
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceNotFoundException":
            return False
        raise StoreError(f"Failed to describe table: {e}")
