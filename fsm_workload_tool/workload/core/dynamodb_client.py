"""
DynamoDB store adapter with error handling.

Each collection is a DynamoDB table keyed by `_id`. DynamoDB has no secondary
TTL index: creating the "index" enables the table's Time to Live on a derived
expiry attribute, and every later insert writes that attribute as
`timestamp + expire_after_seconds`. DynamoDB deletes expired items on its own
schedule, which can lag expiry considerably.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from ..constants import ATTR_EXPIRES_AT, ATTR_ID
from ..exceptions import (
    CollectionNotFoundError,
    StoreError,
    StorePermissionError,
    StoreThrottlingError,
)
from ..logging_config import get_logger
from ..models import InsertResult

logger = get_logger(__name__)


def to_item_value(value: Any) -> Any:
    """
    Convert a document value to a DynamoDB-compatible value.

    Datetimes become epoch seconds; floats become Decimal.
    """
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class DynamoDBStore:
    """Store backed by DynamoDB tables."""

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        session: boto3.Session | None = None,
    ):
        """
        Initialize DynamoDB store.

        Args:
            region: AWS region (optional, uses SDK default)
            profile: AWS profile (optional, uses SDK default)
            session: Existing boto3 session (optional)
        """
        try:
            session = session or boto3.Session(profile_name=profile, region_name=region)
            self.dynamodb = session.resource("dynamodb")
            self.client = session.client("dynamodb")
        except BotoCoreError as e:
            raise StoreError(f"AWS configuration error: {e}") from e
        self.region = session.region_name
        # collection -> (timestamp field, expire_after_seconds)
        self._ttl_fields: dict[str, tuple[str, int]] = {}

    def namespace(self, collection: str) -> str:
        return f"dynamodb:{self.region}:{collection}" if self.region else f"dynamodb:{collection}"

    def insert(self, collection: str, document: dict[str, Any]) -> InsertResult:
        item = {key: to_item_value(value) for key, value in document.items()}
        item.setdefault(ATTR_ID, uuid.uuid4().hex)

        ttl = self._ttl_fields.get(collection)
        if ttl is not None:
            field, expire_after_seconds = ttl
            if field in item:
                item[ATTR_EXPIRES_AT] = item[field] + expire_after_seconds

        try:
            self.dynamodb.Table(collection).put_item(Item=item)
        except ClientError as e:
            self._handle_error(e, collection)
            raise  # For type checker
        return InsertResult(n_inserted=1)

    def create_index(
        self, collection: str, key_spec: dict[str, int], expire_after_seconds: int
    ) -> None:
        if len(key_spec) != 1:
            raise StoreError("DynamoDB TTL indexes support exactly one timestamp field")
        field = next(iter(key_spec))

        try:
            self.client.update_time_to_live(
                TableName=collection,
                TimeToLiveSpecification={"Enabled": True, "AttributeName": ATTR_EXPIRES_AT},
            )
        except ClientError as e:
            # Enabling TTL twice is rejected; the existing setting is what we want
            error = e.response["Error"]
            if error["Code"] == "ValidationException" and "already enabled" in error.get(
                "Message", ""
            ):
                logger.debug(f"TTL already enabled on table '{collection}'")
            else:
                self._handle_error(e, collection)
                raise  # For type checker

        self._ttl_fields[collection] = (field, expire_after_seconds)
        logger.info(
            f"Enabled TTL on table '{collection}' ({field} + {expire_after_seconds}s -> "
            f"{ATTR_EXPIRES_AT})"
        )

    def count(self, collection: str, filter: dict[str, Any]) -> int:
        """
        Count items matching an equality filter with a paginated scan.

        Args:
            collection: Table name
            filter: Attribute equality conditions

        Returns:
            Number of matching items

        Raises:
            StoreError: For DynamoDB errors
        """
        kwargs: dict[str, Any] = {"Select": "COUNT"}
        condition = None
        for name, value in filter.items():
            clause = Attr(name).eq(to_item_value(value))
            condition = clause if condition is None else condition & clause
        if condition is not None:
            kwargs["FilterExpression"] = condition

        table = self.dynamodb.Table(collection)
        total = 0
        try:
            while True:
                response = table.scan(**kwargs)
                total += response.get("Count", 0)
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return total
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            self._handle_error(e, collection)
            raise  # For type checker

    def _handle_error(self, error: ClientError, collection: str) -> None:
        """
        Convert boto3 errors to workload exceptions.

        Raises:
            CollectionNotFoundError: If table not found
            StoreThrottlingError: If throttled
            StorePermissionError: If permission denied
            StoreError: For other errors
        """
        code = error.response["Error"]["Code"]

        if code == "ResourceNotFoundException":
            raise CollectionNotFoundError(f"Table '{collection}' not found")
        elif code in ("ProvisionedThroughputExceededException", "ThrottlingException"):
            raise StoreThrottlingError("DynamoDB throttling - retry with backoff")
        elif code == "AccessDeniedException":
            raise StorePermissionError("AWS permission denied")
        else:
            raise StoreError(f"DynamoDB error: {error}")

    def close(self) -> None:
        self.client.close()
        self.dynamodb.meta.client.close()
