"""
MongoDB store and balancer adapters with error handling.
"""

from collections.abc import Callable
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from ..constants import BALANCER_ROUND_TIMEOUT_MS, DEFAULT_POLL_INTERVAL_MS
from ..exceptions import (
    CollectionAlreadyExistsError,
    CollectionNotFoundError,
    StoreError,
    StorePermissionError,
    StoreThrottlingError,
)
from ..logging_config import get_logger
from ..models import InsertResult
from ..utils import format_namespace
from .convergence import wait_until

logger = get_logger(__name__)

# Server error codes
CODE_UNAUTHORIZED = 13
CODE_NAMESPACE_NOT_FOUND = 26
CODE_NAMESPACE_EXISTS = 48
CODE_EXCEEDED_TIME_LIMIT = 50


def handle_error(error: PyMongoError) -> None:
    """
    Convert pymongo errors to workload exceptions.

    Args:
        error: Error raised by pymongo

    Raises:
        StorePermissionError: If the user is not authorized
        CollectionNotFoundError: If the namespace does not exist
        CollectionAlreadyExistsError: If the namespace already exists
        StoreThrottlingError: If the server ran out of time
        StoreError: For other errors
    """
    if isinstance(error, OperationFailure):
        code = error.code
        if code == CODE_UNAUTHORIZED:
            raise StorePermissionError(f"MongoDB permission denied: {error}") from error
        elif code == CODE_NAMESPACE_NOT_FOUND:
            raise CollectionNotFoundError(f"Namespace not found: {error}") from error
        elif code == CODE_NAMESPACE_EXISTS:
            raise CollectionAlreadyExistsError(f"Namespace already exists: {error}") from error
        elif code == CODE_EXCEEDED_TIME_LIMIT:
            raise StoreThrottlingError(f"MongoDB operation exceeded time limit: {error}") from error
    elif isinstance(error, MongoConfigurationError):
        raise StoreError(f"Invalid MongoDB configuration: {error}") from error
    elif isinstance(error, ConnectionFailure):
        raise StoreError(f"Cannot reach MongoDB: {error}") from error
    raise StoreError(f"MongoDB error: {error}") from error


class MongoStore:
    """Store backed by a MongoDB database."""

    def __init__(
        self,
        uri: str,
        database: str,
        client: MongoClient | None = None,
    ):
        """
        Initialize MongoDB store.

        Args:
            uri: Connection string
            database: Database holding the workload collections
            client: Existing client (optional, created from uri otherwise)
        """
        try:
            self.client = (
                client if client is not None else MongoClient(uri, appname="fsm-workload-tool")
            )
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker
        self.db = self.client[database]
        self.database_name = database

    def namespace(self, collection: str) -> str:
        return format_namespace(self.database_name, collection)

    def insert(self, collection: str, document: dict[str, Any]) -> InsertResult:
        try:
            # insert_one adds _id to the document it is given
            result = self.db[collection].insert_one(dict(document))
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker
        return InsertResult(n_inserted=1 if result.acknowledged else 0)

    def create_index(
        self, collection: str, key_spec: dict[str, int], expire_after_seconds: int
    ) -> None:
        keys = [(field, direction or ASCENDING) for field, direction in key_spec.items()]
        try:
            name = self.db[collection].create_index(keys, expireAfterSeconds=expire_after_seconds)
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker
        logger.info(f"Created index '{name}' on {self.namespace(collection)}")

    def count(self, collection: str, filter: dict[str, Any]) -> int:
        try:
            return self.db[collection].count_documents(filter)
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker

    def close(self) -> None:
        self.client.close()


class MongoBalancer:
    """Balancer control through a mongos router."""

    def __init__(
        self,
        client: MongoClient,
        round_timeout_ms: int = BALANCER_ROUND_TIMEOUT_MS,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        wait: Callable[..., None] = wait_until,
    ):
        self.client = client
        self.round_timeout_ms = round_timeout_ms
        self.interval_ms = interval_ms
        self._wait = wait

    def disable_for_collection(self, namespace: str) -> None:
        """Mark the collection as not balanceable."""
        try:
            result = self.client["config"]["collections"].update_one(
                {"_id": namespace}, {"$set": {"noBalance": True}}
            )
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker
        if result.matched_count == 0:
            logger.debug(f"{namespace} is not sharded, nothing to disable")
        else:
            logger.info(f"Disabled balancing for {namespace}")

    def _status(self) -> dict[str, Any]:
        try:
            return self.client.admin.command("balancerStatus")
        except PyMongoError as e:
            handle_error(e)
            raise  # For type checker

    def join_current_round(self) -> None:
        """Wait until the balancer completes the round in progress."""
        initial = self._status()

        def round_completed() -> bool:
            nonlocal initial
            current = self._status()
            if current.get("mode") == "off":
                return True
            # A new balancer term restarts the round counter
            if current.get("term") != initial.get("term"):
                initial = current
                return False
            return current.get("numBalancerRounds", 0) > initial.get("numBalancerRounds", 0)

        self._wait(
            round_completed,
            "Balancer did not complete a round",
            self.round_timeout_ms,
            self.interval_ms,
        )
        logger.info("Joined balancer round")
