"""
Constants for FSM workload runs.
"""

# Default target
DEFAULT_COLLECTION_NAME = "fsm-workload-tool"
DEFAULT_DATABASE_NAME = "fsm_workloads"
DEFAULT_MONGODB_URI = "mongodb://localhost:27017"

# indexed_insert_ttl workload
TTL_WORKLOAD_NAME = "indexed_insert_ttl"
TTL_THREAD_COUNT = 20
TTL_ITERATIONS = 200
TTL_SECONDS = 5
TTL_FIELD = "indexed_insert_ttl"
FIRST_FIELD = "first"
TTL_TAGS = ("uses_ttl",)

# The store's TTL monitor wakes up every 60 seconds by default
DEFAULT_TTL_MONITOR_SECONDS = 60

# Convergence wait multipliers
CI_TIMEOUT_MULTIPLIER = 10
LOCAL_TIMEOUT_MULTIPLIER = 2

# Polling behavior
DEFAULT_POLL_INTERVAL_MS = 200
BALANCER_ROUND_TIMEOUT_MS = 5 * 60 * 1000

# DynamoDB attribute names
ATTR_ID = "_id"
ATTR_EXPIRES_AT = "expires_at"

# Exit codes
EXIT_CONVERGED = 0
EXIT_TIMED_OUT = 1
EXIT_ABORTED = 2
EXIT_STORE_ERROR = 3
