"""
Harness configuration for workload runs.

The flags that decide how setup and teardown behave are collected once,
before a run starts, and passed explicitly into every hook.
"""

import os
from dataclasses import dataclass

from .constants import DEFAULT_POLL_INTERVAL_MS
from .exceptions import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def parse_bool(value: str | None, default: bool = False) -> bool:
    """
    Parse a boolean environment value.

    Args:
        value: Raw value (None when unset)
        default: Value used when unset

    Returns:
        Parsed boolean

    Raises:
        ConfigurationError: If value is not a recognized boolean
    """
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigurationError(f"Cannot interpret '{value}' as a boolean")


@dataclass(frozen=True)
class HarnessConfig:
    """Read-only harness flags for one run."""

    running_with_balancer: bool = False
    in_ci: bool = False
    own_collection: bool = True
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS

    def __post_init__(self) -> None:
        if self.poll_interval_ms < 1:
            raise ConfigurationError("poll_interval_ms must be at least 1")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "HarnessConfig":
        """
        Build config from environment variables.

        FSM_RUNNING_WITH_BALANCER, FSM_IN_CI (falls back to CI),
        FSM_OWN_COLLECTION and FSM_POLL_INTERVAL_MS are read.
        """
        env = os.environ if environ is None else environ
        if "FSM_IN_CI" in env:
            in_ci = parse_bool(env["FSM_IN_CI"])
        else:
            # CI systems set CI to assorted non-empty values
            in_ci = env.get("CI", "").strip().lower() not in _FALSY
        try:
            poll_interval_ms = int(env.get("FSM_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS))
        except ValueError:
            raise ConfigurationError("FSM_POLL_INTERVAL_MS must be an integer")
        return cls(
            running_with_balancer=parse_bool(env.get("FSM_RUNNING_WITH_BALANCER")),
            in_ci=in_ci,
            own_collection=parse_bool(env.get("FSM_OWN_COLLECTION"), default=True),
            poll_interval_ms=poll_interval_ms,
        )
