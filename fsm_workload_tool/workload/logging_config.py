"""
Logging setup for the CLI.

Verbosity maps to log levels: 0 WARNING, -v INFO, -vv DEBUG, -vvv DEBUG
including the store client libraries.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"

_LIBRARY_LOGGERS = ("boto3", "botocore", "urllib3", "pymongo")


def setup_logging(verbose: int = 0) -> None:
    """
    Configure root logging for the given verbosity.

    Args:
        verbose: Verbosity count from the -v option
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)

    library_level = logging.DEBUG if verbose >= 3 else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
