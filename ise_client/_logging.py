"""Logging levels used by the client.

The standard library has no level below DEBUG; backoff sleep durations are
logged at TRACE so they can be enabled separately from request summaries.
"""

import logging

TRACE = 5

logging.addLevelName(TRACE, "TRACE")


def resolve_logger(logger: logging.Logger | None, name: str) -> logging.Logger:
    """Return the injected logger, or the named module logger."""
    if logger is not None:
        return logger
    return logging.getLogger(name)
