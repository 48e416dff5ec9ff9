"""Internal logging utilities."""

import logging

# Package logger
logger = logging.getLogger("otelbuild")

# Default to WARNING to avoid noise
logger.setLevel(logging.WARNING)


def log_abort(operation: str, error: BaseException) -> None:
    """Log a build abort that is about to be converted into a BuildError."""
    logger.warning("otelbuild aborted build in %s: %s", operation, error)
