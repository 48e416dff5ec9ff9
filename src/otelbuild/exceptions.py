"""Exception classes for otelbuild."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when a configuration source is invalid.

    Readers raise this for missing or malformed files. load_config() raises
    it for validation failures in strict mode.
    """


class ValueNotSetError(ConfigurationError):
    """Raised by config.read() when a required value was never set."""


class ContextError(Exception):
    """Base class for errors reported by a done Context."""


class ContextCancelledError(ContextError):
    """The operation context was cancelled."""

    def __init__(self) -> None:
        super().__init__("context cancelled")


class DeadlineExceededError(ContextError):
    """The operation context passed its deadline."""

    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


class BuildAbort(BaseException):
    """Unrecoverable abort of the enclosing build.

    Raised by must_build() and config.must() when a dependency fails. It
    derives from BaseException so that ``except Exception`` blocks in user
    code do not swallow it; only recover() (or the application's own top
    level) is expected to catch it.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"build aborted: {cause}")
        self.cause = cause


class BuildError(Exception):
    """Structured error produced by recover() from a BuildAbort."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"failed to build: {cause}")
        self.cause = cause
