"""Deferred builders: values produced on demand from an operation context.

A builder is any callable taking a Context and returning a value. Failure
is signalled by raising. Builders compose: the OTLP exporter factories in
otelbuild.exporters take builders for their transport dependencies and
return a new builder for the exporter.

Two error channels exist:

- Ordinary exceptions are the builder's own failure. build(), map_builder()
  and bind() let them propagate so the caller may retry.
- BuildAbort is raised by must_build() when a dependency fails. It skips
  the rest of the build and is converted into a BuildError by recover().
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol, TypeVar

from otelbuild._internal.logging import log_abort
from otelbuild.context import Context
from otelbuild.exceptions import BuildAbort, BuildError, DeadlineExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
T_co = TypeVar("T_co", covariant=True)


class Builder(Protocol[T_co]):
    """Anything that produces a value from an operation context."""

    def __call__(self, ctx: Context) -> T_co: ...


def build(ctx: Context, builder: Builder[T]) -> T:
    """Invoke a builder unless the context is already done.

    Raises:
        ContextError: If ctx is cancelled or past its deadline.
        Exception: Whatever the builder raises, unchanged.
    """
    ctx.raise_if_done()
    return builder(ctx)


def must_build(ctx: Context, builder: Builder[T]) -> T:
    """Resolve a dependency or abort the enclosing build.

    The builder is invoked with the caller's context. Any exception it
    raises is re-raised as BuildAbort carrying the original error as its
    cause. A BuildAbort from a nested must_build() passes through as is so
    the innermost cause is preserved.
    """
    try:
        return builder(ctx)
    except Exception as e:
        raise BuildAbort(e) from e


def builder_of(value: T) -> Builder[T]:
    """Return a builder that always produces ``value``."""

    def _build(ctx: Context) -> T:
        return value

    return _build


def map_builder(builder: Builder[T], mapper: Callable[[T], U]) -> Builder[U]:
    """Transform the output of a builder."""

    def _build(ctx: Context) -> U:
        return mapper(builder(ctx))

    return _build


def bind(builder: Builder[T], binder: Callable[[T], Builder[U]]) -> Builder[U]:
    """Chain builders: the first output selects the second builder."""

    def _build(ctx: Context) -> U:
        return binder(builder(ctx))(ctx)

    return _build


class _Memoized:
    def __init__(self, builder: Builder[T]) -> None:
        self._builder = builder
        self._lock = threading.Lock()
        self._built = False
        self._value: object = None

    def __call__(self, ctx: Context) -> object:
        timeout = ctx.remaining()
        if not self._lock.acquire(timeout=-1 if timeout is None else timeout):
            ctx.raise_if_done()
            raise DeadlineExceededError()
        try:
            if not self._built:
                ctx.raise_if_done()
                self._value = self._builder(ctx)
                self._built = True
                logger.debug("Memoized builder produced %r", self._value)
            return self._value
        finally:
            self._lock.release()


def memoize(builder: Builder[T]) -> Builder[T]:
    """Cache the first value a builder produces.

    Failures are not cached; the next call retries. Pass the result to
    several factories to share one channel or session between them.

    Concurrent callers wait while the first one builds. A caller with a
    deadline waits no longer than the deadline and then raises
    DeadlineExceededError. A cancelled caller still waits; once it holds
    the lock it raises instead of building, but a value that is already
    built is returned.
    """
    return _Memoized(builder)  # type: ignore[return-value]


def recover(builder: Builder[T]) -> Builder[T]:
    """Convert a BuildAbort raised anywhere inside ``builder`` to BuildError.

    This is the top-level boundary of a build. The resulting BuildError is
    chained to the dependency error that caused the abort.
    """

    def _build(ctx: Context) -> T:
        try:
            return builder(ctx)
        except BuildAbort as abort:
            log_abort(getattr(builder, "__qualname__", repr(builder)), abort.cause)
            raise BuildError(abort.cause) from abort.cause

    return _build
