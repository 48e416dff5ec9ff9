"""Cancellable operation context passed to every builder and reader.

A Context carries a cancellation flag and an optional deadline. Children
observe their parent's cancellation and can only shorten its deadline:

    ctx, cancel = with_timeout(background(), 5.0)
    try:
        exporter = build(ctx, exporter_builder)
    finally:
        cancel()
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from otelbuild.exceptions import (
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
)

CancelFunc = Callable[[], None]


class Context:
    """Operation context with cancellation and an optional deadline.

    Use background(), with_cancel() and with_timeout() to create contexts
    rather than instantiating this class directly.
    """

    def __init__(
        self,
        parent: Context | None = None,
        deadline: float | None = None,
    ) -> None:
        self._parent = parent
        self._cancelled = threading.Event()
        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline
        self._deadline = deadline

    @property
    def deadline(self) -> float | None:
        """Absolute deadline on the time.monotonic() clock, if any."""
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def _cancel(self) -> None:
        self._cancelled.set()

    def _is_cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent._is_cancelled()

    def err(self) -> ContextError | None:
        """Return why the context is done, or None while it is still live."""
        if self._is_cancelled():
            return ContextCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def done(self) -> bool:
        """Return True once the context is cancelled or past its deadline."""
        return self.err() is not None

    def raise_if_done(self) -> None:
        """Raise ContextCancelledError or DeadlineExceededError when done."""
        err = self.err()
        if err is not None:
            raise err


_BACKGROUND = Context()


def background() -> Context:
    """Return the root context. It is never cancelled and has no deadline."""
    return _BACKGROUND


def with_cancel(parent: Context) -> tuple[Context, CancelFunc]:
    """Derive a child context and the function that cancels it."""
    ctx = Context(parent=parent)
    return ctx, ctx._cancel


def with_timeout(parent: Context, seconds: float) -> tuple[Context, CancelFunc]:
    """Derive a child context that expires after ``seconds``."""
    ctx = Context(parent=parent, deadline=time.monotonic() + seconds)
    return ctx, ctx._cancel
