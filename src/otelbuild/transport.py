"""Builders for the transports the OTLP exporters ride on.

Both helpers use library defaults. TLS, authentication and pooling are
left to callers who need them; any builder returning a grpc.Channel or a
requests.Session can be passed to the exporter builders instead.

A gRPC channel passed to the exporter builders stays with the caller: the
exporters neither replace it nor close it. Wrap it in a SharedChannel with
``owned=True`` to have it closed once the last exporter using it shuts down.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from otelbuild.config import must

if TYPE_CHECKING:
    import grpc
    import requests

    from otelbuild.builder import Builder
    from otelbuild.config import Reader
    from otelbuild.context import Context

logger = logging.getLogger(__name__)


class SharedChannel:
    """A gRPC channel handed to one or more OTLP/gRPC exporters.

    Bound exporters hold this object as their channel. Its close() does
    nothing, so an exporter reconnecting after UNAVAILABLE or shutting down
    never closes the underlying channel. Each exporter acquires the channel
    when it is constructed and releases it on shutdown. With ``owned`` set,
    the underlying channel is closed when the last exporter releases it.

    Other attribute lookups are forwarded to the underlying channel.
    """

    def __init__(self, channel: grpc.Channel, owned: bool = False) -> None:
        self.channel = channel
        self.owned = owned
        self._users = 0
        self._lock = threading.Lock()

    @property
    def users(self) -> int:
        """Number of exporters currently bound to the channel."""
        return self._users

    def acquire(self) -> None:
        with self._lock:
            self._users += 1

    def release(self) -> None:
        with self._lock:
            self._users -= 1
            last = self._users == 0
        if last and self.owned:
            logger.debug("Closing shared gRPC channel %r", self.channel)
            self.channel.close()

    def close(self) -> None:
        """Ignore close requests from bound exporters."""

    def __getattr__(self, name: str) -> Any:
        if name == "channel":
            raise AttributeError(name)
        return getattr(self.channel, name)

    def __repr__(self) -> str:
        return f"SharedChannel({self.channel!r}, owned={self.owned})"


def build_insecure_channel(target: Reader[str]) -> Builder[grpc.Channel]:
    """Return a builder for a plaintext gRPC channel to ``target``.

    gRPC channels connect lazily, so building one does not dial the
    collector. Every call opens a new channel; wrap the result in
    memoize() to share one channel between exporters.
    """

    def _build(ctx: Context) -> grpc.Channel:
        import grpc

        addr = must(ctx, target)
        ctx.raise_if_done()
        logger.debug("Opening insecure gRPC channel to %s", addr)
        return grpc.insecure_channel(addr)

    return _build


def build_session() -> Builder[requests.Session]:
    """Return a builder for a new requests.Session on every call."""

    def _build(ctx: Context) -> requests.Session:
        import requests

        ctx.raise_if_done()
        return requests.Session()

    return _build
