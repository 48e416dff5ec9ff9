"""Public configuration types for otelbuild."""

from __future__ import annotations

from dataclasses import dataclass, field

ALL_SIGNALS = ("traces", "metrics", "logs")


@dataclass
class OTLPConfig:
    """OTLP collector configuration.

    For gRPC the endpoint is the collector address (``host:port``, an
    ``http://`` or ``https://`` prefix is stripped). For HTTP it is the base
    URL; the per-signal path (``/v1/traces`` etc.) is appended.
    """

    endpoint: str
    # Transport protocol: "grpc" (default) or "http"
    transport: str = "grpc"
    signals: list[str] = field(default_factory=lambda: list(ALL_SIGNALS))


@dataclass
class ValidationConfig:
    """Validation mode configuration."""

    mode: str = "permissive"  # "strict" | "permissive"


@dataclass
class Config:
    """Complete otelbuild configuration."""

    otlp: OTLPConfig
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @property
    def is_strict(self) -> bool:
        """Return True if validation mode is strict."""
        return self.validation.mode == "strict"
