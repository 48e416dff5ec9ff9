"""OTLP exporter builders over gRPC and HTTP."""

from otelbuild.exporters.otlp.exporter import (
    build_grpc_log_exporter,
    build_grpc_metric_exporter,
    build_grpc_span_exporter,
    build_http_log_exporter,
    build_http_metric_exporter,
    build_http_span_exporter,
    check_dependencies,
)

__all__ = [
    "build_grpc_span_exporter",
    "build_http_span_exporter",
    "build_grpc_metric_exporter",
    "build_http_metric_exporter",
    "build_grpc_log_exporter",
    "build_http_log_exporter",
    "check_dependencies",
]
