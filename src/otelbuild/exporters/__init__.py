"""Exporter builders for OpenTelemetry signals.

The OTLP family lives in its own subpackage so that the optional exporter
packages are only imported when they are used. Console and no-op builders
need only the SDK.
"""
