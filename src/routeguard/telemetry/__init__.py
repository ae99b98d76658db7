"""Telemetry module for OpenTelemetry instrumentation."""
from routeguard.telemetry.instrumentation import TelemetryManager

__all__ = [
    "TelemetryManager",
]
