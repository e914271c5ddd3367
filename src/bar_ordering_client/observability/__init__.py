"""OpenTelemetry instrumentation and observability utilities."""

from bar_ordering_client.observability.config import configure_logging, setup_observability
from bar_ordering_client.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
