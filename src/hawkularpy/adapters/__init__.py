"""Adapters around the metrics client."""

from hawkularpy.adapters.in_memory import InMemoryMetricsService

__all__ = ["InMemoryMetricsService"]
