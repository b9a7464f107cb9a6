"""Client library for the Hawkular metrics service."""

from hawkularpy.adapters.in_memory import InMemoryMetricsService
from hawkularpy.client import MetricsClient, Parameters
from hawkularpy.core.conversion import convert_to_float, unix_milli
from hawkularpy.core.errors import (
    ConversionError,
    DecodeError,
    HawkularClientError,
    InvalidMetricTypeError,
    ServiceError,
)
from hawkularpy.core.models import Metric, MetricDefinition, MetricHeader, MetricType

__all__ = [
    "ConversionError",
    "DecodeError",
    "HawkularClientError",
    "InMemoryMetricsService",
    "InvalidMetricTypeError",
    "Metric",
    "MetricDefinition",
    "MetricHeader",
    "MetricType",
    "MetricsClient",
    "Parameters",
    "ServiceError",
    "convert_to_float",
    "unix_milli",
]
