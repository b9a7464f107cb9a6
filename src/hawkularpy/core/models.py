"""Core domain models for the metrics service wire format."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from hawkularpy.core.errors import InvalidMetricTypeError


class MetricType(Enum):
    """Kind of metric series stored by the service.

    Each variant carries the long name used in URLs and the short name the
    service accepts in some query forms.
    """

    NUMERIC = ("numeric", "num")
    AVAILABILITY = ("availability", "avail")

    @property
    def long_form(self) -> str:
        return self.value[0]

    @property
    def short_form(self) -> str:
        return self.value[1]

    def __str__(self) -> str:
        return self.long_form

    @classmethod
    def validate(cls, metric_type: "MetricType | str") -> "MetricType":
        """Return the MetricType for the given value or raise.

        Args:
            metric_type: A MetricType member, or the long or short name of one.

        Returns:
            The matching MetricType member.

        Raises:
            InvalidMetricTypeError: If the value names no variant.
        """
        if isinstance(metric_type, cls):
            return metric_type
        if isinstance(metric_type, str):
            for member in cls:
                if metric_type in member.value:
                    return member
        raise InvalidMetricTypeError(
            f"Given MetricType value {metric_type!r} is not valid"
        )


@dataclass(frozen=True)
class Metric:
    """A single data point.

    Attributes:
        timestamp: Milliseconds since the Unix epoch. Zero means "now" when
            pushed through MetricsClient.push_single_numeric_metric.
        value: Float for numeric series; availability values are passed
            through unchanged.
    """

    timestamp: int = 0
    value: Any = None


@dataclass(frozen=True)
class MetricHeader:
    """Data points sharing one series id."""

    id: str
    data: Sequence[Metric] = field(default_factory=tuple)


@dataclass(frozen=True)
class MetricDefinition:
    """Metadata for creating a new metric series.

    Attributes:
        id: Series identifier.
        tags: Optional string tags attached to the series. Stored as a
            read-only copy of the given mapping.
        data_retention: Optional retention period, in the service's unit (days).
    """

    id: str
    tags: Mapping[str, str] = field(default_factory=dict)
    data_retention: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
