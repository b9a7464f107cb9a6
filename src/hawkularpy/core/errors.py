"""Error types raised by the metrics client.

Local validation failures (metric type, value coercion) are raised before any
request is sent. Non-success replies from the service become ServiceError.
Transport failures are the httpx.HTTPError family and are not wrapped.
"""

CONFLICT = 409


class HawkularClientError(Exception):
    """Base class for every error raised by hawkularpy."""


class InvalidMetricTypeError(HawkularClientError, ValueError):
    """Raised when a value is not one of the MetricType variants."""


class ConversionError(HawkularClientError, ValueError):
    """Raised when a metric value cannot be represented as a float."""


class DecodeError(HawkularClientError, ValueError):
    """Raised when a success reply does not carry a valid data point array."""


class ServiceError(HawkularClientError):
    """A non-success reply from the metrics service.

    Attributes:
        code: HTTP status code of the reply.
        message: The service's errorMsg, or a note when the body was unusable.
        parsed: False when the reply body could not be parsed.
    """

    def __init__(self, code: int, message: str, parsed: bool = True) -> None:
        self.code = code
        self.message = message
        self.parsed = parsed
        if parsed:
            text = f"Got status code {code}, error: {message}"
        else:
            text = f"Got status code {code}, reply could not be parsed: {message}"
        super().__init__(text)

    @property
    def conflict(self) -> bool:
        """True when the service reported that the resource already exists."""
        return self.code == CONFLICT
