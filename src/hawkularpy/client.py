"""HTTP client for a Hawkular metrics service.

Every operation is one synchronous request. Non-success replies raise
ServiceError; transport failures propagate as httpx.HTTPError.

Example:
    ```python
    from hawkularpy import Metric, MetricsClient, Parameters

    with MetricsClient(Parameters(tenant="acme", host="localhost", port=8081)) as c:
        c.push_single_numeric_metric("cpu.load", Metric(value=0.42))
        points = c.query_single_numeric_metric("cpu.load", {"start": "0"})
    ```
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import TracebackType

import httpx

from hawkularpy.core import urls
from hawkularpy.core.conversion import convert_to_float, unix_milli
from hawkularpy.core.encoding.payload import (
    decode_metrics,
    encode_definition,
    encode_headers,
    parse_error_response,
)
from hawkularpy.core.errors import ServiceError
from hawkularpy.core.models import Metric, MetricDefinition, MetricHeader, MetricType

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "hawkular-metrics"

_JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class Parameters:
    """Connection configuration for MetricsClient.

    Attributes:
        tenant: Tenant namespace the series belong to.
        host: Service host name or address.
        port: Service TCP port.
        root: Path segment the service is mounted under.
    """

    tenant: str
    host: str
    port: int
    root: str = DEFAULT_ROOT

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host:
            raise ValueError("host must be a non-empty string")
        if not isinstance(self.tenant, str) or not self.tenant:
            raise ValueError("tenant must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"port must be an integer, got {self.port!r}")
        if not 0 < self.port < 65536:
            raise ValueError(f"port {self.port} is out of range")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/{self.root}/"


class MetricsClient:
    """Client for creating, writing and querying metric series.

    The client holds only immutable configuration. Transport settings such
    as timeouts belong on the httpx.Client passed in; when none is given the
    client creates one and closes it in close().
    """

    def __init__(
        self,
        parameters: Parameters,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            parameters: Connection configuration.
            http_client: Optional preconfigured httpx.Client. It is not closed
                by this client.
        """
        self._parameters = parameters
        self._base_url = parameters.base_url
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client()

    @property
    def tenant(self) -> str:
        return self._parameters.tenant

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "MetricsClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # URL helpers

    def metrics_url(self, metric_type: MetricType) -> str:
        return urls.metrics_url(self._base_url, self.tenant, metric_type)

    def single_metrics_url(self, metric_type: MetricType, metric_id: str) -> str:
        return urls.single_metrics_url(
            self._base_url, self.tenant, metric_type, metric_id
        )

    def data_url(self, url: str) -> str:
        return urls.data_url(url)

    def param_url(self, url: str, options: Mapping[str, str] | None = None) -> str:
        return urls.param_url(url, options)

    # Operations

    def create(
        self, metric_type: MetricType | str, definition: MetricDefinition
    ) -> None:
        """Create a metric series.

        Args:
            metric_type: Type of the new series.
            definition: Series id with optional tags and retention.

        Raises:
            InvalidMetricTypeError: If metric_type is not a valid variant.
            ServiceError: On a non-2xx reply; code 409 means the id exists.
        """
        metric_type = MetricType.validate(metric_type)
        body = encode_definition(definition)
        response = self._post(self.metrics_url(metric_type), body)
        if not response.is_success:
            raise self._service_error(response)

    def push_single_numeric_metric(self, metric_id: str, metric: Metric) -> None:
        """Write one numeric data point.

        The value is coerced to float and a zero timestamp is replaced with
        the current time before the write.

        Raises:
            ConversionError: If the value is not convertible to float.
            ServiceError: If the service rejects the write.
        """
        value = convert_to_float(metric.value)
        timestamp = metric.timestamp or unix_milli()
        header = MetricHeader(
            id=metric_id, data=(Metric(timestamp=timestamp, value=value),)
        )
        self.write_multiple(MetricType.NUMERIC, [header])

    def write_multiple(
        self, metric_type: MetricType | str, headers: Sequence[MetricHeader]
    ) -> None:
        """Write a batch of data points in one request.

        Args:
            metric_type: Type shared by every series in the batch.
            headers: Series ids with their data points.

        Raises:
            InvalidMetricTypeError: If metric_type is not a valid variant.
            ConversionError: If a value cannot be serialized.
            ServiceError: If the reply status is not 200.
        """
        metric_type = MetricType.validate(metric_type)
        body = encode_headers(headers)
        response = self._post(self.data_url(self.metrics_url(metric_type)), body)
        if response.status_code != httpx.codes.OK:
            raise self._service_error(response)

    def query_single_numeric_metric(
        self, metric_id: str, options: Mapping[str, str] | None = None
    ) -> list[Metric]:
        """Read data points of one numeric series.

        Args:
            metric_id: Series id.
            options: Query parameters such as start and end bounds.

        Returns:
            The data points; empty when the series has none or does not exist.
        """
        return self.query(MetricType.NUMERIC, metric_id, options)

    def query(
        self,
        metric_type: MetricType | str,
        metric_id: str,
        options: Mapping[str, str] | None = None,
    ) -> list[Metric]:
        """Read data points of one series of the given type.

        Raises:
            InvalidMetricTypeError: If metric_type is not a valid variant.
            ServiceError: On any reply other than 200 or 204.
            DecodeError: If a 200 reply body is not a data point array.
        """
        metric_type = MetricType.validate(metric_type)
        url = self.data_url(self.single_metrics_url(metric_type, metric_id))
        url = self.param_url(url, options)

        logger.debug("GET %s", url)
        response = self._http.get(url)
        logger.debug("GET %s -> %d", url, response.status_code)

        if response.status_code == httpx.codes.NO_CONTENT:
            return []
        if response.status_code == httpx.codes.OK:
            return decode_metrics(response.content)
        raise self._service_error(response)

    def _post(self, url: str, body: str) -> httpx.Response:
        logger.debug("POST %s (%d bytes)", url, len(body))
        response = self._http.post(url, content=body, headers=_JSON_HEADERS)
        logger.debug("POST %s -> %d", url, response.status_code)
        return response

    def _service_error(self, response: httpx.Response) -> ServiceError:
        error = parse_error_response(response)
        logger.warning(
            "%s %s failed: %s", response.request.method, response.request.url, error
        )
        return error
