"""In-memory emulation of the metrics service endpoints.

Serves the create, write and query endpoints through an httpx.MockTransport
so MetricsClient can run without a live service. Suitable for testing and
examples where persistence is not required.
"""

import json
import re
import threading
from typing import Any
from urllib.parse import unquote

import httpx

from hawkularpy.core.models import MetricType

_PREFIX = r"^/(?P<root>[^/]+)/(?P<tenant>[^/]+)/metrics/(?P<type>[^/]+)"
_COLLECTION = re.compile(_PREFIX + r"$")
_COLLECTION_DATA = re.compile(_PREFIX + r"/data$")
_SERIES_DATA = re.compile(_PREFIX + r"/(?P<id>[^/]+)/data$")

SeriesKey = tuple[str, MetricType, str]


def _error(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"errorMsg": message})


class InMemoryMetricsService:
    """In-memory stand-in for the metrics service.

    Definitions and data points are kept per (tenant, metric type, id).
    Every handled request is appended to `requests`.

    Example:
        ```python
        service = InMemoryMetricsService()
        http = httpx.Client(transport=service.transport())
        client = MetricsClient(Parameters("t1", "localhost", 8081), http_client=http)
        ```
    """

    def __init__(self, root: str = "hawkular-metrics") -> None:
        self.root = root
        self.requests: list[httpx.Request] = []
        self._definitions: dict[SeriesKey, dict[str, Any]] = {}
        self._points: dict[SeriesKey, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def transport(self) -> httpx.MockTransport:
        """Return an httpx transport routed to this service."""
        return httpx.MockTransport(self.handle)

    def definitions(self, tenant: str, metric_type: MetricType) -> list[dict[str, Any]]:
        """Return stored definitions of one tenant and type."""
        with self._lock:
            return [
                d
                for (t, mt, _), d in self._definitions.items()
                if t == tenant and mt is metric_type
            ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        """Dispatch a request to the matching endpoint."""
        with self._lock:
            self.requests.append(request)

        # Match on the encoded path so an escaped "/" stays inside its segment.
        path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        for pattern, method, handler in (
            (_COLLECTION, "POST", self._create),
            (_COLLECTION_DATA, "POST", self._write),
            (_SERIES_DATA, "GET", self._read),
        ):
            match = pattern.match(path)
            if match is None:
                continue
            if match["root"] != self.root:
                break
            if request.method != method:
                return _error(405, f"Method {request.method} not allowed on {path}")
            try:
                metric_type = MetricType.validate(match["type"])
            except ValueError:
                return _error(400, f"Unknown metric type [{match['type']}]")
            return handler(request, match["tenant"], metric_type, match.groupdict())
        return _error(404, f"No resource at {path}")

    def _create(
        self,
        request: httpx.Request,
        tenant: str,
        metric_type: MetricType,
        groups: dict[str, str],
    ) -> httpx.Response:
        try:
            definition = json.loads(request.content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, "Metric definition is not valid JSON")
        if not isinstance(definition, dict) or not isinstance(
            definition.get("id"), str
        ):
            return _error(400, "Metric definition must be an object with an id")

        key = (tenant, metric_type, definition["id"])
        with self._lock:
            if key in self._definitions:
                return _error(
                    409, f"A metric with name [{definition['id']}] already exists"
                )
            self._definitions[key] = definition
        return httpx.Response(201)

    def _write(
        self,
        request: httpx.Request,
        tenant: str,
        metric_type: MetricType,
        groups: dict[str, str],
    ) -> httpx.Response:
        try:
            headers = json.loads(request.content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, "Payload is not valid JSON")
        if not isinstance(headers, list):
            return _error(400, "Payload must be an array of metrics")

        batch: list[tuple[SeriesKey, dict[str, Any]]] = []
        for header in headers:
            if not isinstance(header, dict) or not isinstance(header.get("id"), str):
                return _error(400, "Every metric needs an id")
            for point in header.get("data") or []:
                if not isinstance(point, dict) or not isinstance(
                    point.get("timestamp"), int
                ):
                    return _error(400, f"Invalid data point for [{header['id']}]")
                value = point.get("value")
                if metric_type is MetricType.NUMERIC and (
                    isinstance(value, bool) or not isinstance(value, (int, float))
                ):
                    return _error(400, f"Value {value!r} is not numeric")
                batch.append(((tenant, metric_type, header["id"]), point))

        with self._lock:
            for key, point in batch:
                self._points.setdefault(key, []).append(point)
        return httpx.Response(200)

    def _read(
        self,
        request: httpx.Request,
        tenant: str,
        metric_type: MetricType,
        groups: dict[str, str],
    ) -> httpx.Response:
        params = request.url.params
        try:
            start = int(params["start"]) if "start" in params else None
            end = int(params["end"]) if "end" in params else None
        except ValueError:
            return _error(400, "start and end must be epoch milliseconds")

        with self._lock:
            points = list(
                self._points.get((tenant, metric_type, unquote(groups["id"])), [])
            )

        if start is not None:
            points = [p for p in points if p["timestamp"] >= start]
        if end is not None:
            points = [p for p in points if p["timestamp"] < end]
        if not points:
            return httpx.Response(204)

        points.sort(key=lambda p: p["timestamp"], reverse=True)
        return httpx.Response(200, json=points)
