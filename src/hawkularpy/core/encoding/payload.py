"""JSON codec for metrics service request and reply bodies."""

import json
import logging
import numbers
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import httpx

from hawkularpy.core.conversion import convert_to_float
from hawkularpy.core.errors import ConversionError, DecodeError, ServiceError
from hawkularpy.core.models import Metric, MetricDefinition, MetricHeader

logger = logging.getLogger(__name__)


def _encode_default(obj: Any) -> Any:
    """Fallback for values json cannot serialize natively."""
    if isinstance(obj, (numbers.Real, Decimal)) and not isinstance(obj, bool):
        return convert_to_float(obj)
    raise ConversionError(f"Cannot serialize metric value {obj!r}")


def _metric_to_dict(metric: Metric) -> dict[str, Any]:
    return {"timestamp": metric.timestamp, "value": metric.value}


def encode_headers(headers: Iterable[MetricHeader]) -> str:
    """Encode metric headers as the JSON array accepted by the data endpoint.

    Args:
        headers: Headers to encode, in order.

    Returns:
        JSON string of the form
        [{"id": ..., "data": [{"timestamp": ..., "value": ...}]}].

    Raises:
        ConversionError: If a value cannot be represented in JSON, including
            NaN and infinities.
    """
    body = [
        {"id": header.id, "data": [_metric_to_dict(m) for m in header.data]}
        for header in headers
    ]
    try:
        return json.dumps(body, default=_encode_default, allow_nan=False)
    except ConversionError:
        raise
    except ValueError as e:
        raise ConversionError(f"Metric values must be finite: {e}") from e


def encode_definition(definition: MetricDefinition) -> str:
    """Encode a metric definition, omitting unset tags and retention."""
    obj: dict[str, Any] = {"id": definition.id}
    if definition.tags:
        obj["tags"] = dict(definition.tags)
    if definition.data_retention:
        obj["dataRetention"] = definition.data_retention
    return json.dumps(obj)


def decode_metrics(body: bytes | str) -> list[Metric]:
    """Decode a data point array returned by the data endpoint.

    Args:
        body: Raw reply body.

    Returns:
        Metrics in the order the service returned them.

    Raises:
        DecodeError: If the body is not a JSON array of timestamp/value objects.
    """
    try:
        items = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Reply is not valid JSON: {e}") from e
    if not isinstance(items, list):
        raise DecodeError("Reply is not a JSON array")

    metrics = []
    for item in items:
        if not isinstance(item, dict) or "timestamp" not in item:
            raise DecodeError(f"Malformed data point: {item!r}")
        raw = item["timestamp"]
        if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
            raise DecodeError(f"Malformed timestamp: {raw!r}")
        try:
            timestamp = int(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"Malformed timestamp: {raw!r}") from e
        metrics.append(Metric(timestamp=timestamp, value=item.get("value")))
    return metrics


def parse_error_response(response: httpx.Response) -> ServiceError:
    """Build a ServiceError from a non-success reply.

    Reads the full body and extracts the "errorMsg" field. When the body
    cannot be read or is not an object with a string errorMsg, the error
    keeps the status code and notes that the reply could not be parsed.

    Args:
        response: The non-success reply.

    Returns:
        ServiceError carrying the status code and best-effort message.
    """
    code = response.status_code
    try:
        reply = response.read()
    except httpx.HTTPError as e:
        return ServiceError(code, str(e), parsed=False)

    try:
        details = json.loads(reply)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return ServiceError(code, str(e), parsed=False)

    if not isinstance(details, dict) or not isinstance(details.get("errorMsg"), str):
        logger.debug("Error reply without errorMsg: %r", reply[:200])
        return ServiceError(code, "errorMsg field missing", parsed=False)

    return ServiceError(code, details["errorMsg"])
