"""URL composition for the metrics service endpoints.

Pure functions; the client binds its base URL and tenant to them.
"""

from collections.abc import Mapping
from urllib.parse import quote

import httpx

from hawkularpy.core.models import MetricType


def metrics_url(base_url: str, tenant: str, metric_type: MetricType) -> str:
    """Collection URL for one metric type of a tenant."""
    return f"{base_url}{tenant}/metrics/{metric_type.long_form}"


def single_metrics_url(
    base_url: str, tenant: str, metric_type: MetricType, metric_id: str
) -> str:
    """URL of a single series.

    The id is percent-encoded as one path segment, so ids containing "/",
    "?" or "#" still address their own series.
    """
    return f"{metrics_url(base_url, tenant, metric_type)}/{quote(metric_id, safe='')}"


def data_url(url: str) -> str:
    return f"{url}/data"


def param_url(url: str, options: Mapping[str, str] | None = None) -> str:
    """Merge options into the query string of url.

    Each option replaces any existing parameter with the same name; other
    existing parameters are kept.

    Args:
        url: Absolute URL, possibly with a query string.
        options: Query parameters to set.

    Returns:
        The URL with the merged query string.
    """
    if not options:
        return url
    merged = httpx.URL(url).copy_merge_params({k: str(v) for k, v in options.items()})
    return str(merged)
