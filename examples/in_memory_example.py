"""Example round trip against the in-memory metrics service.

Run with:
    python examples/in_memory_example.py

Point `Parameters` at a live service and drop `http_client` to talk to a
real Hawkular metrics instance instead.
"""

import logging

import httpx

from hawkularpy import (
    InMemoryMetricsService,
    Metric,
    MetricDefinition,
    MetricHeader,
    MetricsClient,
    MetricType,
    Parameters,
    ServiceError,
    unix_milli,
)

logging.basicConfig(level=logging.DEBUG)

service = InMemoryMetricsService()
params = Parameters(tenant="example", host="localhost", port=8081)


def main() -> None:
    with (
        httpx.Client(transport=service.transport()) as http,
        MetricsClient(params, http_client=http) as client,
    ):
        client.create(MetricType.NUMERIC, MetricDefinition(id="cpu.load", tags={"units": "%"}))
        try:
            client.create(MetricType.NUMERIC, MetricDefinition(id="cpu.load"))
        except ServiceError as e:
            if not e.conflict:
                raise
            print(f"cpu.load already exists ({e.code})")

        client.push_single_numeric_metric("cpu.load", Metric(value="42.5"))

        now = unix_milli()
        client.write_multiple(
            MetricType.NUMERIC,
            [
                MetricHeader(id="mem.used", data=[Metric(now, 512)]),
                MetricHeader(id="mem.free", data=[Metric(now, 256), Metric(now - 1000, 300)]),
            ],
        )

        for metric_id in ("cpu.load", "mem.used", "mem.free", "disk.io"):
            points = client.query_single_numeric_metric(metric_id, {"start": str(now - 60_000)})
            print(metric_id, [(p.timestamp, p.value) for p in points])


if __name__ == "__main__":
    main()
