"""Step definitions for the client round trip features."""

import json
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from hawkularpy.adapters.in_memory import InMemoryMetricsService
from hawkularpy.client import MetricsClient, Parameters
from hawkularpy.core.conversion import unix_milli
from hawkularpy.core.errors import ConversionError, InvalidMetricTypeError, ServiceError
from hawkularpy.core.models import Metric, MetricDefinition, MetricHeader, MetricType


@dataclass
class ClientScenarioContext:
    """State shared between the steps of one scenario."""

    client: MetricsClient | None = None
    error: Exception | None = None
    result: list[Metric] = field(default_factory=list)
    pushed_after: int = 0
    http_clients: list[httpx.Client] = field(default_factory=list)

    def call(self, func: Any, *args: Any) -> Any:
        """Run a client call, keeping any library error for later steps."""
        self.error = None
        try:
            return func(*args)
        except (ServiceError, ConversionError, InvalidMetricTypeError) as e:
            self.error = e
            return None


@pytest.fixture
def ctx(tenant: str) -> Generator[ClientScenarioContext]:
    """Fresh scenario context for each test."""
    context = ClientScenarioContext()
    yield context
    for http in context.http_clients:
        http.close()


def _attach(ctx: ClientScenarioContext, tenant: str, transport: httpx.BaseTransport) -> None:
    http = httpx.Client(transport=transport)
    ctx.http_clients.append(http)
    ctx.client = MetricsClient(
        Parameters(tenant=tenant, host="localhost", port=8081), http_client=http
    )


# === Background Steps ===
@given("a metrics client for a fresh tenant")
def step_client(
    ctx: ClientScenarioContext, tenant: str, metrics_service: InMemoryMetricsService
) -> None:
    _attach(ctx, tenant, metrics_service.transport())


@given("a metrics client whose transport fails if used")
def step_failing_client(ctx: ClientScenarioContext, tenant: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"Unexpected request: {request.method} {request.url}")

    _attach(ctx, tenant, httpx.MockTransport(handler))


# === Action Steps ===
@given(parsers.parse('numeric series "{metric_id}" is created'))
@when(parsers.parse('numeric series "{metric_id}" is created'))
def step_create(ctx: ClientScenarioContext, metric_id: str) -> None:
    ctx.call(ctx.client.create, MetricType.NUMERIC, MetricDefinition(id=metric_id))


@when(parsers.parse('value {raw} is pushed to "{metric_id}" without a timestamp'))
def step_push(ctx: ClientScenarioContext, raw: str, metric_id: str) -> None:
    ctx.pushed_after = unix_milli()
    ctx.call(ctx.client.push_single_numeric_metric, metric_id, Metric(value=json.loads(raw)))


@when(
    parsers.parse(
        'a numeric batch with {first:d} point for "{first_id}" and '
        '{second:d} points for "{second_id}" is written'
    )
)
def step_write_batch(
    ctx: ClientScenarioContext, first: int, first_id: str, second: int, second_id: str
) -> None:
    now = unix_milli()
    headers = [
        MetricHeader(id=first_id, data=[Metric(now - i, float(i)) for i in range(first)]),
        MetricHeader(id=second_id, data=[Metric(now - i, float(i)) for i in range(second)]),
    ]
    ctx.call(ctx.client.write_multiple, MetricType.NUMERIC, headers)


@when(parsers.parse("a batch is written with metric type {raw}"))
def step_write_invalid_type(ctx: ClientScenarioContext, raw: str) -> None:
    ctx.call(ctx.client.write_multiple, json.loads(raw), [MetricHeader(id="m1")])


@when(parsers.parse('series "{metric_id}" is queried'))
def step_query(ctx: ClientScenarioContext, metric_id: str) -> None:
    ctx.result = ctx.call(ctx.client.query_single_numeric_metric, metric_id, {}) or []


# === Assertion Steps ===
@then("the call succeeds")
def step_succeeds(ctx: ClientScenarioContext) -> None:
    assert ctx.error is None, ctx.error


@then(parsers.parse("the call fails with status {code:d}"))
def step_fails_with_status(ctx: ClientScenarioContext, code: int) -> None:
    assert isinstance(ctx.error, ServiceError)
    assert ctx.error.code == code


@then("the call fails with a conversion error")
def step_fails_conversion(ctx: ClientScenarioContext) -> None:
    assert isinstance(ctx.error, ConversionError)


@then("the call fails with an invalid metric type error")
def step_fails_metric_type(ctx: ClientScenarioContext) -> None:
    assert isinstance(ctx.error, InvalidMetricTypeError)


@then(
    parsers.re(r"the query returns (?P<count>\d+) points?"),
    converters={"count": int},
)
def step_point_count(ctx: ClientScenarioContext, count: int) -> None:
    assert len(ctx.result) == count


@then(parsers.parse("every returned point has value {value:g}"))
def step_point_values(ctx: ClientScenarioContext, value: float) -> None:
    assert all(m.value == value for m in ctx.result)


@then("every returned timestamp is not before the push")
def step_point_timestamps(ctx: ClientScenarioContext) -> None:
    assert all(m.timestamp >= ctx.pushed_after for m in ctx.result)
