from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

upstream_requests_total = Counter(
    "upstream_requests_total",
    "Number of upstream ticket API calls by operation and outcome.",
    labelnames=("operation", "outcome"),
)

upstream_seconds = Histogram(
    "upstream_seconds",
    "Seconds spent on an upstream ticket API call, including retries and parsing.",
    labelnames=("operation",),
)


def render_latest(*, registry=REGISTRY) -> tuple[bytes, str]:
    return generate_latest(registry), CONTENT_TYPE_LATEST
