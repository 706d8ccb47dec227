from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


@dataclass
class MetricsSnapshot:
    content: bytes
    content_type: str


class Metrics:
    """Prometheus counters for one application instance."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._registry: CollectorRegistry | None = None
        if self.enabled:
            self._initialize_registry()

    def _initialize_registry(self) -> None:
        self._registry = CollectorRegistry()
        self._http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by route/method/status.",
            ["route", "method", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "HTTP request latency in milliseconds.",
            ["route", "method"],
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000),
            registry=self._registry,
        )
        self._app_errors_total = Counter(
            "app_errors_total",
            "Application errors by catalog code.",
            ["code"],
            registry=self._registry,
        )
        self._sales_finalized_total = Counter(
            "sales_finalized_total",
            "Finalized sales by payment method.",
            ["payment_method"],
            registry=self._registry,
        )
        self._sales_revenue_total = Counter(
            "sales_revenue_kz_total",
            "Net revenue of finalized sales in kwanzas.",
            registry=self._registry,
        )

    def reset(self) -> None:
        if self.enabled:
            self._initialize_registry()

    def record_http_request(self, *, route: str, method: str, status_code: int, latency_ms: float) -> None:
        if not self.enabled:
            return
        self._http_requests_total.labels(route=route, method=method, status=str(status_code)).inc()
        self._http_request_duration_ms.labels(route=route, method=method).observe(latency_ms)

    def record_app_error(self, code: str) -> None:
        if not self.enabled:
            return
        self._app_errors_total.labels(code=code).inc()

    def record_sale_finalized(self, payment_method: str | None, total: Decimal) -> None:
        if not self.enabled:
            return
        self._sales_finalized_total.labels(payment_method=payment_method or "UNKNOWN").inc()
        self._sales_revenue_total.inc(float(total))

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(content=b"metrics_disabled\n", content_type="text/plain")
        return MetricsSnapshot(content=generate_latest(self._registry), content_type=CONTENT_TYPE_LATEST)
