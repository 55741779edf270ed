"""
Prometheus metrics for the Confidant token exchange.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class ExchangeMetrics:
    """
    Centralized metrics for token exchanges.

    Each instance owns its registry unless one is injected, so tests and
    multiple clients in one process do not collide on metric names.
    """

    def __init__(self, service_name: str = "confidant-exchange", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        self.client_info = Info(
            "confidant_exchange",
            "Exchange client information",
            registry=self.registry,
        )
        self.client_info.info({"service": service_name, "version": version})

        self.exchanges_total = Counter(
            "confidant_exchanges_total",
            "Total token exchanges by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.exchange_duration = Histogram(
            "confidant_exchange_duration_seconds",
            "Token exchange duration in seconds",
            registry=self.registry,
        )

        self.exchanges_in_flight = Gauge(
            "confidant_exchanges_in_flight",
            "Number of token exchanges in progress",
            registry=self.registry,
        )

        self.kms_encrypt_total = Counter(
            "confidant_kms_encrypt_total",
            "Key-management encrypt calls by status",
            ["status"],
            registry=self.registry,
        )

    def record_exchange(self, outcome: str, duration_seconds: float):
        """Record a finished exchange."""
        self.exchanges_total.labels(outcome=outcome).inc()
        self.exchange_duration.observe(duration_seconds)

    def record_kms_encrypt(self, success: bool):
        """Record a key-management encrypt call."""
        self.kms_encrypt_total.labels(status="ok" if success else "error").inc()
