import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from hilicurl.contracts.probe_outcome import ProbeOutcome

logger = logging.getLogger(__name__)


class MetricsManager:
    """
    Prometheus instruments describing the probes of the current run.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the MetricsManager and register its metrics.

        Args:
            registry: Collector registry to register on. Defaults to a registry
                private to this run, so several runs in one process do not collide.
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.DISPATCHED = Counter(
            "hilicurl_probes_dispatched",
            "Number of probes dispatched",
            registry=self.registry,
        )
        self.IN_FLIGHT = Gauge(
            "hilicurl_probes_in_flight",
            "Number of probes awaiting a result",
            registry=self.registry,
        )
        self.OUTCOMES = Counter(
            "hilicurl_probe_outcomes",
            "Number of classified probe outcomes",
            ["outcome"],
            registry=self.registry,
        )
        self.LAST_LATENCY = Gauge(
            "hilicurl_last_probe_latency_seconds",
            "Elapsed time of the most recent successful probe",
            registry=self.registry,
        )
        logger.debug("MetricsManager initialized.")

    def probe_started(self):
        self.DISPATCHED.inc()
        self.IN_FLIGHT.inc()

    def probe_finished(self, outcome: ProbeOutcome):
        self.OUTCOMES.labels(outcome=outcome.status.kind).inc()
        if outcome.succeeded:
            self.LAST_LATENCY.set(outcome.elapsed)

    def probe_settled(self):
        """Called once per dispatched probe, whether or not it produced an outcome."""
        self.IN_FLIGHT.dec()

    def get_in_flight(self):
        """
        Get the current number of in-flight probes.

        Returns:
            float: Number of in-flight probes.
        """
        return self.IN_FLIGHT._value.get()

    def serve(self, port: int):
        """
        Expose the registry on an HTTP endpoint in a background thread.

        Args:
            port (int): TCP port to listen on.
        """
        start_http_server(port, registry=self.registry)
        logger.info(f"Serving Prometheus metrics on port {port}")
