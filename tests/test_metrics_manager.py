import unittest
from unittest.mock import patch

from prometheus_client import CollectorRegistry

from hilicurl.contracts.probe_outcome import ProbeOutcome, Success, TimedOut
from hilicurl.core.metrics_manager import MetricsManager


class TestMetricsManager(unittest.TestCase):
    def setUp(self):
        self.registry = CollectorRegistry()
        self.metrics_manager = MetricsManager(self.registry)

    def _sample(self, name, labels=None):
        return self.registry.get_sample_value(name, labels or {})

    def test_probe_lifecycle(self):
        self.metrics_manager.probe_started()
        self.metrics_manager.probe_started()
        self.assertEqual(self._sample("hilicurl_probes_dispatched_total"), 2.0)
        self.assertEqual(self.metrics_manager.get_in_flight(), 2.0)

        self.metrics_manager.probe_finished(
            ProbeOutcome(status=Success(status_code=200, body_length=5, elapsed=0.25))
        )
        self.metrics_manager.probe_settled()
        self.metrics_manager.probe_finished(ProbeOutcome(status=TimedOut()))
        self.metrics_manager.probe_settled()

        self.assertEqual(self.metrics_manager.get_in_flight(), 0.0)
        self.assertEqual(
            self._sample("hilicurl_probe_outcomes_total", {"outcome": "success"}), 1.0
        )
        self.assertEqual(
            self._sample("hilicurl_probe_outcomes_total", {"outcome": "timed_out"}), 1.0
        )
        self.assertEqual(self._sample("hilicurl_last_probe_latency_seconds"), 0.25)

    def test_failed_probe_keeps_last_latency(self):
        self.metrics_manager.probe_finished(
            ProbeOutcome(status=Success(status_code=204, body_length=0, elapsed=0.1))
        )
        self.metrics_manager.probe_finished(ProbeOutcome(status=TimedOut()))
        self.assertEqual(self._sample("hilicurl_last_probe_latency_seconds"), 0.1)

    def test_instances_do_not_collide(self):
        # Each run gets its own registry unless one is passed in
        MetricsManager()
        MetricsManager()

    @patch("hilicurl.core.metrics_manager.start_http_server")
    def test_serve(self, mock_start):
        self.metrics_manager.serve(9100)
        mock_start.assert_called_once_with(9100, registry=self.registry)


if __name__ == "__main__":
    unittest.main()
