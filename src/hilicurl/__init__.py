"""hilicurl: ping-style latency prober for HTTP endpoints."""

__version__ = "0.3.0"
