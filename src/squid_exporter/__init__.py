"""squid-exporter: Prometheus exporter for the Squid cache manager report."""

from __future__ import annotations

__version__ = "0.1.0"
