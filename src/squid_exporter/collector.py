"""Prometheus collector: fetch, parse and publish one Squid report per scrape.

Gauge families are built fresh on every scrape, so a failed scrape emits
only ``up 0`` and never repeats values from an earlier report.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Literal, Protocol

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from squid_exporter.base import Category, ScrapeFailedError, ValueKind
from squid_exporter.fetcher import ReportFetcher
from squid_exporter.metrics import UP_HELP, UP_METRIC, definitions_for
from squid_exporter.parser import (
    parse_report,
    split_select_loop,
    split_time_window,
    to_float,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from prometheus_client.metrics_core import Metric

    from squid_exporter.base import MetricDefinition
    from squid_exporter.config import ConfigHolder, SquidConfig
    from squid_exporter.parser import ScrapeResult

logger = logging.getLogger(__name__)

MissingKeys = Literal["zero", "omit"]


class Fetcher(Protocol):
    def fetch(self) -> str: ...


class SquidCollector(Collector):
    """Custom collector registered in a ``CollectorRegistry``.

    ``collect()`` runs a full fetch/parse/publish cycle under a lock, so
    overlapping scrapes queue instead of interleaving.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        missing_keys: MissingKeys = "zero",
        config_holder: ConfigHolder | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._missing_keys = missing_keys
        self._config_holder = config_holder
        self._squid_config: SquidConfig | None = None
        self._lock = threading.Lock()
        self._up = 0.0

    @classmethod
    def from_config_holder(cls, holder: ConfigHolder) -> SquidCollector:
        config = holder.config
        collector = cls(
            ReportFetcher.from_config(config.squid),
            missing_keys=config.exporter.missing_keys,
            config_holder=holder,
        )
        collector._squid_config = config.squid
        return collector

    @property
    def up(self) -> float:
        return self._up

    # --- prometheus_client collector API ---

    def describe(self) -> Iterator[Metric]:
        for definition in _ordered_definitions():
            yield GaugeMetricFamily(
                definition.name, definition.help, labels=definition.labels
            )
        yield GaugeMetricFamily(UP_METRIC, UP_HELP)

    def collect(self) -> Iterator[Metric]:
        yield from self.scrape()

    # --- Scrape cycle ---

    def scrape(self) -> list[Metric]:
        """Run one scrape and return the metric families to expose."""
        with self._lock:
            self._refresh_config()
            try:
                text = self._fetcher.fetch()
            except ScrapeFailedError as exc:
                logger.warning("Problem communicating with squid: %s", exc)
                self._up = 0.0
                return [self._up_family()]

            result = parse_report(text)
            families = self._publish(result)
            self._up = 1.0
            families.append(self._up_family())
            return families

    def _publish(self, result: ScrapeResult) -> list[Metric]:
        families: list[Metric] = []
        missing: list[str] = []
        for definition in _ordered_definitions():
            value = result.get(definition.report_key)
            if value is None:
                missing.append(definition.report_key)
                if self._missing_keys == "omit":
                    continue
                value = ""
            families.append(_build_family(definition, value))
        if missing:
            logger.debug("Keys missing from squid report: %s", ", ".join(missing))
        return families

    def _up_family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(UP_METRIC, UP_HELP, value=self._up)

    def _refresh_config(self) -> None:
        """Pick up a SIGHUP reload before fetching."""
        if self._config_holder is None:
            return
        self._config_holder.check_reload()
        config = self._config_holder.config
        self._missing_keys = config.exporter.missing_keys
        if config.squid != self._squid_config:
            logger.info("Scraping squid at %s", config.squid.url)
            self._fetcher = ReportFetcher.from_config(config.squid)
            self._squid_config = config.squid


def _ordered_definitions() -> list[MetricDefinition]:
    """Definitions grouped by report section: connection, cache, internal."""
    return [d for category in Category for d in definitions_for(category)]


def _build_family(definition: MetricDefinition, value: str) -> GaugeMetricFamily:
    family = GaugeMetricFamily(
        definition.name, definition.help, labels=definition.labels
    )
    category = definition.category.value
    if definition.kind is ValueKind.SELECT_LOOP:
        times, ms_avg = split_select_loop(value)
        family.add_metric(["times", category], to_float(times))
        family.add_metric(["ms_avg", category], to_float(ms_avg))
    elif definition.kind is ValueKind.TIME_WINDOW:
        five_min, sixty_min = split_time_window(value)
        family.add_metric(["5min", category], to_float(five_min))
        family.add_metric(["60min", category], to_float(sixty_min))
    else:
        family.add_metric([category], to_float(value))
    return family
