"""Core data types and exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# --- Exceptions ---


class SquidExporterError(Exception):
    """Base exception for all squid-exporter errors."""


class ConfigError(SquidExporterError):
    """Configuration loading or validation failure."""


class ScrapeFailedError(SquidExporterError):
    """The Squid report could not be fetched (refused, timeout, DNS, ...)."""


# --- Enums ---


class Category(Enum):
    """Report section a metric belongs to; used as the ``category`` label."""

    CONNECTION_INFO = "connection_info"
    CACHE_INFO = "cache_info"
    INTERNAL_DATA_STRUCTURES = "internal_data_structures"


class ValueKind(Enum):
    """How a report value maps onto gauge samples."""

    SINGLE = "single"
    SELECT_LOOP = "select_loop"  # "<N>times,<M>msavg"
    TIME_WINDOW = "time_window"  # "<5min>,<60min>"


_LABELS: dict[ValueKind, tuple[str, ...]] = {
    ValueKind.SINGLE: ("category",),
    ValueKind.SELECT_LOOP: ("details", "category"),
    ValueKind.TIME_WINDOW: ("time", "category"),
}


# --- Data Types (frozen, slotted) ---


@dataclass(frozen=True, slots=True)
class MetricDefinition:
    """One tracked field of the Squid report."""

    report_key: str  # key after normalization, e.g. "Numberofclientsaccessingcache"
    name: str
    help: str
    category: Category
    kind: ValueKind = ValueKind.SINGLE

    @property
    def labels(self) -> tuple[str, ...]:
        return _LABELS[self.kind]
