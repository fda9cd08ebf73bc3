"""Parser for the Squid cache manager ``info`` report.

The report is meant for humans: labels contain spaces and units, some
values carry several comma-separated numbers, and the "Internal Data
Structures" section puts the count *before* its label.  Parsing is split
into three independently testable steps:

1. :func:`normalize` applies :data:`NORMALIZATION_STEPS` in order.
2. :func:`tokenize` yields ``(key, value)`` pairs from the normalized lines.
3. :func:`resolve_pairs` folds the pairs into a fresh :data:`ScrapeResult`.

Numeric coercion is lenient on purpose: anything that is not a float is
``0.0`` (see :func:`to_float`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

ScrapeResult = dict[str, str]

# (old, new, count); count=-1 replaces every occurrence.
# Order matters: each step sees the output of the previous one.
NORMALIZATION_STEPS: tuple[tuple[str, str, int], ...] = (
    (" ", "", -1),
    # Units and descriptive tokens embedded in values
    ("used", "", -1),
    ("free", "", -1),
    ("KB", "", -1),
    ("%", "", -1),
    ("5min:", "", -1),
    ("60min:", "", -1),
    ("\t", "", -1),
    # Internal Data Structures lines have no delimiter between count and label
    ("StoreEntries", ":StoreEntries", -1),
    ("HotObject", ":HotObject", 1),
    ("on-disk", ":on-disk", 1),
)

# Values that are really labels: "12:StoreEntries" means StoreEntries=12.
# Matched by prefix so "StoreEntrieswithMemObjects", "HotObjectCacheItems"
# and "on-diskobjects" resolve too.
TRANSPOSED_LABELS: tuple[str, ...] = ("StoreEntries", "HotObject", "on-disk")

_SELECT_LOOP_SUFFIXES = ("times", "msavg")


def normalize(text: str) -> str:
    """Apply every normalization step to *text*, in order."""
    for old, new, count in NORMALIZATION_STEPS:
        text = text.replace(old, new, count)
    return text


def tokenize(normalized: str) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` for each line with at least one ``:``.

    Segments after the second are ignored.
    """
    for line in normalized.splitlines():
        parts = line.split(":")
        if len(parts) > 1:
            yield parts[0], parts[1]


def is_transposed(value: str) -> bool:
    return value.startswith(TRANSPOSED_LABELS)


def parse_report(text: str) -> ScrapeResult:
    """Parse a raw report into a key -> value map.

    The returned dict is new on every call.
    """
    return resolve_pairs(tokenize(normalize(text)))


def resolve_pairs(pairs: Iterable[tuple[str, str]]) -> ScrapeResult:
    """Fold pairs into a map, last-line-wins.

    For transposed lines the reversed mapping (label -> count) is added
    as well.
    """
    result: ScrapeResult = {}
    for key, value in pairs:
        result[key] = value
        if is_transposed(value):
            result[value] = key
    return result


def _split_pair(value: str) -> tuple[str, str]:
    first, _, second = value.partition(",")
    # Only the first two comma-separated values are meaningful
    second = second.split(",", 1)[0]
    return first, second


def split_select_loop(value: str) -> tuple[str, str]:
    """Split ``"1234times,5msavg"`` into ``("1234", "5")``.

    A missing part comes back as ``""``.
    """
    times, ms_avg = _split_pair(value)
    return (
        times.replace(_SELECT_LOOP_SUFFIXES[0], "", 1),
        ms_avg.replace(_SELECT_LOOP_SUFFIXES[1], "", 1),
    )


def split_time_window(value: str) -> tuple[str, str]:
    """Split ``"12.5,34.7"`` into its 5min and 60min parts."""
    return _split_pair(value)


def to_float(value: str | None) -> float:
    """Coerce *value* to float; anything unparseable is ``0.0``.

    Never raises.
    """
    if value is None:
        return 0.0
    # float() also takes digit groups ("1_000"); those are not numbers here.
    if isinstance(value, str) and "_" in value:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
