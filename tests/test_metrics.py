"""Tests for the metric definition table."""

from __future__ import annotations

import re

import pytest

from squid_exporter.base import Category, MetricDefinition, ValueKind
from squid_exporter.metrics import (
    METRIC_DEFINITIONS,
    UP_METRIC,
    definitions_for,
)

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")


class TestMetricTable:
    def test_names_unique(self) -> None:
        names = [d.name for d in METRIC_DEFINITIONS]
        assert len(names) == len(set(names))
        assert UP_METRIC not in names

    def test_report_keys_unique(self) -> None:
        keys = [d.report_key for d in METRIC_DEFINITIONS]
        assert len(keys) == len(set(keys))

    def test_names_are_valid_prometheus_names(self) -> None:
        for d in METRIC_DEFINITIONS:
            assert _METRIC_NAME_RE.match(d.name), d.name

    def test_report_keys_are_normalized(self) -> None:
        for d in METRIC_DEFINITIONS:
            assert " " not in d.report_key
            assert ":" not in d.report_key

    def test_category_sizes(self) -> None:
        assert len(definitions_for(Category.CONNECTION_INFO)) == 11
        assert len(definitions_for(Category.CACHE_INFO)) == 4
        assert len(definitions_for(Category.INTERNAL_DATA_STRUCTURES)) == 4

    def test_single_select_loop_field(self) -> None:
        select = [d for d in METRIC_DEFINITIONS if d.kind is ValueKind.SELECT_LOOP]
        assert [d.name for d in select] == ["select_loop_called"]
        assert select[0].category is Category.CONNECTION_INFO

    def test_cache_info_is_time_window(self) -> None:
        for d in definitions_for(Category.CACHE_INFO):
            assert d.kind is ValueKind.TIME_WINDOW


class TestMetricDefinition:
    @pytest.mark.parametrize(
        ("kind", "labels"),
        [
            (ValueKind.SINGLE, ("category",)),
            (ValueKind.SELECT_LOOP, ("details", "category")),
            (ValueKind.TIME_WINDOW, ("time", "category")),
        ],
    )
    def test_labels_follow_kind(self, kind: ValueKind, labels: tuple[str, ...]) -> None:
        d = MetricDefinition("Key", "some_metric", "help", Category.CACHE_INFO, kind)
        assert d.labels == labels

    def test_frozen(self) -> None:
        d = METRIC_DEFINITIONS[0]
        with pytest.raises(AttributeError):
            d.name = "renamed"  # type: ignore[misc]


class TestLookup:
    def test_definitions_for_keeps_table_order(self) -> None:
        names = [d.name for d in definitions_for(Category.INTERNAL_DATA_STRUCTURES)]
        assert names == [
            "number_of_store_entries",
            "number_of_store_entries_with_mem_objects",
            "number_of_hot_object_cache_items",
            "number_of_ondisk_objects",
        ]
