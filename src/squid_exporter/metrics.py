"""Metric registry: one row per tracked field of the Squid info report.

Report keys are matched *after* normalization (spaces, units and window
prefixes stripped), so "Number of clients accessing cache:" becomes
``Numberofclientsaccessingcache``.

These metric names and label keys are stable contracts.
DO NOT rename without updating dashboards and tests.
"""

from __future__ import annotations

from squid_exporter.base import Category, MetricDefinition, ValueKind

UP_METRIC = "up"
UP_HELP = "Was the last scrape of squid successful."

_CONN = Category.CONNECTION_INFO
_CACHE = Category.CACHE_INFO
_IDS = Category.INTERNAL_DATA_STRUCTURES

METRIC_DEFINITIONS: tuple[MetricDefinition, ...] = (
    # Connection information for squid
    MetricDefinition(
        "Numberofclientsaccessingcache",
        "number_of_clients_accessing_cache",
        "Number of clients accessing the cache.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofHTTPrequestsreceived",
        "number_of_http_requests_received",
        "Number of HTTP requests received.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofICPmessagesreceived",
        "number_of_icp_messages_received",
        "Number of ICP messages received.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofICPmessagessent",
        "number_of_icp_messages_sent",
        "Number of ICP messages sent.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofqueuedICPreplies",
        "number_of_queued_icp_replies",
        "Number of queued ICP replies.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofHTCPmessagesreceived",
        "number_of_htcp_messages_received",
        "Number of HTCP messages received.",
        _CONN,
    ),
    MetricDefinition(
        "NumberofHTCPmessagessent",
        "number_of_htcp_messages_sent",
        "Number of HTCP messages sent.",
        _CONN,
    ),
    MetricDefinition(
        "Requestfailureratio",
        "request_failure_ratio",
        "Request failure ratio.",
        _CONN,
    ),
    MetricDefinition(
        "AverageHTTPrequestsperminutesincestart",
        "average_http_requests_per_minute_since_start",
        "Average HTTP requests per minute since start.",
        _CONN,
    ),
    MetricDefinition(
        "AverageICPmessagesperminutesincestart",
        "average_icp_messages_per_minute_since_start",
        "Average ICP messages per minute since start.",
        _CONN,
    ),
    MetricDefinition(
        "Selectloopcalled",
        "select_loop_called",
        "Select loop calls. Label details is either times or ms_avg.",
        _CONN,
        ValueKind.SELECT_LOOP,
    ),
    # Cache information for squid
    MetricDefinition(
        "Hitsasofallrequests",
        "hits_as_percentage_of_all_requests",
        "Hits as percentage of all requests, over 5min and 60min windows.",
        _CACHE,
        ValueKind.TIME_WINDOW,
    ),
    MetricDefinition(
        "Hitsasofbytessent",
        "hits_as_percentage_of_bytes_sent",
        "Hits as percentage of bytes sent, over 5min and 60min windows.",
        _CACHE,
        ValueKind.TIME_WINDOW,
    ),
    MetricDefinition(
        "Memoryhitsasofhitrequests",
        "memory_hits_as_percentage_of_hit_requests",
        "Memory hits as percentage of hit requests, over 5min and 60min windows.",
        _CACHE,
        ValueKind.TIME_WINDOW,
    ),
    MetricDefinition(
        "Diskhitsasofhitrequests",
        "disk_hits_as_percentage_of_hit_requests",
        "Disk hits as percentage of hit requests, over 5min and 60min windows.",
        _CACHE,
        ValueKind.TIME_WINDOW,
    ),
    # Internal Data Structures
    MetricDefinition(
        "StoreEntries",
        "number_of_store_entries",
        "Number of store entries.",
        _IDS,
    ),
    MetricDefinition(
        "StoreEntrieswithMemObjects",
        "number_of_store_entries_with_mem_objects",
        "Number of store entries with mem objects.",
        _IDS,
    ),
    MetricDefinition(
        "HotObjectCacheItems",
        "number_of_hot_object_cache_items",
        "Number of hot object cache items.",
        _IDS,
    ),
    MetricDefinition(
        "on-diskobjects",
        "number_of_ondisk_objects",
        "Number of on-disk objects.",
        _IDS,
    ),
)


def definitions_for(category: Category) -> list[MetricDefinition]:
    """Return the definitions of *category*, in table order."""
    return [d for d in METRIC_DEFINITIONS if d.category is category]

