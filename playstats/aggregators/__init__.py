"""Aggregation of snapshots into dashboard statistics."""

from playstats.aggregators.stats_aggregator import (
    UNKNOWN_CONTRIBUTOR,
    build_stats_summary,
    count,
    count_recent,
    format_duration,
    list_playtime,
    list_users,
    merge_entries,
    parse_timestamp,
    rank_contributors,
    recent_window_start,
    sum_playtime,
)

__all__ = [
    "UNKNOWN_CONTRIBUTOR",
    # Primitive operations
    "count",
    "count_recent",
    "recent_window_start",
    "sum_playtime",
    "format_duration",
    "merge_entries",
    "rank_contributors",
    "parse_timestamp",
    # Endpoint compositions
    "build_stats_summary",
    "list_users",
    "list_playtime",
]
