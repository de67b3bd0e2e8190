"""Tests for the snapshot aggregation functions."""

import copy
import math
import sys
from datetime import datetime, timedelta, timezone

import pytest

from playstats.aggregators import (
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

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


class TestCount:
    def test_empty_collection(self):
        assert count({}) == 0

    def test_missing_collection(self):
        assert count(None) == 0

    def test_counts_top_level_keys(self):
        assert count({"a": 1, "b": 2}) == 2


class TestParseTimestamp:
    def test_iso_with_zulu_offset(self):
        assert parse_timestamp("1970-01-01T00:00:01Z") == 1000.0

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("1970-01-01T00:00:01") == 1000.0

    def test_numbers_are_epoch_milliseconds(self):
        assert parse_timestamp(1_700_000_000_000) == 1_700_000_000_000.0

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "yesterday", True, {"x": 1}, float("nan"), 10**400]
    )
    def test_unparseable_values(self, value):
        assert parse_timestamp(value) is None


class TestCountRecent:
    def test_excludes_old_and_includes_new_signups(self):
        users = {
            "old": {"createdAt": iso(NOW - timedelta(days=8))},
            "new": {"createdAt": iso(NOW - timedelta(hours=1))},
        }
        assert count_recent(users, recent_window_start(NOW)) == 1

    def test_window_start_is_exclusive(self):
        window_start = recent_window_start(NOW)
        users = {"edge": {"createdAt": iso(window_start)}}
        assert count_recent(users, window_start) == 0

    def test_epoch_millisecond_timestamps(self):
        created = (NOW - timedelta(days=1)).timestamp() * 1000
        assert count_recent({"u1": {"createdAt": created}}, recent_window_start(NOW)) == 1

    def test_missing_or_bad_dates_are_not_recent(self):
        users = {"a": {}, "b": {"createdAt": "not a date"}, "c": "not a record"}
        assert count_recent(users, recent_window_start(NOW)) == 0


class TestSumPlaytime:
    def test_non_numeric_values_count_as_zero(self):
        users = {"u1": {"playtime": {"total": {"a": 10, "b": "bad"}}}, "u2": {}}
        assert sum_playtime(users) == 10

    def test_numeric_strings_and_floats(self):
        users = {
            "u1": {"playtime": {"total": {"a": "30", "b": 0.5}}},
            "u2": {"playtime": {"total": {"a": 29.5}}},
        }
        assert sum_playtime(users) == 60
        assert isinstance(sum_playtime(users), int)

    def test_missing_or_malformed_playtime(self):
        users = {
            "u1": {"playtime": None},
            "u2": {"playtime": {"total": "lots"}},
            "u3": {"playtime": {"total": {"a": True, "b": None, "c": "inf"}}},
        }
        assert sum_playtime(users) == 0

    def test_array_shaped_totals(self):
        assert sum_playtime({"u1": {"playtime": {"total": [5, None, 7]}}}) == 12

    def test_empty_users(self):
        assert sum_playtime(None) == 0

    def test_huge_totals_stay_finite(self):
        users = {
            "u1": {"playtime": {"total": {"a": 1e308}}},
            "u2": {"playtime": {"total": {"a": 1e308}}},
        }

        total = sum_playtime(users)

        assert math.isfinite(total)
        assert total == sys.float_info.max
        assert format_duration(total).endswith("m")

    def test_huge_integer_next_to_float(self):
        users = {"u1": {"playtime": {"total": {"a": 10**400, "b": 0.5}}}}

        assert sum_playtime(users) == sys.float_info.max


class TestFormatDuration:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0m"),
            (59, "0m"),
            (60, "1m"),
            (3599, "59m"),
            (3600, "1h 0m"),
            (3661, "1h 1m"),
            (90061, "25h 1m"),
            (150.9, "2m"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_negative_is_clamped(self):
        assert format_duration(-120) == "0m"

    def test_non_finite_values(self):
        assert format_duration(math.nan) == "0m"
        assert format_duration(-math.inf) == "0m"
        assert format_duration(math.inf).startswith(f"{int(sys.float_info.max // 3600)}h")


class TestMergeEntries:
    def test_newest_first_with_type_and_id(self):
        games = {"g1": {"title": "Chess", "createdAt": "2026-10-02T00:00:00Z"}}
        websites = {"w1": {"title": "Docs", "createdAt": "2026-10-01T00:00:00Z"}}

        entries, breakdown = merge_entries(games, websites)

        assert [e["id"] for e in entries] == ["g1", "w1"]
        assert [e["type"] for e in entries] == ["game", "website"]
        assert entries[0]["title"] == "Chess"
        assert breakdown == {"games": 1, "websites": 1}

    def test_website_can_sort_before_game(self):
        games = {"g1": {"createdAt": "2026-10-01T00:00:00Z"}}
        websites = {"w1": {"createdAt": "2026-10-05T00:00:00Z"}}

        entries, _ = merge_entries(games, websites)

        assert [e["id"] for e in entries] == ["w1", "g1"]

    def test_ties_keep_games_before_websites(self):
        games = {"g1": {}, "g2": {}}
        websites = {"w1": {}}

        entries, _ = merge_entries(games, websites)

        assert [e["id"] for e in entries] == ["g1", "g2", "w1"]

    def test_missing_dates_sort_last(self):
        games = {"g1": {}}
        websites = {"w1": {"createdAt": "2020-01-01T00:00:00Z"}}

        entries, _ = merge_entries(games, websites)

        assert [e["id"] for e in entries] == ["w1", "g1"]

    def test_derived_fields_override_stored_ones(self):
        entries, _ = merge_entries({"g1": {"id": "other", "type": "website"}}, None)

        assert entries == [{"id": "g1", "type": "game"}]

    def test_empty_collections(self):
        assert merge_entries(None, {}) == ([], {"games": 0, "websites": 0})


class TestRankContributors:
    def test_groups_and_counts(self):
        games = {"g1": {"username": "a"}, "g2": {"username": "a"}}
        websites = {"w1": {"username": "b"}}

        assert rank_contributors(games, websites) == [
            {"username": "a", "entryCount": 2},
            {"username": "b", "entryCount": 1},
        ]

    def test_missing_username_groups_as_unknown(self):
        games = {"g1": {}, "g2": {"username": ""}, "g3": {"username": None}}

        assert rank_contributors(games, None) == [
            {"username": UNKNOWN_CONTRIBUTOR, "entryCount": 3},
        ]

    def test_ties_keep_first_seen_order(self):
        games = {"g1": {"username": "zed"}, "g2": {"username": "amy"}}
        websites = {"w1": {"username": "bob"}}

        ranked = rank_contributors(games, websites)

        assert [c["username"] for c in ranked] == ["zed", "amy", "bob"]

    def test_limit(self):
        games = {f"g{i}": {"username": f"user{i}"} for i in range(15)}

        assert len(rank_contributors(games, None)) == 10
        assert len(rank_contributors(games, None, limit=5)) == 5
        assert len(rank_contributors(games, None, limit=None)) == 15
        assert rank_contributors(games, None, limit=0) == []


class TestStatsSummary:
    def test_empty_store(self):
        assert build_stats_summary({}, {}, {}, now=NOW) == {
            "totalUsers": 0,
            "recentSignups": 0,
            "totalGames": 0,
            "totalWebsites": 0,
            "totalEntries": 0,
            "totalPlaytime": 0,
            "totalPlaytimeFormatted": "0m",
        }

    def test_summary(self):
        users = {
            "u1": {"createdAt": iso(NOW - timedelta(days=1)), "playtime": {"total": {"s1": 3600}}},
            "u2": {"createdAt": iso(NOW - timedelta(days=30)), "playtime": {"total": {"s1": 61}}},
        }
        games = {"g1": {}, "g2": {}}
        websites = {"w1": {}}

        summary = build_stats_summary(users, games, websites, now=NOW)

        assert summary["totalUsers"] == 2
        assert summary["recentSignups"] == 1
        assert summary["totalEntries"] == 3
        assert summary["totalPlaytime"] == 3661
        assert summary["totalPlaytimeFormatted"] == "1h 1m"

    def test_recent_days_is_configurable(self):
        users = {"u1": {"createdAt": iso(NOW - timedelta(days=10))}}

        assert build_stats_summary(users, {}, {}, now=NOW)["recentSignups"] == 0
        assert build_stats_summary(users, {}, {}, now=NOW, recent_days=14)["recentSignups"] == 1


class TestUserListings:
    USERS = {
        "u1": {
            "username": "old",
            "email": "old@example.com",
            "createdAt": "2026-01-01T00:00:00Z",
            "password": "not exposed",
        },
        "u2": {
            "username": "new",
            "createdAt": "2026-10-01T00:00:00Z",
            "lastLoginAt": "2026-10-17T08:00:00Z",
            "playtime": {"total": {"s1": 120, "s2": "oops"}},
        },
        "u3": {"username": "undated"},
    }

    def test_users_newest_first(self):
        users = list_users(self.USERS)

        assert [u["uid"] for u in users] == ["u2", "u1", "u3"]
        assert users[1] == {
            "uid": "u1",
            "username": "old",
            "email": "old@example.com",
            "createdAt": "2026-01-01T00:00:00Z",
            "lastLoginAt": None,
        }

    def test_playtime_newest_first(self):
        rows = list_playtime(self.USERS)

        assert [r["uid"] for r in rows] == ["u2", "u1", "u3"]
        assert rows[0]["playtime"] == {"s1": 120, "s2": 0}
        assert rows[0]["totalPlaytime"] == 120
        assert rows[0]["totalPlaytimeFormatted"] == "2m"
        assert rows[1]["totalPlaytime"] == 0


def test_operations_are_idempotent_and_do_not_mutate_inputs():
    users = {"u1": {"createdAt": iso(NOW), "playtime": {"total": {"a": "5"}}}}
    games = {"g1": {"username": "a", "createdAt": iso(NOW)}}
    websites = {"w1": {}}
    snapshot = copy.deepcopy((users, games, websites))

    for operation in (
        lambda: build_stats_summary(users, games, websites, now=NOW),
        lambda: merge_entries(games, websites),
        lambda: rank_contributors(games, websites),
        lambda: list_users(users),
        lambda: list_playtime(users),
    ):
        assert operation() == operation()

    assert (users, games, websites) == snapshot
