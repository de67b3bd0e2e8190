"""Derived statistics over user and custom entry snapshots.

Every function here is pure: it reads the snapshots it is given and returns
new values. Inputs are never mutated, so calling an operation twice on the
same snapshot yields identical output.

Snapshots are collections as read from the store: a mapping from record key
to record. Records are expected to be mappings too; anything else is treated
as an empty record rather than failing the computation.
"""

import math
import sys
from collections import Counter
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

UNKNOWN_CONTRIBUTOR = "Unknown"
DEFAULT_RECENT_DAYS = 7
DEFAULT_TOP_CONTRIBUTORS = 10

Collection = Mapping[str, Any]


def _records(collection: Collection | None) -> list[tuple[str, Mapping[str, Any]]]:
    """Return ``(key, record)`` pairs in snapshot order."""
    if not collection:
        return []
    return [
        (key, record if isinstance(record, Mapping) else {})
        for key, record in collection.items()
    ]


def _text(value: Any) -> str | None:
    """Coerce a stored scalar to a display string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _timestamp_value(value: Any) -> str | int | float | None:
    """Pass a stored timestamp through, dropping values no client can parse."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return value
    return None


def _seconds(value: Any) -> int | float:
    """Coerce a playtime value to seconds; non-numeric values count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0
        if not math.isfinite(number):
            return 0
        return int(number) if number.is_integer() else number
    return 0


def _as_number(total: int | float) -> int | float:
    if isinstance(total, float) and total.is_integer():
        return int(total)
    return total


def _bounded(total: int | float) -> int | float:
    """Clamp a total to the finite float range; NaN counts as 0."""
    if isinstance(total, float) and math.isnan(total):
        return 0
    return max(min(total, sys.float_info.max), -sys.float_info.max)


def parse_timestamp(value: Any) -> float | None:
    """Parse a stored timestamp to epoch milliseconds.

    ISO-8601 strings are parsed with their offset (naive strings are UTC);
    numbers are already epoch milliseconds. Returns None for anything that
    cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            millis = float(value)
        except OverflowError:
            return None
        return millis if math.isfinite(millis) else None
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


def _sort_key(record: Mapping[str, Any]) -> float:
    # Missing or unparseable dates sort as the epoch
    return parse_timestamp(record.get("createdAt")) or 0.0


def count(collection: Collection | None) -> int:
    """Count the top-level keys of a collection."""
    return len(collection) if collection else 0


def count_recent(users: Collection | None, window_start: datetime) -> int:
    """Count users created strictly after ``window_start``."""
    threshold = window_start.timestamp() * 1000
    recent = 0
    for _, user in _records(users):
        created_at = parse_timestamp(user.get("createdAt"))
        if created_at is not None and created_at > threshold:
            recent += 1
    return recent


def recent_window_start(now: datetime, days: int = DEFAULT_RECENT_DAYS) -> datetime:
    """Start of the trailing signup window ending at ``now``."""
    return now - timedelta(days=days)


def user_playtime(user: Mapping[str, Any]) -> dict[str, int | float]:
    """Return a user's ``playtime.total`` mapping with values coerced to seconds."""
    playtime = user.get("playtime")
    if not isinstance(playtime, Mapping):
        return {}
    totals = playtime.get("total")
    if isinstance(totals, list):
        totals = {str(i): v for i, v in enumerate(totals) if v is not None}
    if not isinstance(totals, Mapping):
        return {}
    return {str(key): _seconds(value) for key, value in totals.items()}


def _add_seconds(values) -> int | float:
    """Sum seconds without leaving the finite float range."""
    total: int | float = 0
    for seconds in values:
        try:
            total = _bounded(total + seconds)
        except OverflowError:
            # An integer too large for a float met a float operand
            larger = total if abs(total) > abs(seconds) else seconds
            total = _bounded(math.inf if larger > 0 else -math.inf)
    return _as_number(total)


def sum_playtime(users: Collection | None) -> int | float:
    """Total seconds played across every user."""
    return _add_seconds(
        seconds for _, user in _records(users) for seconds in user_playtime(user).values()
    )


def format_duration(total_seconds: int | float) -> str:
    """Format seconds as ``"{h}h {m}m"``, or ``"{m}m"`` under an hour.

    Leftover seconds are truncated, not rounded.
    """
    seconds = max(_bounded(total_seconds), 0)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def merge_entries(
    games: Collection | None,
    websites: Collection | None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    """Union games and websites into one newest-first list.

    Each entry is a copy of the stored record tagged with its collection key
    as ``id`` and its source as ``type``. The sort is stable, so entries with
    equal (or missing) dates keep games-before-websites order.

    Returns:
        The merged entries and a ``{"games": n, "websites": n}`` breakdown.
    """
    merged = [
        {**record, "id": key, "type": "game"} for key, record in _records(games)
    ] + [
        {**record, "id": key, "type": "website"} for key, record in _records(websites)
    ]
    merged.sort(key=_sort_key, reverse=True)

    breakdown = {"games": count(games), "websites": count(websites)}
    return merged, breakdown


def contributor_label(entry: Mapping[str, Any]) -> str:
    """Group label for an entry's creator."""
    return _text(entry.get("username")) or UNKNOWN_CONTRIBUTOR


def rank_contributors(
    games: Collection | None,
    websites: Collection | None,
    limit: int | None = DEFAULT_TOP_CONTRIBUTORS,
) -> list[dict[str, Any]]:
    """Rank entry creators by how many entries they made.

    Usernames are grouped as raw strings with no lookup against the user
    collection. Equal counts keep first-seen order, games before websites.
    """
    counts = Counter(
        contributor_label(entry)
        for _, entry in _records(games) + _records(websites)
    )
    if limit is not None and limit <= 0:
        return []
    return [
        {"username": username, "entryCount": entry_count}
        for username, entry_count in counts.most_common(limit)
    ]


def build_stats_summary(
    users: Collection | None,
    games: Collection | None,
    websites: Collection | None,
    now: datetime | None = None,
    recent_days: int = DEFAULT_RECENT_DAYS,
) -> dict[str, Any]:
    """Compute the dashboard summary from the three collections."""
    now = now or datetime.now(timezone.utc)
    total_games = count(games)
    total_websites = count(websites)
    total_playtime = sum_playtime(users)

    return {
        "totalUsers": count(users),
        "recentSignups": count_recent(users, recent_window_start(now, recent_days)),
        "totalGames": total_games,
        "totalWebsites": total_websites,
        "totalEntries": total_games + total_websites,
        "totalPlaytime": total_playtime,
        "totalPlaytimeFormatted": format_duration(total_playtime),
    }


def list_users(users: Collection | None) -> list[dict[str, Any]]:
    """User summaries, newest account first."""
    summaries = [
        {
            "uid": uid,
            "username": _text(user.get("username")),
            "email": _text(user.get("email")),
            "createdAt": _timestamp_value(user.get("createdAt")),
            "lastLoginAt": _timestamp_value(user.get("lastLoginAt")),
        }
        for uid, user in _records(users)
    ]
    summaries.sort(key=_sort_key, reverse=True)
    return summaries


def list_playtime(users: Collection | None) -> list[dict[str, Any]]:
    """Per-user playtime breakdowns, newest account first."""
    rows = []
    for uid, user in _records(users):
        playtime = user_playtime(user)
        total = _add_seconds(playtime.values())
        rows.append({
            "uid": uid,
            "username": _text(user.get("username")),
            "createdAt": _timestamp_value(user.get("createdAt")),
            "playtime": playtime,
            "totalPlaytime": total,
            "totalPlaytimeFormatted": format_duration(total),
        })
    rows.sort(key=_sort_key, reverse=True)
    return rows
