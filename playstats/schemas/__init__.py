"""Pydantic schemas for the stats API."""

from playstats.schemas.stats import (
    ContributorsResponse,
    ContributorSummary,
    EntriesResponse,
    Entry,
    EntryBreakdown,
    ErrorResponse,
    PlaytimeResponse,
    StatsResponse,
    StatsSummary,
    UserPlaytime,
    UsersResponse,
    UserSummary,
)

__all__ = [
    "StatsSummary",
    "StatsResponse",
    "UserSummary",
    "UsersResponse",
    "UserPlaytime",
    "PlaytimeResponse",
    "Entry",
    "EntryBreakdown",
    "EntriesResponse",
    "ContributorSummary",
    "ContributorsResponse",
    "ErrorResponse",
]
