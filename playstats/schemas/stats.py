"""Pydantic schemas for the stats API responses.

Field names are snake_case in Python and camelCase on the wire; the
dashboard depends on the camelCase names and the ``success`` envelope.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Timestamp = str | int | float | None
Seconds = int | float


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatsSummary(CamelModel):
    """Dashboard summary computed from all three collections."""

    total_users: int = Field(description="Number of user records")
    recent_signups: int = Field(description="Users created in the last 7 days")
    total_games: int = Field(description="Number of custom game entries")
    total_websites: int = Field(description="Number of custom website entries")
    total_entries: int = Field(description="Games plus websites")
    total_playtime: Seconds = Field(description="Total playtime in seconds")
    total_playtime_formatted: str = Field(description="Total playtime, e.g. '3h 12m'")


class StatsResponse(CamelModel):
    """Envelope for the stats summary."""

    success: bool = True
    data: StatsSummary
    timestamp: datetime = Field(description="When the response was generated")


class UserSummary(CamelModel):
    """Public fields of a user record."""

    uid: str
    username: str | None = None
    email: str | None = None
    created_at: Timestamp = None
    last_login_at: Timestamp = None


class UsersResponse(CamelModel):
    """Envelope for the user list, newest first."""

    success: bool = True
    count: int
    data: list[UserSummary]


class UserPlaytime(CamelModel):
    """Playtime breakdown for a single user."""

    uid: str
    username: str | None = None
    created_at: Timestamp = None
    playtime: dict[str, Seconds] = Field(description="Seconds per session/category key")
    total_playtime: Seconds
    total_playtime_formatted: str


class PlaytimeResponse(CamelModel):
    """Envelope for per-user playtime, newest user first."""

    success: bool = True
    data: list[UserPlaytime]


class Entry(CamelModel):
    """A custom game or website entry.

    Stored fields (title, username, category, rating, createdAt, ...) are
    passed through unchanged alongside the derived ``id`` and ``type``.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Key of the record in its collection")
    type: Literal["game", "website"] = Field(description="Source collection")


class EntryBreakdown(CamelModel):
    """Entry counts per type."""

    games: int
    websites: int


class EntriesResponse(CamelModel):
    """Envelope for the merged entry list, newest first."""

    success: bool = True
    count: int
    breakdown: EntryBreakdown
    data: list[Entry]


class ContributorSummary(CamelModel):
    """Number of entries created under one username."""

    username: str
    entry_count: int


class ContributorsResponse(CamelModel):
    """Envelope for the contributor ranking."""

    success: bool = True
    data: list[ContributorSummary]


class ErrorResponse(CamelModel):
    """Envelope returned by every route on failure."""

    success: bool = False
    error: str
