"""Stats API endpoints consumed by the dashboard."""

import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Annotated, Any, TypeVar

import structlog
from fastapi import APIRouter, Depends, Query, Request

from playstats.aggregators import (
    build_stats_summary,
    list_playtime,
    list_users,
    merge_entries,
    rank_contributors,
)
from playstats.core.config import get_settings
from playstats.core.observability import record_aggregation
from playstats.core.rate_limit import RATE_LIMIT_API, limiter
from playstats.schemas import (
    ContributorsResponse,
    EntriesResponse,
    PlaytimeResponse,
    StatsResponse,
    UsersResponse,
)
from playstats.services import (
    GAMES_PATH,
    USERS_PATH,
    WEBSITES_PATH,
    FirebaseSnapshotStore,
    get_store,
)

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["stats"])

StoreDep = Annotated[FirebaseSnapshotStore, Depends(get_store)]

T = TypeVar("T")


def _aggregate(operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run an aggregation and record how long it took."""
    start_time = time.perf_counter()
    result = func(*args, **kwargs)
    record_aggregation(operation, time.perf_counter() - start_time)
    return result


@router.get("/stats", response_model=StatsResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_stats(request: Request, store: StoreDep) -> StatsResponse:
    """Get the overall dashboard summary.

    Reads users, games and websites concurrently and derives counts,
    recent signups and total playtime from them.
    """
    users, games, websites = await store.read_many(USERS_PATH, GAMES_PATH, WEBSITES_PATH)

    now = datetime.now(timezone.utc)
    summary = _aggregate(
        "stats",
        build_stats_summary,
        users,
        games,
        websites,
        now=now,
        recent_days=settings.recent_signup_days,
    )

    logger.info(
        "Stats computed",
        total_users=summary["totalUsers"],
        total_entries=summary["totalEntries"],
    )

    return StatsResponse.model_validate({"data": summary, "timestamp": now})


@router.get("/users", response_model=UsersResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_users(request: Request, store: StoreDep) -> UsersResponse:
    """List all users, newest account first."""
    users = await store.read(USERS_PATH)
    data = _aggregate("users", list_users, users)

    logger.debug("Users listed", count=len(data))

    return UsersResponse.model_validate({"count": len(data), "data": data})


@router.get("/playtime", response_model=PlaytimeResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_playtime(request: Request, store: StoreDep) -> PlaytimeResponse:
    """Get each user's playtime breakdown, newest account first."""
    users = await store.read(USERS_PATH)
    data = _aggregate("playtime", list_playtime, users)

    logger.debug("Playtime listed", count=len(data))

    return PlaytimeResponse.model_validate({"data": data})


@router.get("/entries", response_model=EntriesResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_entries(request: Request, store: StoreDep) -> EntriesResponse:
    """Get every custom game and website entry, newest first."""
    games, websites = await store.read_many(GAMES_PATH, WEBSITES_PATH)
    entries, breakdown = _aggregate("entries", merge_entries, games, websites)

    logger.debug("Entries merged", count=len(entries), **breakdown)

    return EntriesResponse.model_validate({
        "count": len(entries),
        "breakdown": breakdown,
        "data": entries,
    })


@router.get("/top-contributors", response_model=ContributorsResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_top_contributors(
    request: Request,
    store: StoreDep,
    limit: Annotated[
        int,
        Query(ge=1, le=10, description="Max contributors to return"),
    ] = settings.top_contributors_limit,
) -> ContributorsResponse:
    """Rank usernames by how many entries they created."""
    games, websites = await store.read_many(GAMES_PATH, WEBSITES_PATH)
    data = _aggregate("contributors", rank_contributors, games, websites, limit=limit)

    logger.debug("Contributors ranked", count=len(data), limit=limit)

    return ContributorsResponse.model_validate({"data": data})
