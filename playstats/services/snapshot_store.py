"""Snapshot reads from the Firebase Realtime Database REST API."""

import asyncio
import time
from typing import Any

import httpx
import structlog

from playstats.core.config import get_settings
from playstats.core.errors import MalformedInput, StoreUnavailable
from playstats.core.observability import record_store_read

settings = get_settings()
logger = structlog.get_logger()

# Collection paths (read-only from this service's view)
USERS_PATH = "users"
GAMES_PATH = "customEntries/games"
WEBSITES_PATH = "customEntries/websites"


def normalize_snapshot(path: str, payload: Any) -> dict[str, Any]:
    """Turn a raw JSON snapshot into a collection.

    Firebase returns ``null`` for an empty path and an array when every key
    is a sequential integer; both become plain mappings here.

    Raises:
        MalformedInput: The snapshot is a scalar rather than a collection.
    """
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, list):
        return {str(i): item for i, item in enumerate(payload) if item is not None}
    raise MalformedInput(
        f"Snapshot at '{path}' is not a collection (got {type(payload).__name__})",
        path=path,
    )


class FirebaseSnapshotStore:
    """Read-only client for collection snapshots.

    Each ``read`` is one ``GET {database_url}/{path}.json``. Failures are
    raised, never retried.

    Usage:
        store = FirebaseSnapshotStore("https://my-app.firebaseio.com")
        users, games = await store.read_many("users", "customEntries/games")
        await store.close()
    """

    def __init__(
        self,
        database_url: str | None = None,
        auth_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the store client.

        Args:
            database_url: Realtime Database root URL.
                Defaults to settings.firebase_database_url.
            auth_token: Database secret or ID token sent as ``auth``.
                Defaults to settings.firebase_auth_token.
            timeout: Seconds to wait for a read, None to wait indefinitely.
                Defaults to settings.store_timeout.
            transport: Optional httpx transport (used by tests).
        """
        self.database_url = (database_url or settings.firebase_database_url).rstrip("/")
        self._auth_token = auth_token if auth_token is not None else settings.firebase_auth_token
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.store_timeout,
            transport=transport,
        )
        self._reads = 0
        self._failures = 0

    def _url(self, path: str) -> str:
        return f"{self.database_url}/{path.strip('/')}.json"

    async def read(self, path: str) -> dict[str, Any]:
        """Read one collection snapshot.

        Raises:
            StoreUnavailable: The request failed or the database refused it.
            MalformedInput: The response was not a collection.
        """
        if not self.database_url:
            self._record_failure(
                path, "unavailable", time.perf_counter(), "database URL not configured"
            )
            raise StoreUnavailable("Firebase database URL is not configured", path=path)

        params = {"auth": self._auth_token} if self._auth_token else None
        start_time = time.perf_counter()

        try:
            response = await self._client.get(self._url(path), params=params)
        except httpx.HTTPError as e:
            self._record_failure(path, "unavailable", start_time, str(e))
            raise StoreUnavailable(f"Failed to read '{path}': {e}", path=path) from e

        if response.status_code != 200:
            detail = _error_detail(response)
            self._record_failure(path, "unavailable", start_time, detail)
            raise StoreUnavailable(
                f"Failed to read '{path}': {response.status_code} {detail}",
                path=path,
            )

        try:
            payload = response.json()
        except ValueError as e:
            self._record_failure(path, "malformed", start_time, str(e))
            raise MalformedInput(f"Snapshot at '{path}' is not valid JSON", path=path) from e

        try:
            snapshot = normalize_snapshot(path, payload)
        except MalformedInput as e:
            self._record_failure(path, "malformed", start_time, e.message)
            raise

        duration = time.perf_counter() - start_time
        self._reads += 1
        record_store_read(path, "ok", duration)
        logger.debug(
            "Snapshot read",
            path=path,
            records=len(snapshot),
            duration_ms=round(duration * 1000, 2),
        )
        return snapshot

    async def read_many(self, *paths: str) -> list[dict[str, Any]]:
        """Read several collections concurrently.

        Results come back in the order of ``paths`` regardless of which read
        finishes first. The first failure is raised.
        """
        return list(await asyncio.gather(*(self.read(path) for path in paths)))

    def _record_failure(self, path: str, outcome: str, start_time: float, error: str) -> None:
        self._failures += 1
        record_store_read(path, outcome, time.perf_counter() - start_time)
        logger.error("Snapshot read failed", path=path, outcome=outcome, error=error)

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    @property
    def stats(self) -> dict:
        """Get read statistics."""
        return {
            "database_configured": bool(self.database_url),
            "reads": self._reads,
            "failures": self._failures,
        }


def _error_detail(response: httpx.Response) -> str:
    """Extract Firebase's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


# Global store instance
_store: FirebaseSnapshotStore | None = None


async def get_store() -> FirebaseSnapshotStore:
    """Get the global store instance.

    Runs on the event loop, so concurrent first requests share one client.
    """
    global _store
    if _store is None:
        _store = FirebaseSnapshotStore()
        logger.info("Snapshot store initialized", database_url=_store.database_url)
    return _store


async def close_store() -> None:
    """Close the global store instance."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
