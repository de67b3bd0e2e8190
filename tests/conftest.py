"""Shared fixtures: an in-memory snapshot store wired into the app."""

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

from playstats.core.errors import StoreUnavailable
from playstats.core.rate_limit import limiter
from playstats.main import app
from playstats.services import get_store


class FakeSnapshotStore:
    """In-memory stand-in for FirebaseSnapshotStore."""

    database_url = "https://fake.firebaseio.com"

    def __init__(self) -> None:
        self.collections: dict[str, Any] = {}
        self.failures: dict[str, Exception] = {}
        self.reads: list[str] = []

    async def read(self, path: str) -> dict[str, Any]:
        self.reads.append(path)
        await asyncio.sleep(0)
        if path in self.failures:
            raise self.failures[path]
        return self.collections.get(path) or {}

    async def read_many(self, *paths: str) -> list[dict[str, Any]]:
        return list(await asyncio.gather(*(self.read(path) for path in paths)))

    def fail(self, path: str, message: str = "Permission denied") -> None:
        self.failures[path] = StoreUnavailable(f"Failed to read '{path}': 401 {message}", path=path)

    @property
    def stats(self) -> dict:
        return {"database_configured": True, "reads": len(self.reads), "failures": 0}


@pytest.fixture
def store() -> FakeSnapshotStore:
    return FakeSnapshotStore()


@pytest.fixture
def client(store: FakeSnapshotStore):
    app.dependency_overrides[get_store] = lambda: store
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()
