"""
Pytest configuration and shared fixtures for Driver Monitor Analytics tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- FlakyStore: EventStore wrapper that fails selected tables
- Seed rows and fixtures for a small fleet with a fixed clock
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

import pytest

from driver_monitor_analytics.auth import StaticAuthState
from driver_monitor_analytics.config import Config
from driver_monitor_analytics.dashboard_service import DashboardService
from driver_monitor_analytics.store import JsonEventStore, QueryFilter, QueryResult

# Fixed "now" for every window computed in tests: 2026-03-10 15:00 UTC.
# Overview window: 4 mar .. 10 mar. Detail window: 9 feb .. 10 mar.
NOW = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)

# Loaded by import path ("conftest:SIGNED_IN_AUTH") in auth tests.
SIGNED_IN_AUTH = StaticAuthState(authenticated=True)


def signed_in_auth_factory() -> StaticAuthState:
    """Factory form of SIGNED_IN_AUTH for DMA_AUTH_STATE tests."""
    return StaticAuthState(authenticated=True)

SEED_DRIVERS: list[dict[str, Any]] = [
    {"driver_id": 1, "driver_name": "Ana Pérez", "driver_email": "ana@fleet.test"},
    {"driver_id": 2, "driver_name": "Luis Gómez", "driver_email": "luis@fleet.test"},
    {"driver_id": 3, "driver_name": "Marta Ruiz", "driver_email": "marta@fleet.test"},
]

SEED_SESSIONS: list[dict[str, Any]] = [
    {"session_id": 10, "driver_id": 1},
    {"session_id": 11, "driver_id": 1},
    {"session_id": 20, "driver_id": 2},
]

SEED_FATIGUE: list[dict[str, Any]] = [
    {
        "event_id": 1,
        "session_id": 10,
        "event_time": "2026-03-10T08:00:00Z",
        "alert_type": "microsleep",
        "eye_closed_seconds": 2.5,
        "alarm_triggered": True,
    },
    {
        "event_id": 2,
        "session_id": 20,
        "event_time": "2026-03-09T22:30:00Z",
        "alert_type": "yawn",
        "eye_closed_seconds": 0.5,
        "alarm_triggered": False,
    },
    {
        "event_id": 3,
        "session_id": 11,
        "event_time": "2026-03-06T10:00:00Z",
        "alert_type": "microsleep",
        "eye_closed_seconds": 3.0,
        "alarm_triggered": True,
    },
    {
        "event_id": 4,
        "session_id": 10,
        "event_time": "2026-02-20T09:00:00Z",
        "alert_type": "eyes_closed",
        "eye_closed_seconds": 1.0,
        "alarm_triggered": False,
    },
]

SEED_EMOTIONS: list[dict[str, Any]] = [
    {"emotion_id": 1, "session_id": 10, "event_time": "2026-03-10T07:00:00Z", "emotion": "feliz"},
    {"emotion_id": 2, "session_id": 20, "event_time": "2026-03-09T12:00:00Z", "emotion": "triste"},
    {"emotion_id": 3, "session_id": 11, "event_time": "2026-03-08T12:00:00Z", "emotion": "feliz"},
    {"emotion_id": 4, "session_id": 20, "event_time": "2026-03-05T12:00:00Z", "emotion": "alerta"},
    {"emotion_id": 5, "session_id": 10, "event_time": "2026-02-01T12:00:00Z", "emotion": "enojado"},
]


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using dictionaries:
    - _files: dict mapping path -> content (str)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Fast test execution
    - Easy to inspect state
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        """
        Check if path exists in mock filesystem.

        Example:
            >>> fs = MockFileSystem()
            >>> fs.set_file('/data/drivers.json', '[]')
            >>> fs.exists('/data/drivers.json')
            True
        """
        return path in self._files or path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            FileExistsError: If path exists and exist_ok is False.
        """
        if path in self._dirs and not exist_ok:
            raise FileExistsError(f"Directory exists: {path}")
        parts = path.split("/")
        for i in range(1, len(parts) + 1):
            partial = "/".join(parts[:i])
            if partial:
                self._dirs.add(partial)

    def read_text(self, path: str, _encoding: str = "utf-8") -> str:
        """
        Read mock file content.

        Raises:
            FileNotFoundError: If path not in _files.
        """
        if path not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        return self._files[path]

    def write_text(self, path: str, content: str, _encoding: str = "utf-8") -> None:
        """
        Write content to mock file.

        Raises:
            PermissionError: If path or its final target is marked read-only.
        """
        target = path.removesuffix(".tmp")
        if path in self._read_only or target in self._read_only:
            raise PermissionError(f"Read-only file: {path}")
        self._files[path] = content

    def rename(self, src: str, dst: str) -> None:
        """
        Move a mock file, replacing dst.

        Raises:
            FileNotFoundError: If src doesn't exist.
        """
        if src not in self._files:
            raise FileNotFoundError(f"No such file: {src}")
        self._files[dst] = self._files.pop(src)

    def get_file(self, path: str) -> str | None:
        """Get file content for test assertions, None if missing."""
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Set file content directly for test setup."""
        self._files[path] = content

    def set_read_only(self, path: str) -> None:
        """Make writes to path raise PermissionError."""
        self._read_only.add(path)

    def list_files(self) -> list[str]:
        """List all file paths, sorted."""
        return sorted(self._files)


class FlakyStore:
    """
    EventStore wrapper whose queries fail for selected tables.

    Lets tests simulate one table being unreachable while the others work,
    and records every query for assertions on fan-out behavior.
    """

    def __init__(self, inner: Any, failing: set[str] | None = None) -> None:
        self.inner = inner
        self.failing = set(failing or ())
        self.calls: list[tuple[str, QueryFilter | None]] = []

    async def query(self, table: str, flt: QueryFilter | None = None) -> QueryResult:
        self.calls.append((table, flt))
        if table in self.failing:
            return QueryResult(error=f"{table} unreachable")
        return await self.inner.query(table, flt)

    async def insert(self, table: str, row: dict[str, Any]) -> QueryResult:
        if table in self.failing:
            return QueryResult(error=f"{table} unreachable")
        return await self.inner.insert(table, row)

    async def update(self, table: str, key: Any, changes: dict[str, Any]) -> QueryResult:
        if table in self.failing:
            return QueryResult(error=f"{table} unreachable")
        return await self.inner.update(table, key, changes)

    async def delete(self, table: str, key: Any) -> QueryResult:
        if table in self.failing:
            return QueryResult(error=f"{table} unreachable")
        return await self.inner.delete(table, key)

    def tables_queried(self) -> list[str]:
        """Table names in query order."""
        return [table for table, _flt in self.calls]


def seed_store(store: JsonEventStore) -> JsonEventStore:
    """Write the seed fleet into every table of a store."""
    store.save_table(Config.TABLE_DRIVERS, copy.deepcopy(SEED_DRIVERS))
    store.save_table(Config.TABLE_SESSIONS, copy.deepcopy(SEED_SESSIONS))
    store.save_table(Config.TABLE_FATIGUE, copy.deepcopy(SEED_FATIGUE))
    store.save_table(Config.TABLE_EMOTIONS, copy.deepcopy(SEED_EMOTIONS))
    return store


@pytest.fixture(autouse=True)
def reset_config() -> Iterator[None]:
    """Clear Config overrides before and after every test."""
    Config.reset_test_overrides()
    yield
    Config.reset_test_overrides()


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """
    Fresh MockFileSystem instance for each test.

    Example:
        >>> def test_store(mock_fs):
        ...     store = JsonEventStore('/data', filesystem=mock_fs)
        ...     assert mock_fs.exists('/data/drivers.json')
    """
    return MockFileSystem()


@pytest.fixture
def store(mock_fs: MockFileSystem) -> JsonEventStore:
    """Empty JsonEventStore on the mock filesystem at /data."""
    return JsonEventStore(storage_dir="/data", filesystem=mock_fs)


@pytest.fixture
def seeded_store(store: JsonEventStore) -> JsonEventStore:
    """JsonEventStore holding the seed fleet (3 drivers, 4 fatigue events, 5 emotions)."""
    return seed_store(store)


@pytest.fixture
def service(seeded_store: JsonEventStore) -> DashboardService:
    """DashboardService over the seed fleet with the clock fixed at NOW."""
    return DashboardService(seeded_store, clock=lambda: NOW)
