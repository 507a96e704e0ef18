"""
Configuration for Driver Monitor Analytics.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: Directory and table file names for the JSON event store
- Windows: Default lookback lengths for day series
- Views: Page sizes and top-N limits used by dashboard views
- Emotions: Positive emotion set used for the positive share statistic
- Labels: Short month names for day labels

ENVIRONMENT VARIABLES:
- DMA_STORAGE_DIR: Directory holding table files (default: .driver_monitor)
- DMA_POSITIVE_EMOTIONS: Comma separated positive emotions (default: alerta,feliz,calmado)
- DMA_REQUIRE_AUTH: "true" to reject unauthenticated web requests (default: disabled)
- DMA_AUTH_STATE: "module:attribute" of the AuthState (or factory) the dashboard uses

USAGE:
    from driver_monitor_analytics.config import Config
    window = Config.DETAIL_WINDOW_DAYS
    positives = Config.get_positive_emotions()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Driver Monitor Analytics.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    STORAGE STRUCTURE:
        .driver_monitor/
        ├── drivers.json           # [{driver_id, driver_name, ...}]
        ├── driver_sessions.json   # [{session_id, driver_id}]
        ├── fatigue_events.json    # [{event_id, session_id, event_time, ...}]
        ├── emotions.json          # [{emotion_id, session_id, event_time, emotion}]
        └── incident_reports.json  # [{report_id, driver_id, ...}]
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".driver_monitor"

    TABLE_DRIVERS: ClassVar[str] = "drivers"
    TABLE_SESSIONS: ClassVar[str] = "driver_sessions"
    TABLE_FATIGUE: ClassVar[str] = "fatigue_events"
    TABLE_EMOTIONS: ClassVar[str] = "emotions"
    TABLE_INCIDENTS: ClassVar[str] = "incident_reports"

    TABLE_KEYS: ClassVar[dict[str, str]] = {
        "drivers": "driver_id",
        "driver_sessions": "session_id",
        "fatigue_events": "event_id",
        "emotions": "emotion_id",
        "incident_reports": "report_id",
    }
    """Primary key column per table. Inserts assign max(key) + 1."""

    # =========================================================================
    # DAY WINDOWS
    # =========================================================================
    OVERVIEW_WINDOW_DAYS: ClassVar[int] = 7
    DETAIL_WINDOW_DAYS: ClassVar[int] = 30
    MS_PER_DAY: ClassVar[int] = 86_400_000

    # =========================================================================
    # VIEW LIMITS
    # =========================================================================
    RECENT_EVENTS_PAGE_SIZE: ClassVar[int] = 10
    OVERVIEW_RECENT_EVENTS: ClassVar[int] = 5
    TOP_EMOTIONS: ClassVar[int] = 5
    MEAN_DECIMALS: ClassVar[int] = 1
    NO_EMOTION_LABEL: ClassVar[str] = "Ninguna"

    # =========================================================================
    # EMOTIONS
    # =========================================================================
    POSITIVE_EMOTIONS: ClassVar[frozenset[str]] = frozenset(
        {
            "alerta",
            "feliz",
            "calmado",
        }
    )
    """
    Emotions counted as favorable for the positive share percentage.
    Compared case-insensitively against observed labels.
    """

    # =========================================================================
    # DAY LABELS
    # =========================================================================
    MONTH_ABBREVIATIONS: ClassVar[tuple[str, ...]] = (
        "ene",
        "feb",
        "mar",
        "abr",
        "may",
        "jun",
        "jul",
        "ago",
        "sept",
        "oct",
        "nov",
        "dic",
    )

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _storage_dir_override: ClassVar[str | None] = None
    _positive_emotions_override: ClassVar[frozenset[str] | None] = None
    _require_auth_override: ClassVar[bool | None] = None
    _auth_state_override: ClassVar[str | None] = None

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding the event store table files.

        Priority: test override, then DMA_STORAGE_DIR, then STORAGE_DIR.

        Returns:
            Directory path string.

        Example:
            >>> Config.get_storage_dir()
            '.driver_monitor'
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("DMA_STORAGE_DIR", cls.STORAGE_DIR)

    @classmethod
    def get_positive_emotions(cls) -> frozenset[str]:
        """
        Get the configured positive emotion set.

        Uses a priority system: test overrides first, then the
        DMA_POSITIVE_EMOTIONS environment variable (comma separated), then
        the POSITIVE_EMOTIONS default. Entries are trimmed and lower-cased;
        blank entries are ignored. An environment value with no usable
        entries falls back to the default.

        Business context: Fleets classify emotions differently. Operators
        that treat "concentrado" as favorable can add it without a code
        change, and the dashboard's positive share follows.

        Returns:
            Frozenset of lower-cased emotion labels.

        Example:
            >>> # With env var: DMA_POSITIVE_EMOTIONS="feliz, Concentrado"
            >>> sorted(Config.get_positive_emotions())
            ['concentrado', 'feliz']
        """
        if cls._positive_emotions_override is not None:
            return cls._positive_emotions_override
        raw = os.environ.get("DMA_POSITIVE_EMOTIONS", "")
        parsed = frozenset(part.strip().lower() for part in raw.split(",") if part.strip())
        return parsed or cls.POSITIVE_EMOTIONS

    @classmethod
    def is_auth_required(cls) -> bool:
        """
        Check whether the web layer must reject unauthenticated requests.

        Returns:
            True if DMA_REQUIRE_AUTH is "true" (or a test override says so).
        """
        if cls._require_auth_override is not None:
            return cls._require_auth_override
        return os.environ.get("DMA_REQUIRE_AUTH", "").lower() == "true"

    @classmethod
    def get_auth_state_path(cls) -> str:
        """
        Import path of the deployment's AuthState.

        Priority: test override, then DMA_AUTH_STATE. Empty when unset, in
        which case the dashboard falls back to StaticAuthState.

        Example:
            >>> # With env var: DMA_AUTH_STATE="fleet_sso.dashboard:auth_state"
            >>> Config.get_auth_state_path()
            'fleet_sso.dashboard:auth_state'
        """
        if cls._auth_state_override is not None:
            return cls._auth_state_override
        return os.environ.get("DMA_AUTH_STATE", "").strip()

    @classmethod
    def set_test_overrides(
        cls,
        storage_dir: str | None = None,
        positive_emotions: frozenset[str] | None = None,
        require_auth: bool | None = None,
        auth_state: str | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Allows tests to control environment-backed settings without
        touching os.environ. Must call reset_test_overrides() in teardown
        to avoid affecting other tests.

        Args:
            storage_dir: Override for the storage directory. None to clear.
            positive_emotions: Override for the positive emotion set. None to clear.
            require_auth: Override for the auth requirement flag. None to clear.
            auth_state: Override for the AuthState import path. None to clear.

        Example:
            >>> Config.set_test_overrides(require_auth=True)
            >>> Config.is_auth_required()
            True
            >>> Config.reset_test_overrides()
        """
        cls._storage_dir_override = storage_dir
        cls._positive_emotions_override = positive_emotions
        cls._require_auth_override = require_auth
        cls._auth_state_override = auth_state

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides so settings come from the environment again."""
        cls._storage_dir_override = None
        cls._positive_emotions_override = None
        cls._require_auth_override = None
        cls._auth_state_override = None

    @classmethod
    def table_key(cls, table: str) -> str:
        """
        Get the primary key column for a table.

        Args:
            table: Logical table name, e.g. 'fatigue_events'.

        Returns:
            Key column name. Unknown tables fall back to 'id'.

        Example:
            >>> Config.table_key('emotions')
            'emotion_id'
        """
        return cls.TABLE_KEYS.get(table, "id")
