"""Tests for config module."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from driver_monitor_analytics.config import Config


class TestConfigConstants:
    """Tests for static configuration values."""

    def test_storage_dir_value(self) -> None:
        """Verifies storage directory has expected value.

        Business context:
        Operators point backups at this directory. Changing it would
        orphan existing table files.

        Assertion Strategy:
        Validates exact string value match.
        """
        assert Config.STORAGE_DIR == ".driver_monitor"

    def test_window_lengths(self) -> None:
        """Verifies the overview shows a week and detail pages a month."""
        assert Config.OVERVIEW_WINDOW_DAYS == 7
        assert Config.DETAIL_WINDOW_DAYS == 30

    def test_view_limits(self) -> None:
        assert Config.RECENT_EVENTS_PAGE_SIZE == 10
        assert Config.OVERVIEW_RECENT_EVENTS == 5
        assert Config.TOP_EMOTIONS == 5

    def test_month_abbreviations_cover_year(self) -> None:
        """Verifies twelve labels with the fleet's September spelling."""
        assert len(Config.MONTH_ABBREVIATIONS) == 12
        assert Config.MONTH_ABBREVIATIONS[8] == "sept"

    def test_every_table_has_a_key(self) -> None:
        for table in (
            Config.TABLE_DRIVERS,
            Config.TABLE_SESSIONS,
            Config.TABLE_FATIGUE,
            Config.TABLE_EMOTIONS,
            Config.TABLE_INCIDENTS,
        ):
            assert Config.table_key(table) != "id"

    def test_table_key_fallback(self) -> None:
        assert Config.table_key("trips") == "id"

    def test_config_is_frozen(self) -> None:
        """Verifies instances cannot be mutated at runtime."""
        config = Config()
        with pytest.raises(AttributeError):
            config.STORAGE_DIR = "/tmp"  # type: ignore[misc]


class TestEnvironmentSettings:
    """Tests for environment-backed settings and their override priority.

    Business context:
    Deployments configure storage, positive emotions and auth through
    DMA_* variables; tests use overrides instead of touching os.environ.
    """

    def test_storage_dir_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert Config.get_storage_dir() == ".driver_monitor"

    def test_storage_dir_from_env(self) -> None:
        with patch.dict(os.environ, {"DMA_STORAGE_DIR": "/var/lib/dma"}):
            assert Config.get_storage_dir() == "/var/lib/dma"

    def test_override_beats_env(self) -> None:
        """Verifies test overrides take priority over the environment."""
        Config.set_test_overrides(storage_dir="/override")
        with patch.dict(os.environ, {"DMA_STORAGE_DIR": "/var/lib/dma"}):
            assert Config.get_storage_dir() == "/override"

    def test_positive_emotions_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert Config.get_positive_emotions() == frozenset({"alerta", "feliz", "calmado"})

    def test_positive_emotions_from_env_are_normalized(self) -> None:
        """Verifies entries are trimmed, lower-cased and blanks dropped."""
        with patch.dict(os.environ, {"DMA_POSITIVE_EMOTIONS": " Feliz, ,Concentrado "}):
            assert Config.get_positive_emotions() == frozenset({"feliz", "concentrado"})

    def test_blank_positive_emotions_env_falls_back(self) -> None:
        with patch.dict(os.environ, {"DMA_POSITIVE_EMOTIONS": " , "}):
            assert Config.get_positive_emotions() == Config.POSITIVE_EMOTIONS

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("TRUE", True), ("1", False), ("", False)],
    )
    def test_require_auth_env(self, value: str, expected: bool) -> None:
        with patch.dict(os.environ, {"DMA_REQUIRE_AUTH": value}):
            assert Config.is_auth_required() is expected

    def test_auth_state_path(self) -> None:
        """Verifies the path is trimmed, empty by default and overridable."""
        with patch.dict(os.environ, {}, clear=True):
            assert Config.get_auth_state_path() == ""
        with patch.dict(os.environ, {"DMA_AUTH_STATE": " sso.dash:auth "}):
            assert Config.get_auth_state_path() == "sso.dash:auth"
            Config.set_test_overrides(auth_state="conftest:SIGNED_IN_AUTH")
            assert Config.get_auth_state_path() == "conftest:SIGNED_IN_AUTH"

    def test_reset_clears_overrides(self) -> None:
        Config.set_test_overrides(
            storage_dir="/x",
            positive_emotions=frozenset({"triste"}),
            require_auth=True,
            auth_state="x:y",
        )
        Config.reset_test_overrides()
        with patch.dict(os.environ, {}, clear=True):
            assert Config.get_storage_dir() == ".driver_monitor"
            assert Config.is_auth_required() is False
            assert Config.get_auth_state_path() == ""
            assert "feliz" in Config.get_positive_emotions()
