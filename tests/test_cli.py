"""Tests for CLI module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from driver_monitor_analytics.cli import (
    EXIT_FAILED,
    EXIT_INVALID,
    EXIT_OK,
    main,
    run_dashboard,
    run_drivers,
    run_recent,
    run_report,
)
from driver_monitor_analytics.config import Config
from driver_monitor_analytics.dashboard_service import DashboardService
from driver_monitor_analytics.store import JsonEventStore

from conftest import NOW, FlakyStore


def _failing_service(store: JsonEventStore, table: str) -> DashboardService:
    return DashboardService(FlakyStore(store, failing={table}), clock=lambda: NOW)


class TestRunReport:
    """Tests for run_report.

    Business context:
    The report is piped into emails; stdout must hold only the report and
    the exit code must say whether the numbers are complete.
    """

    def test_prints_report(
        self, service: DashboardService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_report("2026-03-04", "2026-03-10", service=service) == EXIT_OK
        out = capsys.readouterr().out
        assert "DRIVER MONITOR - ANALYTICS REPORT" in out
        assert "Registered drivers: 3" in out

    def test_query_failure_exits_1(
        self, seeded_store: JsonEventStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        service = _failing_service(seeded_store, Config.TABLE_FATIGUE)
        assert run_report(service=service) == EXIT_FAILED
        assert capsys.readouterr().out == ""


class TestRunDrivers:
    """Tests for run_drivers."""

    def test_lists_matches(
        self, service: DashboardService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_drivers("ana", service=service) == EXIT_OK
        out = capsys.readouterr().out
        assert "Ana Pérez" in out
        assert "Luis Gómez" not in out
        assert "1 of 3 drivers" in out

    def test_failure(self, seeded_store: JsonEventStore) -> None:
        service = _failing_service(seeded_store, Config.TABLE_DRIVERS)
        assert run_drivers(service=service) == EXIT_FAILED


class TestRunRecent:
    """Tests for run_recent."""

    def test_prints_rows_and_page_label(
        self, service: DashboardService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_recent(service=service) == EXIT_OK
        out = capsys.readouterr().out
        assert "10 mar 08:00" in out
        assert "alarm: Sí" in out
        assert "Página 1 de 1" in out

    def test_out_of_range_page_is_clamped(
        self, service: DashboardService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_recent(page=99, service=service) == EXIT_OK
        assert "Página 1 de 1" in capsys.readouterr().out

    def test_failure(self, seeded_store: JsonEventStore) -> None:
        service = _failing_service(seeded_store, Config.TABLE_FATIGUE)
        assert run_recent(service=service) == EXIT_FAILED


class TestMain:
    """Tests for main() argument parsing and dispatch."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == EXIT_FAILED
        assert "driver-monitor" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "driver-monitor" in capsys.readouterr().out

    def test_dashboard_command(self) -> None:
        with patch("driver_monitor_analytics.cli.run_dashboard") as mock_run:
            assert main(["dashboard", "--host", "0.0.0.0", "--port", "9000"]) == EXIT_OK
        mock_run.assert_called_once_with(host="0.0.0.0", port=9000)

    def test_report_command_uses_dates(self, service: DashboardService) -> None:
        with patch("driver_monitor_analytics.cli._default_service", return_value=service):
            assert main(["report", "--start", "2026-03-01", "--end", "2026-03-07"]) == EXIT_OK

    def test_invalid_date_exits_2(self, service: DashboardService) -> None:
        """Verifies malformed input is distinguished from a failed query."""
        with patch("driver_monitor_analytics.cli._default_service", return_value=service):
            assert main(["report", "--start", "03/01/2026"]) == EXIT_INVALID
            assert main(["recent", "--end", "ayer"]) == EXIT_INVALID

    def test_reversed_range_exits_2(self, service: DashboardService) -> None:
        with patch("driver_monitor_analytics.cli._default_service", return_value=service):
            assert main(["report", "--start", "2026-03-09", "--end", "2026-03-01"]) == EXIT_INVALID

    def test_drivers_and_recent_commands(
        self, service: DashboardService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("driver_monitor_analytics.cli._default_service", return_value=service):
            assert main(["drivers", "--search", "marta"]) == EXIT_OK
            assert main(["recent", "--page", "2"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Marta Ruiz" in out


class TestRunDashboard:
    """Tests for the dashboard launcher."""

    def test_delegates_to_web(self) -> None:
        with patch("driver_monitor_analytics.web.run_dashboard") as mock_start:
            run_dashboard(host="127.0.0.1", port=8123)
        mock_start.assert_called_once_with(host="127.0.0.1", port=8123)
