"""Version information for driver-monitor-analytics."""

__version__ = "0.4.0"
__version_date__ = "2026-10-18"

__title__ = "driver_monitor_analytics"
__description__ = "Fatigue and emotion analytics for driver monitoring dashboards"
__url__ = "https://github.com/driver-monitor/driver-monitor-analytics"

__author__ = "Driver Monitor Analytics contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Driver Monitor Analytics contributors"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
