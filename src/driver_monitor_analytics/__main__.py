"""
Package entry point for python -m execution.

USAGE:
    python -m driver_monitor_analytics dashboard  # Launch web dashboard
    python -m driver_monitor_analytics report     # Print analytics report
    python -m driver_monitor_analytics drivers    # List drivers
"""

import sys

from driver_monitor_analytics.cli import main

if __name__ == "__main__":
    sys.exit(main())
