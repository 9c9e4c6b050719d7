"""
Busylight - calendar-aware busy light daemon

Polls calendar free/busy windows and combines them with meeting, mute,
urgency and activity notifications to drive a serial status light.

Components:
    schedule/: Busy period merging and availability scheduling
    display/: Notification events and indicator resolution
    calendar/: Calendar sources (Google free/busy)
    hardware/: Light transport and command encoding
    daemon/: Configuration, timers, PID file and the event loop

Usage:
    busylight run
    busylight send muted
"""

from pathlib import Path

__version__ = "0.3.0"

# Path constants
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_DIR = Path.home() / ".busylight"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"

__all__ = [
    "__version__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
    "ARGS_DIR",
    "CONFIG_DIR",
    "DEFAULT_CONFIG_PATH",
]
