"""Busylight Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - schedule/: Interval merging and the availability scheduler
  - display/: Notifications and the light resolver
  - calendar/: Calendar source base and Google free/busy parsing
  - hardware/: Command encoding and the serial transport
  - daemon/: Config, timers, signals, PID file, event loop and CLI

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/daemon/
"""
