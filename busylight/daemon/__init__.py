"""
Daemon - the long-running busylight process

Components:
    config.py: YAML configuration with frozen-on-first-load fields
    timers.py: Generation-counted timers posting into the event queue
    notifications.py: POSIX signal <-> Notification mapping
    pidfile.py: Single-instance PID file
    runner.py: BusylightDaemon event loop and the serve() entry point

Usage:
    # Start the daemon in the foreground
    busylight run

    # Tell it we're in a muted meeting
    busylight send muted
"""
