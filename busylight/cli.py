#!/usr/bin/env python3
"""
Busylight Command Line Interface

Main entry point for the `busylight` command.

Usage:
    busylight run                   # Run the daemon in the foreground
    busylight send muted            # Deliver a notification to the running daemon
    busylight notifications         # List notification names
    busylight status                # Is the daemon running?
    busylight stop                  # Ask the daemon to shut down
    busylight --version             # Show version
"""

import argparse
import asyncio
import json
import sys

from busylight import __version__


def _pid_file(args):
    from busylight.daemon.config import load_config
    from busylight.daemon.pidfile import PidFile

    config = load_config(args.config)
    return PidFile(config.path("pid_file"))


def cmd_run(args):
    """Run the daemon until it is terminated."""
    from busylight.daemon.runner import serve

    return asyncio.run(serve(args.config))


def cmd_send(args):
    """Send one notification to the running daemon."""
    from busylight.daemon.notifications import send_notification
    from busylight.display.events import Notification
    from busylight.errors import BusylightError

    try:
        notification = Notification.parse(args.notification)
        pid = _pid_file(args).running_pid()
    except BusylightError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if pid is None:
        print("Error: busylightd is not running", file=sys.stderr)
        return 1

    try:
        sig = send_notification(pid, notification)
    except OSError as e:
        print(f"Error: unable to signal PID {pid}: {e}", file=sys.stderr)
        return 1

    print(f"Sent {notification.value} ({sig.name}) to PID {pid}")
    return 0


def cmd_notifications(args):
    """List the notification names accepted by `send`."""
    from busylight.daemon.notifications import NOTIFICATION_SIGNALS
    from busylight.display.events import Notification

    for notification in Notification:
        sig = NOTIFICATION_SIGNALS[notification]
        print(f"  {notification.value:<22} {sig.name:<8} {notification.description}")
    return 0


def cmd_status(args):
    """Report whether the daemon is running."""
    from busylight.errors import BusylightError

    try:
        pid_file = _pid_file(args)
    except BusylightError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    pid = pid_file.running_pid()
    status = {"running": pid is not None, "pid": pid, "pid_file": str(pid_file.path)}
    print(json.dumps(status, indent=2))
    return 0 if pid is not None else 3


def cmd_stop(args):
    """Ask the daemon to shut down."""
    args.notification = "terminate"
    return cmd_send(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="busylight",
        description="Calendar-aware busy light daemon",
    )
    parser.add_argument("--version", action="version", version=f"busylight {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Configuration file (default: $BUSYLIGHT_CONFIG or ~/.busylight/config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the daemon in the foreground")
    run_parser.set_defaults(func=cmd_run)

    send_parser = subparsers.add_parser("send", help="Send a notification to the daemon")
    send_parser.add_argument("notification", help="Notification name (see `busylight notifications`)")
    send_parser.set_defaults(func=cmd_send)

    list_parser = subparsers.add_parser("notifications", help="List notification names")
    list_parser.set_defaults(func=cmd_notifications)

    status_parser = subparsers.add_parser("status", help="Show daemon status")
    status_parser.set_defaults(func=cmd_status)

    stop_parser = subparsers.add_parser("stop", help="Stop the daemon")
    stop_parser.set_defaults(func=cmd_stop)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
