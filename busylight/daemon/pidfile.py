"""
Tool: PID File
Purpose: Single-instance enforcement and daemon lookup for the CLI

Usage:
    pid_file = PidFile(config.path("pid_file"))
    pid_file.acquire()
    ...
    pid_file.release()
"""

import logging
import os
from pathlib import Path

from busylight.errors import PidFileError

logger = logging.getLogger(__name__)


class PidFile:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._owned = False

    def read(self) -> int | None:
        """Return the PID recorded in the file, or None if there is none."""
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                return int(f.read().strip())
        except (OSError, ValueError):
            return None

    def running_pid(self) -> int | None:
        """Return the recorded PID if that process is still alive."""
        pid = self.read()
        if pid is None:
            return None
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return None
        except PermissionError:
            # Exists but belongs to someone else
            return pid
        return pid

    def acquire(self) -> None:
        """
        Create the PID file for this process.

        A file left behind by a process that no longer exists is replaced.

        Raises:
            PidFileError: another instance is running or the file can't be written
        """
        running = self.running_pid()
        if running is not None and running != os.getpid():
            raise PidFileError(f"busylightd already running (PID {running}, {self.path})")
        if self.path.exists():
            logger.warning(f"Removing stale PID file {self.path}")
            self.path.unlink(missing_ok=True)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except OSError as e:
            raise PidFileError(f"Error creating PID file {self.path} (is another busylightd running?): {e}") from e
        with os.fdopen(fd, "w") as f:
            f.write(f"{os.getpid()}\n")
        self._owned = True

    def release(self) -> None:
        if not self._owned:
            return
        try:
            self.path.unlink()
        except OSError as e:
            logger.error(f"Error removing PID file: {e}")
        self._owned = False


__all__ = ["PidFile"]
