"""
Tool: Light Transport
Purpose: Byte channel to the light hardware

Implements the LightTransport interface over a serial port using pyserial.
When no device path is configured, the port is found by scanning a directory
for the first entry whose name matches a regular expression and that opens
successfully (USB serial devices often get a new name on every plug-in).

Usage:
    from busylight.hardware.transport import SerialLightTransport, play_pattern

    transport = SerialLightTransport(device_dir="/dev", device_regexp=r"^cu\\.usbmodem")
    transport.open()
    await play_pattern(transport, STARTUP_PATTERN)

Dependencies:
    - pyserial (pip install pyserial)
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

import serial

from busylight.errors import TransportError
from busylight.hardware import DEFAULT_BAUD_RATE, DEFAULT_WRITE_TIMEOUT

logger = logging.getLogger(__name__)


class LightTransport(ABC):
    """Abstract byte channel to the light."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    def open(self) -> None:
        """
        Open the channel.

        Raises:
            TransportError: the device could not be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Send raw command bytes.

        Raises:
            TransportError: the write failed or timed out
        """
        pass


class SerialLightTransport(LightTransport):
    """Light attached to a serial port."""

    def __init__(
        self,
        device: str = "",
        device_dir: str = "",
        device_regexp: str = "",
        baud_rate: int = DEFAULT_BAUD_RATE,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ):
        self.device = device
        self.device_dir = device_dir
        self.device_regexp = device_regexp
        self.baud_rate = baud_rate
        self.write_timeout = write_timeout

        self._port: serial.Serial | None = None
        self.port_name: str | None = None

    @property
    def is_open(self) -> bool:
        return self._port is not None and self._port.is_open

    def _open_port(self, path: str) -> serial.Serial:
        return serial.Serial(port=path, baudrate=self.baud_rate, write_timeout=self.write_timeout)

    def candidate_ports(self) -> list[Path]:
        """List files in `device_dir` whose names match `device_regexp`, sorted by name."""
        directory = Path(self.device_dir)
        try:
            pattern = re.compile(self.device_regexp)
        except re.error as e:
            raise TransportError(f"Invalid device pattern /{self.device_regexp}/: {e}") from e

        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise TransportError(f"Can't scan directory {directory}: {e}") from e

        return [entry for entry in entries if not entry.is_dir() and pattern.search(entry.name)]

    def open(self) -> None:
        if self.is_open:
            self.close()

        if self.device:
            try:
                self._port = self._open_port(self.device)
            except (serial.SerialException, OSError) as e:
                raise TransportError(f"Can't open serial device {self.device}: {e}") from e
            self.port_name = self.device
            logger.info(f"Opened {self.device}")
            return

        logger.info(f"Searching for available device port in {self.device_dir}...")
        for candidate in self.candidate_ports():
            try:
                self._port = self._open_port(str(candidate))
            except (serial.SerialException, OSError) as e:
                logger.debug(f"Skipping {candidate}: {e}")
                continue
            self.port_name = str(candidate)
            logger.info(f"Opened {candidate}")
            return

        raise TransportError(
            f"Unable to open any device matching /{self.device_regexp}/ in {self.device_dir}"
        )

    def close(self) -> None:
        if self._port is not None:
            logger.info(f"Closing serial port {self.port_name}")
            try:
                self._port.close()
            except (serial.SerialException, OSError) as e:
                logger.warning(f"Error closing serial port {self.port_name}: {e}")
        self._port = None
        self.port_name = None

    def write(self, data: bytes) -> None:
        if not self.is_open:
            raise TransportError("Serial port is not open")
        try:
            self._port.write(data)
            self._port.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Write to {self.port_name} failed: {e}") from e


async def play_pattern(transport: LightTransport, steps: list[tuple[str, float]]) -> None:
    """Write each code in turn, pausing for its hold time. No-op when the transport is closed."""
    if not transport.is_open:
        return
    for code, hold in steps:
        transport.write(code.encode("ascii"))
        if hold > 0:
            await asyncio.sleep(hold)


__all__ = ["LightTransport", "SerialLightTransport", "play_pattern"]
