"""
Tool: Light Commands
Purpose: Map indicator states onto the device's single-character commands

The device ignores any byte outside its reserved set, so padding with
whitespace is always safe.

Usage:
    from busylight.hardware.commands import encode

    transport.write(encode(resolve(state)))
"""

from busylight.display.resolver import IndicatorCommand, ResolvedIndicator

COMMAND_CODES: dict[IndicatorCommand, str] = {
    IndicatorCommand.GREEN: "G",
    IndicatorCommand.YELLOW: "Y",
    IndicatorCommand.RED_SOLID: "R",
    IndicatorCommand.RED_FLASHING: "#",
    IndicatorCommand.URGENT_FLASH: "%",
    IndicatorCommand.OFF: "X",
}

LOW_PRIORITY_CODE = "@"

# Colours only used in startup/shutdown patterns
BLUE_CODE = "B"
RED2_CODE = "2"
OFF_CODE = COMMAND_CODES[IndicatorCommand.OFF]

# (code, seconds to hold before the next step)
STARTUP_PATTERN: list[tuple[str, float]] = [
    (BLUE_CODE, 0.1),
    (OFF_CODE, 0.05),
    (BLUE_CODE, 0.1),
    (OFF_CODE, 0),
]

SHUTDOWN_PATTERN: list[tuple[str, float]] = [
    (RED2_CODE, 0.1),
    (OFF_CODE, 0.05),
    (RED2_CODE, 0.1),
    (OFF_CODE, 0),
]


def encode(indicator: ResolvedIndicator) -> bytes:
    """Encode a resolved state as one payload (primary code plus optional overlay)."""
    payload = COMMAND_CODES[indicator.command]
    if indicator.low_priority_overlay:
        payload += LOW_PRIORITY_CODE
    return payload.encode("ascii")


__all__ = [
    "COMMAND_CODES",
    "LOW_PRIORITY_CODE",
    "STARTUP_PATTERN",
    "SHUTDOWN_PATTERN",
    "encode",
]
