"""
Hardware - light transport and command encoding

Components:
    commands.py: One-character device codes and light patterns
    transport.py: LightTransport interface and the pyserial implementation
"""

DEFAULT_BAUD_RATE = 9600
DEFAULT_WRITE_TIMEOUT = 2.0

__all__ = ["DEFAULT_BAUD_RATE", "DEFAULT_WRITE_TIMEOUT"]
