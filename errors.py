"""Exceptions raised by the wind teller collector."""


class WindTellerError(Exception):
    """Base class for per-sentence failures that must never stop the collector"""
    pass


class FramingOverflow(WindTellerError):
    """Raised when the line buffer grows past its bound without a terminator"""

    def __init__(self, size, limit):
        super().__init__(f"line buffer overflow: {size} bytes buffered (limit {limit})")
        self.size = size
        self.limit = limit


class ChecksumMismatch(WindTellerError):
    """Raised when a sentence checksum does not match its content"""

    def __init__(self, line, expected, actual):
        super().__init__(f"NMEA checksum incorrect: expected {expected:02X}, got {actual:02X}")
        self.line = line
        self.expected = expected
        self.actual = actual


class DecodeError(WindTellerError):
    """Raised when a sentence's fields cannot be turned into a sample"""
    pass


class UnknownSpeedUnit(DecodeError):
    def __init__(self, unit):
        super().__init__(f"unrecognized wind speed unit {unit!r}")
        self.unit = unit
