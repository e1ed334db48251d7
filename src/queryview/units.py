"""Parsing and formatting of durations, data sizes and counts

Durations are converted to milliseconds and data sizes to bytes so that they
can be compared as plain numbers.
"""

from humanfriendly import (
    InvalidSize,
    InvalidTimespan,
    format_size,
    parse_size,
    parse_timespan,
)

from queryview.exceptions import UnitParseError


def parse_duration(value: str) -> float:
    """Parse a duration such as ``1.50s`` or ``3.20m`` into milliseconds"""
    if not isinstance(value, str) or not value.strip():
        raise UnitParseError(f"Invalid duration {value!r}")
    try:
        return parse_timespan(value.strip()) * 1000.0
    except InvalidTimespan as e:
        raise UnitParseError(str(e)) from e


def parse_data_size(value: str) -> int:
    """Parse a data size such as ``12.5MB`` into bytes

    Prefixes are binary (``1kB`` is 1024 bytes), as used by the coordinator.
    """
    if not isinstance(value, str) or not value.strip():
        raise UnitParseError(f"Invalid data size {value!r}")
    try:
        return parse_size(value.strip(), binary=True)
    except InvalidSize as e:
        raise UnitParseError(str(e)) from e


# Largest unit first; abbreviations understood by parse_duration
DURATION_UNITS = [
    ("d", 86_400_000.0),
    ("h", 3_600_000.0),
    ("m", 60_000.0),
    ("s", 1000.0),
    ("ms", 1.0),
]


def format_duration(milliseconds: float) -> str:
    """Format milliseconds with the largest unit that keeps the value >= 1"""
    if milliseconds < 0:
        return "-"
    for unit, divider in DURATION_UNITS:
        if milliseconds >= divider:
            return f"{milliseconds / divider:.2f}{unit}"
    return f"{milliseconds:.2f}ms"


def format_data_size(size: float) -> str:
    """Format a number of bytes (binary units, e.g. ``1.5 KiB``)"""
    return format_size(size, binary=True)


def format_count(count: float) -> str:
    """Compact count (``999``, ``1.2K``, ``3.4M``)"""
    for unit, divider in (("B", 1e9), ("M", 1e6), ("K", 1e3)):
        if abs(count) >= divider:
            return f"{count / divider:.1f}{unit}"
    return f"{int(count)}"
