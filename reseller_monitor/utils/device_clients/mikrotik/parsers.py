# reseller_monitor/utils/device_clients/mikrotik/parsers.py
"""
Centralized parsing utilities for MikroTik data.

These functions convert RouterOS-formatted strings into Python-native types.
They are best-effort normalizers: bad input yields 0, never an exception.
"""

import math
import re
from typing import Any, Optional

_UPTIME_UNITS = {
    "w": 7 * 24 * 3600,
    "d": 24 * 3600,
    "h": 3600,
    "m": 60,
    "s": 1,
}

_RATE_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)([kmg]?)bps$", re.IGNORECASE)
_RATE_MULTIPLIERS = {"": 1, "k": 1_000, "m": 1_000_000, "g": 1_000_000_000}


def parse_uptime(uptime_str: Optional[str]) -> int:
    """
    Parse RouterOS uptime string to seconds.

    Zero-valued units are omitted by RouterOS and the order of the
    tokens does not matter.

    Examples:
        "1w2d3h4m5s" -> 788645
        "5d10h" -> 468000
        "3h1w" -> 615600
        "" -> 0
    """
    if not uptime_str or not isinstance(uptime_str, str):
        return 0

    seconds = 0
    for unit, factor in _UPTIME_UNITS.items():
        # "m" must not be confused with the "m" of "ms"
        match = re.search(rf"(\d+){unit}(?!s)" if unit == "m" else rf"(\d+){unit}", uptime_str)
        if match:
            seconds += int(match.group(1)) * factor
    return seconds


def parse_rate_bps(rate_str: Optional[str]) -> int:
    """
    Parse a RouterOS rate string to bits per second.

    Examples:
        "10Mbps" -> 10000000
        "1.5kbps" -> 1500
        "500bps" -> 500
        "10MBPS" -> 10000000
        "bogus" -> 0
    """
    if not rate_str or not isinstance(rate_str, str):
        return 0
    match = _RATE_RE.match(rate_str.strip())
    if not match:
        return 0
    value = float(match.group(1)) * _RATE_MULTIPLIERS[match.group(2).lower()]
    # Half-up, "2.5bps" -> 3
    return int(math.floor(value + 0.5))


def parse_counter(value: Any) -> int:
    """
    Safely parse a byte counter ("tx-byte", "rx-byte").

    Returns 0 when the value is missing or not an integer.
    """
    if value is None:
        return 0
    try:
        return max(int(value), 0)
    except (ValueError, TypeError):
        return 0
