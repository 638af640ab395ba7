import os
import re

from hilicurl import __version__

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
# Longest units first so "ms" is not read as "m" followed by garbage.
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_duration(text: str) -> float:
    """
    Parse a duration such as "150ms", "2s" or "1m30s" into seconds.

    Accepts the units ns, us (or µs), ms, s, m and h, optionally combined and
    with a leading sign. A bare number is taken as seconds.

    Raises:
        ValueError: If the text is not a valid duration.
    """
    value = text.strip()
    if not value:
        raise ValueError("empty duration")
    sign = 1.0
    if value[0] in "+-":
        sign = -1.0 if value[0] == "-" else 1.0
        value = value[1:]
    if _BARE_NUMBER.fullmatch(value):
        return sign * float(value)

    total = 0.0
    pos = 0
    while pos < len(value):
        match = _COMPONENT.match(value, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        total += float(number) * _UNITS[unit]
        pos = match.end()
    return sign * total


class Config:
    """
    Default settings, overridable through environment variables.
    Command-line flags take precedence over every value here.
    """

    INTERVAL = os.environ.get("HILICURL_INTERVAL", "2s")
    TIMEOUT = os.environ.get("HILICURL_TIMEOUT", "60s")
    # How long a shutdown waits for in-flight probes before reporting
    GRACE = os.environ.get("HILICURL_GRACE", "0s")
    # Raw strings; the command line parser converts and validates them
    METRICS_PORT = os.environ.get("HILICURL_METRICS_PORT") or None
    USER_AGENT = os.environ.get("HILICURL_USER_AGENT", f"hilicurl/{__version__}")
