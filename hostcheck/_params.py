"""Parameter validation for check variants.

Checks are configured with raw strings. These helpers verify the number
of parameters and convert each one to its semantic type, raising
ArityError or ParameterTypeError on bad input. Nothing here touches the
network or the filesystem.

Example:
-------
    >>> from hostcheck import _params
    >>> _params.check_arity("TCPTimeout", 2, ["eff.org:80", "5s"])
    ('eff.org:80', '5s')
    >>> _params.parse_duration("1m30s")
    90.0
    >>> _params.parse_port("80000")
    Traceback (most recent call last):
    ...
    hostcheck.errors.ParameterTypeError: '80000' is not a valid uint16

"""

from __future__ import annotations

import ipaddress
import re
from typing import Sequence
from urllib.parse import urlsplit

from hostcheck.errors import ArityError, ParameterTypeError

# ── Arity ──────────────────────────────────────────────────────────────────


def check_arity(check_id: str, expected: int, params: Sequence[str]) -> tuple[str, ...]:
    """Verify that exactly ``expected`` parameters were supplied."""
    if len(params) != expected:
        raise ArityError(check_id, expected, params)
    return tuple(params)


# ── Numbers ────────────────────────────────────────────────────────────────

_DIGITS = re.compile(r"[0-9]+")

MAX_PORT = 65535
MAX_INT16 = 32767


def parse_port(value: str) -> int:
    """Parse a decimal port number (uint16)."""
    if not _DIGITS.fullmatch(value) or int(value) > MAX_PORT:
        raise ParameterTypeError(value, "uint16")
    return int(value)


# Celsius glyphs accepted after the number: C, c, U+00B0, U+2103
CELSIUS_GLYPHS = ("C", "c", "°", "℃")


def parse_temperature(value: str) -> int:
    """Parse a non-negative int16 temperature such as ``100``, ``98°C`` or ``100℃``."""
    stripped = value
    for glyph in CELSIUS_GLYPHS:
        stripped = stripped.replace(glyph, "")
    if not _DIGITS.fullmatch(stripped) or int(stripped) > MAX_INT16:
        raise ParameterTypeError(value, "non-negative int16 temperature")
    return int(stripped)


# ── Addresses ──────────────────────────────────────────────────────────────


def parse_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Parse an IPv4 or IPv6 address."""
    try:
        return ipaddress.ip_address(value)
    except ValueError as exc:
        raise ParameterTypeError(value, "IP address", cause=exc) from exc


def parse_ipv4(value: str) -> ipaddress.IPv4Address:
    try:
        return ipaddress.IPv4Address(value)
    except ValueError as exc:
        raise ParameterTypeError(value, "IPv4 address", cause=exc) from exc


def parse_ipv6(value: str) -> ipaddress.IPv6Address:
    try:
        return ipaddress.IPv6Address(value)
    except ValueError as exc:
        raise ParameterTypeError(value, "IPv6 address", cause=exc) from exc


DEFAULT_PORT = 80


def parse_host_port(value: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts, defaulting the port to 80.

    IPv6 literals must be bracketed when a port is given (``[::1]:22``);
    a bare IPv6 literal gets the default port.

    Example:
    -------
        >>> parse_host_port("eff.org:443")
        ('eff.org', 443)
        >>> parse_host_port("eff.org")
        ('eff.org', 80)
        >>> parse_host_port("[::1]:22")
        ('::1', 22)

    """
    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep or not host:
            raise ParameterTypeError(value, "host:port address")
        if not rest:
            return host, DEFAULT_PORT
        if not rest.startswith(":"):
            raise ParameterTypeError(value, "host:port address")
        port_str = rest[1:]
    elif value.count(":") > 1:
        # bare IPv6 literal, no room for a port
        try:
            ipaddress.IPv6Address(value)
        except ValueError as exc:
            raise ParameterTypeError(value, "host:port address", cause=exc) from exc
        return value, DEFAULT_PORT
    elif ":" in value:
        host, _, port_str = value.partition(":")
    else:
        host, port_str = value, ""

    if not host or any(ch.isspace() for ch in host):
        raise ParameterTypeError(value, "host:port address")
    if not port_str:
        return host, DEFAULT_PORT
    if not _DIGITS.fullmatch(port_str) or int(port_str) > MAX_PORT:
        raise ParameterTypeError(value, "host:port address")
    return host, int(port_str)


def parse_url(value: str) -> str:
    """Accept absolute http:// and https:// URLs."""
    try:
        parts = urlsplit(value)
    except ValueError as exc:
        raise ParameterTypeError(value, "URL", cause=exc) from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise ParameterTypeError(value, "URL")
    return value


# ── Durations ──────────────────────────────────────────────────────────────

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """Parse a duration such as ``300ms``, ``1.5h`` or ``2h45m`` into seconds.

    Accepts the units ns, us (or µs), ms, s, m and h, and the bare value
    ``0``. Negative durations are rejected.
    """
    text = value[1:] if value.startswith("+") else value
    if text == "0":
        return 0.0
    if not text:
        raise ParameterTypeError(value, "duration")

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ParameterTypeError(value, "duration")
        number, unit = match.groups()
        total += float(number) * _UNIT_SECONDS[unit]
        pos = match.end()
    return total


# ── Patterns ───────────────────────────────────────────────────────────────


def parse_regex(value: str) -> re.Pattern[str]:
    try:
        return re.compile(value)
    except re.error as exc:
        raise ParameterTypeError(value, "regular expression", cause=exc) from exc


def parse_nonempty(value: str, what: str) -> str:
    """Reject empty or whitespace-only names."""
    if not value.strip():
        raise ParameterTypeError(value, what)
    return value
