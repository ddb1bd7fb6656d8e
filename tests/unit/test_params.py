"""
Unit tests for parameter validation.

Validation is pure: nothing here touches the network or the filesystem.
"""

import ipaddress
import re

import pytest

from hostcheck import _params
from hostcheck.errors import ArityError, ParameterTypeError


@pytest.mark.unit
class TestArity:
    """Test parameter count checking."""

    def test_exact_count_passes(self) -> None:
        assert _params.check_arity("IP4", 2, ["lo", "127.0.0.1"]) == ("lo", "127.0.0.1")

    @pytest.mark.parametrize("params", [[], ["a", "b"]])
    def test_wrong_count_fails(self, params) -> None:
        with pytest.raises(ArityError) as exc_info:
            _params.check_arity("Port", 1, params)
        assert exc_info.value.expected == 1
        assert exc_info.value.params == params


@pytest.mark.unit
class TestPort:
    """Test uint16 port parsing."""

    @pytest.mark.parametrize("value,expected", [("0", 0), ("22", 22), ("65535", 65535)])
    def test_valid(self, value, expected) -> None:
        assert _params.parse_port(value) == expected

    @pytest.mark.parametrize("value", ["65536", "-1", "eighty", "", " 22", "2.5"])
    def test_invalid(self, value) -> None:
        with pytest.raises(ParameterTypeError, match="is not a valid uint16"):
            _params.parse_port(value)


@pytest.mark.unit
class TestTemperature:
    """Test Celsius temperature parsing."""

    @pytest.mark.parametrize("value", ["100", "100C", "100c", "100°C", "100℃", "100°"])
    def test_glyphs_stripped(self, value) -> None:
        assert _params.parse_temperature(value) == 100

    @pytest.mark.parametrize("value", ["-5", "hot", "40000", "C"])
    def test_invalid(self, value) -> None:
        with pytest.raises(ParameterTypeError):
            _params.parse_temperature(value)


@pytest.mark.unit
class TestAddresses:
    """Test IP and host:port parsing."""

    def test_ip_any_version(self) -> None:
        assert _params.parse_ip("10.0.0.1") == ipaddress.IPv4Address("10.0.0.1")
        assert _params.parse_ip("::1") == ipaddress.IPv6Address("::1")

    def test_ipv4_rejects_ipv6(self) -> None:
        with pytest.raises(ParameterTypeError, match="IPv4 address"):
            _params.parse_ipv4("::1")

    def test_ipv6_rejects_ipv4(self) -> None:
        with pytest.raises(ParameterTypeError, match="IPv6 address"):
            _params.parse_ipv6("127.0.0.1")

    def test_invalid_ip(self) -> None:
        with pytest.raises(ParameterTypeError, match="is not a valid IP address"):
            _params.parse_ip("300.1.1.1")

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("eff.org:443", ("eff.org", 443)),
            ("eff.org", ("eff.org", 80)),
            ("10.0.0.1:22", ("10.0.0.1", 22)),
            ("[::1]:22", ("::1", 22)),
            ("[::1]", ("::1", 80)),
            ("fe80::1", ("fe80::1", 80)),
        ],
    )
    def test_host_port(self, value, expected) -> None:
        assert _params.parse_host_port(value) == expected

    @pytest.mark.parametrize("value", ["", ":80", "eff.org:http", "eff.org:70000", "[::1", "[::1]22", "a b:80"])
    def test_host_port_invalid(self, value) -> None:
        with pytest.raises(ParameterTypeError, match="host:port address"):
            _params.parse_host_port(value)

    def test_url(self) -> None:
        assert _params.parse_url("https://eff.org/about") == "https://eff.org/about"

    @pytest.mark.parametrize("value", ["ftp://eff.org", "eff.org", "http://"])
    def test_url_invalid(self, value) -> None:
        with pytest.raises(ParameterTypeError, match="URL"):
            _params.parse_url(value)


@pytest.mark.unit
class TestDuration:
    """Test duration parsing."""

    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("0", 0.0),
            ("5s", 5.0),
            ("300ms", 0.3),
            ("1.5h", 5400.0),
            ("2h45m", 9900.0),
            ("1m30s", 90.0),
            ("1µs", 1e-6),
            ("1us", 1e-6),
            ("10ns", 1e-8),
            ("+5s", 5.0),
        ],
    )
    def test_valid(self, value, seconds) -> None:
        assert _params.parse_duration(value) == pytest.approx(seconds)

    @pytest.mark.parametrize("value", ["", "5", "-5s", "5 s", "five seconds", "5d"])
    def test_invalid(self, value) -> None:
        with pytest.raises(ParameterTypeError, match="is not a valid duration"):
            _params.parse_duration(value)

    @pytest.mark.parametrize("value", ["١٠s", "５s", "1.٥h"])
    def test_non_ascii_digits_rejected(self, value) -> None:
        """Only ASCII digits count, as with port numbers."""
        with pytest.raises(ParameterTypeError, match="is not a valid duration"):
            _params.parse_duration(value)


@pytest.mark.unit
class TestRegex:
    """Test regular expression compilation."""

    def test_valid(self) -> None:
        assert _params.parse_regex(r"[rR]e\w+").search("Regex")

    def test_invalid(self) -> None:
        with pytest.raises(ParameterTypeError, match="is not a valid regular expression") as exc_info:
            _params.parse_regex("(unclosed")
        assert isinstance(exc_info.value.cause, re.error)

    def test_nonempty(self) -> None:
        assert _params.parse_nonempty("lo", "interface name") == "lo"
        with pytest.raises(ParameterTypeError):
            _params.parse_nonempty("  ", "interface name")
