"""Network check variants.

Variants for local ports, interfaces and their addresses, name
resolution, and TCP/UDP reachability of remote endpoints.
"""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from hostcheck import _params, netstatus
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check

if TYPE_CHECKING:
    from hostcheck.local import LocalSession

# ── Ports ──────────────────────────────────────────────────────────────────


def _port_result(port: int, protocols: tuple[str, ...]) -> CheckResult:
    open_ports: set[int] = set()
    for proto in protocols:
        open_ports.update(netstatus.open_ports(proto))
    if port in open_ports:
        return CheckResult.success()
    return probe_failure("Port not open", port, sorted(open_ports))


@dataclass(frozen=True)
class Port(Check):
    """Is this port open on TCP or UDP?"""

    check_id: ClassVar[str] = "Port"
    arity: ClassVar[int] = 1

    port: int

    @classmethod
    def _from_params(cls, params):
        return cls(port=_params.parse_port(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _port_result(self.port, ("tcp", "udp"))


@dataclass(frozen=True)
class PortTCP(Check):
    """Is this port open on TCP?"""

    check_id: ClassVar[str] = "PortTCP"
    arity: ClassVar[int] = 1

    port: int

    @classmethod
    def _from_params(cls, params):
        return cls(port=_params.parse_port(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _port_result(self.port, ("tcp",))


@dataclass(frozen=True)
class PortUDP(Check):
    """Is this port open on UDP?"""

    check_id: ClassVar[str] = "PortUDP"
    arity: ClassVar[int] = 1

    port: int

    @classmethod
    def _from_params(cls, params):
        return cls(port=_params.parse_port(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _port_result(self.port, ("udp",))


# ── Interfaces ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InterfaceExists(Check):
    """Does this network interface exist?"""

    check_id: ClassVar[str] = "InterfaceExists"
    arity: ClassVar[int] = 1

    interface: str

    @classmethod
    def _from_params(cls, params):
        return cls(interface=_params.parse_nonempty(params[0], "interface name"))

    def probe(self, session: LocalSession) -> CheckResult:
        names = netstatus.interface_names()
        if self.interface in names:
            return CheckResult.success()
        return probe_failure("Interface does not exist", self.interface, names)


@dataclass(frozen=True)
class Up(Check):
    """Is this network interface up?"""

    check_id: ClassVar[str] = "Up"
    arity: ClassVar[int] = 1

    interface: str

    @classmethod
    def _from_params(cls, params):
        return cls(interface=_params.parse_nonempty(params[0], "interface name"))

    def probe(self, session: LocalSession) -> CheckResult:
        up = netstatus.up_interfaces()
        if self.interface in up:
            return CheckResult.success()
        return probe_failure("Interface is not up", self.interface, up)


def _address_result(interface: str, address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> CheckResult:
    family = socket.AF_INET if address.version == 4 else socket.AF_INET6
    assigned = netstatus.interface_addresses(interface, family)
    for raw in assigned:
        try:
            if ipaddress.ip_address(raw) == address:
                return CheckResult.success()
        except ValueError:
            continue
    return probe_failure(f"Interface {interface} does not have IP", address, assigned)


@dataclass(frozen=True)
class IP4(Check):
    """Does this interface have this IPv4 address?"""

    check_id: ClassVar[str] = "IP4"
    arity: ClassVar[int] = 2

    interface: str
    address: ipaddress.IPv4Address

    @classmethod
    def _from_params(cls, params):
        return cls(
            interface=_params.parse_nonempty(params[0], "interface name"),
            address=_params.parse_ipv4(params[1]),
        )

    def probe(self, session: LocalSession) -> CheckResult:
        return _address_result(self.interface, self.address)


@dataclass(frozen=True)
class IP6(Check):
    """Does this interface have this IPv6 address?"""

    check_id: ClassVar[str] = "IP6"
    arity: ClassVar[int] = 2

    interface: str
    address: ipaddress.IPv6Address

    @classmethod
    def _from_params(cls, params):
        return cls(
            interface=_params.parse_nonempty(params[0], "interface name"),
            address=_params.parse_ipv6(params[1]),
        )

    def probe(self, session: LocalSession) -> CheckResult:
        return _address_result(self.interface, self.address)


# ── Resolution and reachability ────────────────────────────────────────────


@dataclass(frozen=True)
class Host(Check):
    """Can this hostname be resolved?"""

    check_id: ClassVar[str] = "Host"
    arity: ClassVar[int] = 1

    hostname: str

    @classmethod
    def _from_params(cls, params):
        return cls(hostname=_params.parse_nonempty(params[0], "hostname"))

    def probe(self, session: LocalSession) -> CheckResult:
        if netstatus.resolvable(self.hostname):
            return CheckResult.success()
        return CheckResult(code=1, message=f"Host cannot be resolved: {self.hostname}")


def _connection_result(host: str, port: int, protocol: str, timeout: float | None) -> CheckResult:
    if netstatus.can_connect(host, port, protocol, timeout):
        return CheckResult.success()
    message = f"Could not connect over {protocol.upper()} to host: {host}:{port}"
    if timeout:
        message += f" (timeout {timeout:g}s)"
    return CheckResult(code=1, message=message)


@dataclass(frozen=True)
class TCP(Check):
    """Can this host:port be reached over TCP?"""

    check_id: ClassVar[str] = "TCP"
    arity: ClassVar[int] = 1

    host: str
    port: int

    @classmethod
    def _from_params(cls, params):
        host, port = _params.parse_host_port(params[0])
        return cls(host=host, port=port)

    def probe(self, session: LocalSession) -> CheckResult:
        return _connection_result(self.host, self.port, "tcp", None)


@dataclass(frozen=True)
class UDP(Check):
    """Can this host:port be reached over UDP?"""

    check_id: ClassVar[str] = "UDP"
    arity: ClassVar[int] = 1

    host: str
    port: int

    @classmethod
    def _from_params(cls, params):
        host, port = _params.parse_host_port(params[0])
        return cls(host=host, port=port)

    def probe(self, session: LocalSession) -> CheckResult:
        return _connection_result(self.host, self.port, "udp", None)


@dataclass(frozen=True)
class TCPTimeout(Check):
    """Can this host:port be reached over TCP within the timeout?"""

    check_id: ClassVar[str] = "TCPTimeout"
    arity: ClassVar[int] = 2

    host: str
    port: int
    timeout: float

    @classmethod
    def _from_params(cls, params):
        host, port = _params.parse_host_port(params[0])
        return cls(host=host, port=port, timeout=_params.parse_duration(params[1]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _connection_result(self.host, self.port, "tcp", self.timeout)


@dataclass(frozen=True)
class UDPTimeout(Check):
    """Can this host:port be reached over UDP within the timeout?"""

    check_id: ClassVar[str] = "UDPTimeout"
    arity: ClassVar[int] = 2

    host: str
    port: int
    timeout: float

    @classmethod
    def _from_params(cls, params):
        host, port = _params.parse_host_port(params[0])
        return cls(host=host, port=port, timeout=_params.parse_duration(params[1]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _connection_result(self.host, self.port, "udp", self.timeout)
