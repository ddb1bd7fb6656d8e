"""Routing table check variants.

Handlers read the kernel IP routing table as printed by ``route -n`` and
address its columns by header name. A routing table that cannot be read
at all means the host environment is broken, so those cases raise
FatalEnvironmentError and let the orchestrator decide whether to abort.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from hostcheck import _params, shell_util
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check
from hostcheck.errors import CommandError, FatalEnvironmentError, InfrastructureError

if TYPE_CHECKING:
    from hostcheck.local import LocalSession

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0.0.0.0"


def routing_table(session: LocalSession) -> list[list[str]]:
    """Return the routing table rows, header row first.

    ``route -n`` prints a title line ("Kernel IP routing table") before
    the headers; it is dropped here.
    """
    route = session.require("route", "/sbin/route")
    result = session.run([route, "-n"])
    if not result.ok:
        raise CommandError(f"{route} -n", result.exit_code, result.stderr)

    table = shell_util.split_table(result.stdout)
    if len(table) < 2:
        logger.error("Routing table was not available or not properly parsed:\n%s", result.stdout)
        raise FatalEnvironmentError(
            "Routing table was not available or not properly parsed",
            context={"output": result.stdout},
        )
    return table[1:]


def routing_column(session: LocalSession, header: str) -> list[str]:
    """Return one column of the routing table by header name."""
    table = routing_table(session)
    try:
        return shell_util.column_by_header(table, header)
    except InfrastructureError as exc:
        raise FatalEnvironmentError(
            f"Routing table has no {header!r} column",
            context={"header": header, "headers": table[0]},
        ) from exc


def _routing_match(session: LocalSession, header: str, value: str) -> CheckResult:
    column = routing_column(session, header)
    if value in column:
        return CheckResult.success()
    return probe_failure("Not found in routing table", value, column)


# ── Default gateway ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Gateway(Check):
    """Does the default gateway have this IP?"""

    check_id: ClassVar[str] = "Gateway"
    arity: ClassVar[int] = 1

    address: ipaddress.IPv4Address | ipaddress.IPv6Address

    @classmethod
    def _from_params(cls, params):
        return cls(address=_params.parse_ip(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        gateways = routing_column(session, "Gateway")
        gateway = next((ip for ip in gateways if ip != ZERO_ADDRESS), ZERO_ADDRESS)
        if str(self.address) == gateway:
            return CheckResult.success()
        return probe_failure("Gateway does not have address", self.address, [gateway])


@dataclass(frozen=True)
class GatewayInterface(Check):
    """Is the default gateway using this interface?"""

    check_id: ClassVar[str] = "GatewayInterface"
    arity: ClassVar[int] = 1

    interface: str

    @classmethod
    def _from_params(cls, params):
        return cls(interface=_params.parse_nonempty(params[0], "interface name"))

    def probe(self, session: LocalSession) -> CheckResult:
        table = routing_table(session)
        try:
            gateways = shell_util.column_by_header(table, "Gateway")
            names = shell_util.column_by_header(table, "Iface")
        except InfrastructureError as exc:
            raise FatalEnvironmentError(
                "Routing table is missing the Gateway or Iface column",
                context={"headers": table[0]},
            ) from exc

        found: list[str] = []
        for i, ip in enumerate(gateways):
            if ip == ZERO_ADDRESS:
                continue
            if i >= len(names):
                raise FatalEnvironmentError(
                    "Fewer names in kernel routing table than IPs",
                    context={"index": i, "names": names},
                )
            found = [names[i]]
            break

        if found == [self.interface]:
            return CheckResult.success()
        return probe_failure("Default gateway does not operate on interface", self.interface, found)


# ── Routing table membership ───────────────────────────────────────────────


@dataclass(frozen=True)
class RoutingTableDestination(Check):
    """Is this IPv4 address a destination in the kernel routing table?"""

    check_id: ClassVar[str] = "RoutingTableDestination"
    arity: ClassVar[int] = 1

    address: ipaddress.IPv4Address

    @classmethod
    def _from_params(cls, params):
        return cls(address=_params.parse_ipv4(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _routing_match(session, "Destination", str(self.address))


@dataclass(frozen=True)
class RoutingTableInterface(Check):
    """Is this interface in the kernel routing table?"""

    check_id: ClassVar[str] = "RoutingTableInterface"
    arity: ClassVar[int] = 1

    interface: str

    @classmethod
    def _from_params(cls, params):
        return cls(interface=_params.parse_nonempty(params[0], "interface name"))

    def probe(self, session: LocalSession) -> CheckResult:
        return _routing_match(session, "Iface", self.interface)


@dataclass(frozen=True)
class RoutingTableGateway(Check):
    """Is this IPv4 address a gateway in the kernel routing table?"""

    check_id: ClassVar[str] = "RoutingTableGateway"
    arity: ClassVar[int] = 1

    address: ipaddress.IPv4Address

    @classmethod
    def _from_params(cls, params):
        return cls(address=_params.parse_ipv4(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _routing_match(session, "Gateway", str(self.address))
