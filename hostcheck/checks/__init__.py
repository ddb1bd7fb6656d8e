"""Check variants.

This module aggregates all check variants and registers them with a
CheckRegistry.

Variant Modules:
    - _network: Port, PortTCP, PortUDP, InterfaceExists, Up, IP4, IP6,
                Host, TCP, UDP, TCPTimeout, UDPTimeout
    - _routing: Gateway, GatewayInterface, RoutingTableDestination,
                RoutingTableInterface, RoutingTableGateway
    - _http: ResponseMatches, ResponseMatchesInsecure
    - _command: Command, CommandOutputMatches, Running
    - _system: Module, KernelParameter, PHPConfig, Temp, Installed
    - _systemd: SystemctlLoaded, SystemctlActive, SystemctlSockPath,
                SystemctlSockUnit, SystemctlTimer, SystemctlTimerLoaded,
                SystemctlUnitFileStatus

Example:
-------
    >>> from hostcheck.checks import register_default_checks
    >>> from hostcheck.registry import CheckRegistry
    >>> registry = register_default_checks(CheckRegistry())
    >>> registry.lookup("port").name
    'Port'

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hostcheck.checks._base import Check
from hostcheck.checks._command import Command, CommandOutputMatches, Running
from hostcheck.checks._http import ResponseMatches, ResponseMatchesInsecure
from hostcheck.checks._network import (
    IP4,
    IP6,
    TCP,
    UDP,
    Host,
    InterfaceExists,
    Port,
    PortTCP,
    PortUDP,
    TCPTimeout,
    UDPTimeout,
    Up,
)
from hostcheck.checks._routing import (
    Gateway,
    GatewayInterface,
    RoutingTableDestination,
    RoutingTableGateway,
    RoutingTableInterface,
)
from hostcheck.checks._system import Installed, KernelParameter, Module, PHPConfig, Temp
from hostcheck.checks._systemd import (
    SystemctlActive,
    SystemctlLoaded,
    SystemctlSockPath,
    SystemctlSockUnit,
    SystemctlTimer,
    SystemctlTimerLoaded,
    SystemctlUnitFileStatus,
)

if TYPE_CHECKING:
    from hostcheck.registry import CheckRegistry


# ── Variant catalogue ─────────────────────────────────────────────────────

CHECK_VARIANTS: tuple[type[Check], ...] = (
    # Network
    Port,
    PortTCP,
    PortUDP,
    InterfaceExists,
    Up,
    IP4,
    IP6,
    Host,
    TCP,
    UDP,
    TCPTimeout,
    UDPTimeout,
    # Routing
    Gateway,
    GatewayInterface,
    RoutingTableDestination,
    RoutingTableInterface,
    RoutingTableGateway,
    # Content
    ResponseMatches,
    ResponseMatchesInsecure,
    # Process/command
    Command,
    CommandOutputMatches,
    Running,
    # Host configuration
    Module,
    KernelParameter,
    PHPConfig,
    Temp,
    Installed,
    # Systemd
    SystemctlLoaded,
    SystemctlActive,
    SystemctlSockPath,
    SystemctlSockUnit,
    SystemctlTimer,
    SystemctlTimerLoaded,
    SystemctlUnitFileStatus,
)


def register_default_checks(registry: CheckRegistry) -> CheckRegistry:
    """Register every built-in variant and return the same registry.

    Raises:
        DuplicateCheckError: If a variant name is already registered.

    """
    for variant in CHECK_VARIANTS:
        registry.register(variant.check_id, variant.arity, variant.from_params, variant.describe())
    return registry


__all__ = [
    "CHECK_VARIANTS",
    "Check",
    "register_default_checks",
    *(variant.__name__ for variant in CHECK_VARIANTS),
]
