"""Network state probes for the local host.

Thin wrappers over psutil and the socket module that return plain
Python values. Check variants call these rather than psutil directly so
that a single place decides what "open", "up" and "reachable" mean.

Definitions:
    - A TCP port is open when some socket is LISTENing on it.
    - A UDP port is open when some socket is bound to it.
    - A host is reachable when a connection (TCP) or a connected datagram
      socket (UDP) can be set up before the deadline. The deadline covers
      name resolution as well as the connection itself.
"""

from __future__ import annotations

import logging
import socket
import time

import psutil

from hostcheck.errors import InfrastructureError

logger = logging.getLogger(__name__)

PROTOCOLS = ("tcp", "udp")


# ── Ports ──────────────────────────────────────────────────────────────────


def open_ports(protocol: str) -> list[int]:
    """Return the sorted local ports open for ``protocol`` ("tcp" or "udp")."""
    if protocol not in PROTOCOLS:
        raise ValueError(f"Unknown protocol: {protocol}")
    try:
        connections = psutil.net_connections(kind=protocol)
    except psutil.AccessDenied as exc:
        raise InfrastructureError(
            f"Not permitted to list {protocol.upper()} sockets",
            context={"protocol": protocol},
            cause=exc,
        ) from exc

    ports = set()
    for conn in connections:
        if not conn.laddr:
            continue
        if protocol == "tcp" and conn.status != psutil.CONN_LISTEN:
            continue
        ports.add(conn.laddr.port)
    return sorted(ports)


# ── Interfaces ─────────────────────────────────────────────────────────────


def interface_names() -> list[str]:
    return sorted(psutil.net_if_stats())


def up_interfaces() -> list[str]:
    return sorted(name for name, stats in psutil.net_if_stats().items() if stats.isup)


def interface_addresses(name: str, family: socket.AddressFamily) -> list[str]:
    """Return the addresses of ``family`` assigned to interface ``name``.

    IPv6 zone suffixes (``fe80::1%eth0``) are dropped.
    """
    addrs = psutil.net_if_addrs().get(name, [])
    return [a.address.split("%", 1)[0] for a in addrs if a.family == family]


# ── Resolution and reachability ────────────────────────────────────────────


def resolvable(hostname: str) -> bool:
    """Return True if the system resolver knows ``hostname``."""
    try:
        socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError) as exc:
        logger.debug("could not resolve %s: %s", hostname, exc)
        return False
    return True


def can_connect(host: str, port: int, protocol: str, timeout: float | None = None) -> bool:
    """Return True if ``host:port`` can be reached over ``protocol``.

    Args:
        host: Hostname or IP literal.
        port: Destination port.
        protocol: "tcp" or "udp".
        timeout: Deadline in seconds. None or 0 waits for the OS default.

    """
    if protocol not in PROTOCOLS:
        raise ValueError(f"Unknown protocol: {protocol}")
    deadline = timeout or None
    start = time.monotonic()
    try:
        if protocol == "tcp":
            with socket.create_connection((host, port), timeout=deadline):
                pass
        else:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
            with socket.socket(family, socktype, proto) as sock:
                sock.settimeout(deadline)
                sock.connect(sockaddr)
    except (OSError, UnicodeError) as exc:
        logger.debug("%s connection to %s:%s failed: %s", protocol, host, port, exc)
        return False

    elapsed = time.monotonic() - start
    if deadline is not None and elapsed > deadline:
        logger.debug("%s connection to %s:%s took %.6fs (deadline %.6fs)", protocol, host, port, elapsed, deadline)
        return False
    return True
