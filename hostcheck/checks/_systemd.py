"""Systemd check variants.

Handlers for verifying systemd units, sockets, timers and unit file
states. Every handler confirms ``systemctl`` is installed before it
probes, so a host without systemd reports a missing dependency rather
than a unit that is not loaded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from hostcheck import _params, shell_util
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check
from hostcheck.errors import CommandError

if TYPE_CHECKING:
    from hostcheck.local import LocalSession


def _systemctl(session: LocalSession, *args: str) -> str:
    """Run systemctl with ``args`` and return stdout.

    Raises:
        MissingDependencyError: If systemctl is not installed.
        CommandError: If systemctl exits non-zero.

    """
    systemctl = session.require("systemctl")
    argv = [systemctl, *args]
    result = session.run(argv)
    if not result.ok:
        raise CommandError(" ".join(argv), result.exit_code, result.output)
    return result.stdout


def _parse_unit(value: str) -> str:
    return _params.parse_nonempty(value, "unit name")


# ── Unit state ─────────────────────────────────────────────────────────────


def _unit_property(session: LocalSession, unit: str, prop: str, expected: str, state: str) -> CheckResult:
    output = _systemctl(session, "show", "-p", prop, unit)
    if f"{prop}={expected}" in output.splitlines():
        return CheckResult.success()
    return probe_failure(f"Service not {state}", unit, [output])


@dataclass(frozen=True)
class SystemctlLoaded(Check):
    """Is this systemd unit loaded?"""

    check_id: ClassVar[str] = "SystemctlLoaded"
    arity: ClassVar[int] = 1

    unit: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _unit_property(session, self.unit, "LoadState", "loaded", "loaded")


@dataclass(frozen=True)
class SystemctlActive(Check):
    """Is this systemd unit active?"""

    check_id: ClassVar[str] = "SystemctlActive"
    arity: ClassVar[int] = 1

    unit: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _unit_property(session, self.unit, "ActiveState", "active", "active")


# ── Sockets ────────────────────────────────────────────────────────────────

_NO_SOCKETS = re.compile(r"^0 sockets listed", re.MULTILINE)


def socket_column(session: LocalSession, header: str) -> list[str]:
    """Return one column of ``systemctl list-sockets --all``.

    The legend after the table ("N sockets listed.") is ignored. A host
    with no sockets at all prints only the legend. Netlink entries such
    as ``kobject-uevent 1`` hold a space, so rows are cut at the header
    offsets. Continuation lines of a multi-service ACTIVATES cell leave
    the other columns blank; blanks are dropped.
    """
    output = _systemctl(session, "list-sockets", "--all")
    if _NO_SOCKETS.search(output) and header not in output:
        return []
    values = shell_util.column_by_header(shell_util.split_fixed_width(output), header)
    return [value for value in values if value]


def _socket_match(session: LocalSession, header: str, value: str) -> CheckResult:
    values = socket_column(session, header)
    if value in values:
        return CheckResult.success()
    return probe_failure("Socket not found", value, values)


@dataclass(frozen=True)
class SystemctlSockPath(Check):
    """Is a socket registered with systemd at this path?"""

    check_id: ClassVar[str] = "SystemctlSockPath"
    arity: ClassVar[int] = 1

    path: str

    @classmethod
    def _from_params(cls, params):
        return cls(path=_params.parse_nonempty(params[0], "socket path"))

    def probe(self, session: LocalSession) -> CheckResult:
        return _socket_match(session, "LISTEN", self.path)


@dataclass(frozen=True)
class SystemctlSockUnit(Check):
    """Is a socket registered with systemd under this unit name?"""

    check_id: ClassVar[str] = "SystemctlSockUnit"
    arity: ClassVar[int] = 1

    unit: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _socket_match(session, "UNIT", self.unit)


# ── Timers ─────────────────────────────────────────────────────────────────

TIMER_RE = re.compile(r"(?:\w|-)+\.timer")


def timers(session: LocalSession, *, include_inactive: bool = False) -> list[str]:
    args = ["list-timers", "--all"] if include_inactive else ["list-timers"]
    return TIMER_RE.findall(_systemctl(session, *args))


@dataclass(frozen=True)
class SystemctlTimer(Check):
    """Is this timer running?"""

    check_id: ClassVar[str] = "SystemctlTimer"
    arity: ClassVar[int] = 1

    unit: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        found = timers(session)
        if self.unit in found:
            return CheckResult.success()
        return probe_failure("Timer not found", self.unit, found)


@dataclass(frozen=True)
class SystemctlTimerLoaded(Check):
    """Is this timer loaded, even if it is not active?"""

    check_id: ClassVar[str] = "SystemctlTimerLoaded"
    arity: ClassVar[int] = 1

    unit: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        found = timers(session, include_inactive=True)
        if self.unit in found:
            return CheckResult.success()
        return probe_failure("Timer not loaded", self.unit, found)


# ── Unit files ─────────────────────────────────────────────────────────────


def unit_file_states(session: LocalSession) -> dict[str, str]:
    """Map every unit file name to its state (static, enabled, disabled, ...)."""
    output = _systemctl(session, "--no-pager", "list-unit-files", "--no-legend")
    return {row[0]: row[1] for row in shell_util.split_table(output) if len(row) >= 2}


@dataclass(frozen=True)
class SystemctlUnitFileStatus(Check):
    """Does this unit file have this status?"""

    check_id: ClassVar[str] = "SystemctlUnitFileStatus"
    arity: ClassVar[int] = 2

    unit: str
    status: str

    @classmethod
    def _from_params(cls, params):
        return cls(unit=_parse_unit(params[0]), status=_params.parse_nonempty(params[1], "unit file status"))

    def probe(self, session: LocalSession) -> CheckResult:
        states = unit_file_states(session)
        actual = states.get(self.unit)
        if actual == self.status:
            return CheckResult.success()
        observed = [actual] if actual is not None else []
        return probe_failure(f"Unit {self.unit} didn't have status", self.status, observed)
