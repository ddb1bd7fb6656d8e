"""System-related check variants.

Variants for verifying host configuration: loaded kernel modules, kernel
parameters, PHP configuration, CPU temperature and installed packages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from hostcheck import _params, shell_util
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check
from hostcheck.errors import CommandError, InfrastructureError, MissingDependencyError

if TYPE_CHECKING:
    from hostcheck.local import LocalSession

# ── Kernel ─────────────────────────────────────────────────────────────────


def loaded_modules(session: LocalSession) -> list[str]:
    """Return the names of all currently loaded kernel modules."""
    lsmod = session.require("lsmod", "/sbin/lsmod")
    result = session.run([lsmod])
    if not result.ok:
        raise CommandError(lsmod, result.exit_code, result.stderr)
    return shell_util.column_by_header(shell_util.split_table(result.stdout), "Module")


@dataclass(frozen=True)
class Module(Check):
    """Is this kernel module loaded?"""

    check_id: ClassVar[str] = "Module"
    arity: ClassVar[int] = 1

    module: str

    @classmethod
    def _from_params(cls, params):
        return cls(module=_params.parse_nonempty(params[0], "module name"))

    def probe(self, session: LocalSession) -> CheckResult:
        modules = loaded_modules(session)
        if self.module in modules:
            return CheckResult.success()
        return probe_failure("Module is not loaded", self.module, modules)


# sysctl exits 255 for an unknown key
SYSCTL_UNKNOWN_KEY = 255


@dataclass(frozen=True)
class KernelParameter(Check):
    """Is this kernel parameter set?"""

    check_id: ClassVar[str] = "KernelParameter"
    arity: ClassVar[int] = 1

    parameter: str

    @classmethod
    def _from_params(cls, params):
        return cls(parameter=_params.parse_nonempty(params[0], "kernel parameter"))

    def probe(self, session: LocalSession) -> CheckResult:
        sysctl = session.require("sysctl", "/sbin/sysctl")
        result = session.run([sysctl, "-q", "-n", self.parameter], merge_stderr=True)
        if result.ok:
            return CheckResult.success()
        if result.exit_code == SYSCTL_UNKNOWN_KEY or "cannot stat" in result.output:
            return CheckResult(code=1, message=f"Kernel parameter not set: {self.parameter}")
        raise CommandError(f"{sysctl} -q -n {self.parameter}", result.exit_code, result.output)


# ── PHP ────────────────────────────────────────────────────────────────────


def _php_string(value: str) -> str:
    """Render ``value`` as a single-quoted PHP string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


@dataclass(frozen=True)
class PHPConfig(Check):
    """Does this PHP configuration variable have this value?"""

    check_id: ClassVar[str] = "PHPConfig"
    arity: ClassVar[int] = 2

    variable: str
    value: str

    @classmethod
    def _from_params(cls, params):
        return cls(variable=_params.parse_nonempty(params[0], "PHP variable"), value=params[1])

    def probe(self, session: LocalSession) -> CheckResult:
        php = session.require("php")
        code = f"echo get_cfg_var({_php_string(self.variable)});"
        result = session.run([php, "-r", code])
        if not result.ok:
            raise CommandError(f"{php} -r {code}", result.exit_code, result.output)

        actual = result.stdout
        if actual == self.value:
            return CheckResult.success()
        if not actual:
            return probe_failure("PHP configuration variable not set", self.value, [])
        return probe_failure("PHP variable did not match expected value", self.value, [actual])


# ── Temperature ────────────────────────────────────────────────────────────

# Captures the integer part of a core temperature line such as
# "Core 0:        +45.0°C  (high = +80.0°C, crit = +100.0°C)"
CORE_TEMP_RE = re.compile(r"Core\s\d+:\s+[\+\-](?P<temp>\d+)\.*\d*(°|\s)C")


def core_temperatures(output: str) -> list[int]:
    """Extract every core temperature from ``sensors`` output, in order."""
    temps = []
    for line in output.splitlines():
        match = CORE_TEMP_RE.search(line)
        if match:
            temps.append(int(match.group("temp")))
    return temps


@dataclass(frozen=True)
class Temp(Check):
    """Is the core temperature under this value (in degrees Celsius)?"""

    check_id: ClassVar[str] = "Temp"
    arity: ClassVar[int] = 1

    maximum: int

    @classmethod
    def _from_params(cls, params):
        return cls(maximum=_params.parse_temperature(params[0]))

    def probe(self, session: LocalSession) -> CheckResult:
        sensors = session.require("sensors")
        result = session.run([sensors])
        if not result.ok:
            raise CommandError(sensors, result.exit_code, result.output)

        temps = core_temperatures(result.stdout)
        if not temps:
            raise InfrastructureError(
                "Couldn't find any core temperatures in `sensors` output",
                context={"output": result.stdout},
            )
        temp = temps[0]
        if temp < self.maximum:
            return CheckResult.success()
        return probe_failure("Core temp exceeds defined maximum", self.maximum, [temp])


# ── Packages ───────────────────────────────────────────────────────────────

# Package managers in order of preference, with their query flag.
PACKAGE_QUERIES = {
    "dpkg": "-s",
    "rpm": "-q",
    "pacman": "-Qs",
}


@dataclass(frozen=True)
class Installed(Check):
    """Is this package installed?"""

    check_id: ClassVar[str] = "Installed"
    arity: ClassVar[int] = 1

    package: str

    @classmethod
    def _from_params(cls, params):
        return cls(package=_params.parse_nonempty(params[0], "package name"))

    def probe(self, session: LocalSession) -> CheckResult:
        manager = next((m for m in PACKAGE_QUERIES if session.which(m)), None)
        if manager is None:
            raise MissingDependencyError(" or ".join(PACKAGE_QUERIES))

        result = session.run([manager, PACKAGE_QUERIES[manager], self.package])
        if result.ok and self.package in result.stdout:
            return CheckResult.success()
        return CheckResult(code=1, message=f"Package {self.package} was not found with {manager}")
