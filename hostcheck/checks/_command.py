"""Process and command check variants.

Commands run through ``bash -c`` so checklists can use pipes and
redirection. The process table is read with psutil.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

import psutil

from hostcheck import _params
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check
from hostcheck.errors import CommandError, InfrastructureError

if TYPE_CHECKING:
    from hostcheck.local import LocalSession, Result

logger = logging.getLogger(__name__)


def _run_shell(session: LocalSession, command: str) -> Result:
    return session.run(["bash", "-c", command], merge_stderr=True)


@dataclass(frozen=True)
class Command(Check):
    """Does this command exit without error?"""

    check_id: ClassVar[str] = "Command"
    arity: ClassVar[int] = 1

    command: str

    @classmethod
    def _from_params(cls, params):
        return cls(command=_params.parse_nonempty(params[0], "command"))

    def probe(self, session: LocalSession) -> CheckResult:
        result = _run_shell(session, self.command)
        if result.ok:
            return CheckResult.success()
        return CheckResult(
            code=1,
            message=(
                "Command exited with non-zero exit code:"
                f"\n\tCommand: {self.command}"
                f"\n\tExit code: {result.exit_code}"
                f"\n\tOutput: {result.output}"
            ),
        )


@dataclass(frozen=True)
class CommandOutputMatches(Check):
    """Does the combined output of this command match this regular expression?"""

    check_id: ClassVar[str] = "CommandOutputMatches"
    arity: ClassVar[int] = 2

    command: str
    pattern: re.Pattern[str]

    @classmethod
    def _from_params(cls, params):
        return cls(
            command=_params.parse_nonempty(params[0], "command"),
            pattern=_params.parse_regex(params[1]),
        )

    def probe(self, session: LocalSession) -> CheckResult:
        result = _run_shell(session, self.command)
        if not result.ok:
            raise CommandError(self.command, result.exit_code, result.output)
        if self.pattern.search(result.output):
            return CheckResult.success()
        return probe_failure("Command output did not match regexp", self.pattern.pattern, [result.output])


# ── Processes ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RunningProcess:
    """A process as ``ps`` would show it, with the names it answers to.

    ``names`` holds the process name, the executable as invoked and its
    basename. Kernel threads have no command line and are shown as
    ``[name]``, the way ``ps`` shows them.
    """

    pid: int
    command: str
    names: frozenset[str]

    @classmethod
    def from_info(cls, info: dict) -> RunningProcess:
        name = info["name"] or ""
        argv = info["cmdline"] or []
        if argv:
            names = {name, argv[0], os.path.basename(argv[0])}
            command = argv[0]
        else:
            command = f"[{name}]"
            names = {name, command}
        return cls(pid=info["pid"], command=command, names=frozenset(n for n in names if n))


def _own_pids() -> set[int]:
    """This process and its ancestors (shells, sudo, the terminal session)."""
    try:
        me = psutil.Process()
        return {me.pid, *(parent.pid for parent in me.parents())}
    except psutil.Error as exc:
        raise InfrastructureError("Cannot inspect the checker's own process tree", cause=exc) from exc


def running_processes() -> list[RunningProcess]:
    """Return every process except this one and its ancestors.

    A process started as ``sudo hostcheck check Running nginx`` mentions
    nginx in its arguments only; it is excluded along with the rest of
    the checker's process tree.
    """
    excluded = _own_pids()
    return [
        RunningProcess.from_info(proc.info)
        for proc in psutil.process_iter(["pid", "name", "cmdline"])
        if proc.info["pid"] not in excluded
    ]


@dataclass(frozen=True)
class Running(Check):
    """Is a process with this name running (excluding this process)?"""

    check_id: ClassVar[str] = "Running"
    arity: ClassVar[int] = 1

    name: str

    @classmethod
    def _from_params(cls, params):
        return cls(name=_params.parse_nonempty(params[0], "process name"))

    def probe(self, session: LocalSession) -> CheckResult:
        processes = running_processes()
        if any(self.name in name for proc in processes for name in proc.names):
            return CheckResult.success()
        logger.debug("%s not among %d processes", self.name, len(processes))
        return probe_failure("Process not running", self.name, sorted({proc.command for proc in processes}))
