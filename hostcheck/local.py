"""Local execution session: subprocesses, executable lookup, HTTP clients."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Sequence

import httpx

from hostcheck.errors import CommandTimeoutError, MissingDependencyError

logger = logging.getLogger(__name__)


@dataclass
class Result:
    """Result of a local command execution."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        """Return True if command succeeded (exit code 0)."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class LocalSession:
    """Runs probes against the machine the checker is running on.

    Every I/O path a check takes goes through a session, so tests can
    substitute scripted output for real utilities.

    Args:
        timeout: Deadline in seconds for subprocesses and HTTP requests.
            None blocks until the underlying OS call returns.
        http_transport: Optional httpx transport, used instead of the
            network when given.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ):
        self.timeout = timeout
        self.http_transport = http_transport

    def which(self, program: str) -> str | None:
        """Return the path of ``program`` if it is executable, else None."""
        return shutil.which(program)

    def require(self, *candidates: str) -> str:
        """Return the first available executable among ``candidates``.

        Raises:
            MissingDependencyError: If none of them can be found.

        """
        for candidate in candidates:
            path = self.which(candidate)
            if path:
                return path
        raise MissingDependencyError(candidates[0])

    def run(
        self,
        argv: Sequence[str],
        *,
        timeout: float | None = None,
        merge_stderr: bool = False,
    ) -> Result:
        """Execute a command without a shell and return the result.

        Args:
            argv: Program and arguments.
            timeout: Overrides the session timeout for this call.
            merge_stderr: Capture stderr into stdout, preserving interleaving.

        Raises:
            MissingDependencyError: If the program does not exist.
            CommandTimeoutError: If the deadline passes first.

        """
        t = timeout if timeout is not None else self.timeout
        cmd = shlex.join(argv)
        logger.debug("running %s (timeout=%s)", cmd, t)
        try:
            proc = subprocess.run(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                timeout=t,
                check=False,
            )
        except FileNotFoundError as exc:
            raise MissingDependencyError(argv[0], cause=exc) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(cmd, t or 0.0, cause=exc) from exc

        stdout = proc.stdout.decode("utf-8", errors="replace")
        stderr = proc.stderr.decode("utf-8", errors="replace") if proc.stderr is not None else ""
        return Result(exit_code=proc.returncode, stdout=stdout.rstrip("\n"), stderr=stderr.rstrip("\n"))

    def http_client(self, *, verify: bool = True) -> httpx.Client:
        """Build an HTTP client honouring the session timeout."""
        return httpx.Client(
            verify=verify,
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.http_transport,
        )
