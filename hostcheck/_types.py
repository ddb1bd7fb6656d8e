"""Result data types for the check engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from hostcheck.errors import HostcheckError, InfrastructureError

# Bodies of HTTP responses and command output can be arbitrarily long.
MAX_ACTUAL_LENGTH = 500


@dataclass(frozen=True)
class CheckResult:
    """Outcome of executing a single check.

    ``code`` is 0 on success. A passing result carries no message and no
    cause; a failing result always carries a non-empty message.
    """

    code: int
    message: str = ""
    cause: BaseException | None = None

    def __post_init__(self) -> None:
        if self.code == 0 and (self.message or self.cause is not None):
            raise ValueError("a passing CheckResult cannot carry a message or cause")
        if self.code != 0 and not self.message:
            raise ValueError("a failing CheckResult needs a diagnostic message")

    @property
    def passed(self) -> bool:
        """Return True if the monitored condition held."""
        return self.code == 0

    @property
    def is_infrastructure_error(self) -> bool:
        """Return True if the check could not run its probe at all."""
        return isinstance(self.cause, InfrastructureError)

    @classmethod
    def success(cls) -> CheckResult:
        return cls(code=0)

    @classmethod
    def from_error(cls, exc: BaseException) -> CheckResult:
        """Wrap an infrastructure error as a failing result."""
        return cls(code=1, message=str(exc) or type(exc).__name__, cause=exc)


def _render(value: object) -> str:
    text = str(value)
    if len(text) > MAX_ACTUAL_LENGTH:
        return text[:MAX_ACTUAL_LENGTH] + "..."
    return text


def probe_failure(summary: str, expected: object, actual: Iterable[object]) -> CheckResult:
    """Build a failing result naming what was expected and what was found.

    Args:
        summary: Short description of the failed condition.
        expected: The value the check was looking for.
        actual: Everything that was observed instead (e.g. all open ports).

    Returns:
        CheckResult with code 1.

    Example:
    -------
        >>> probe_failure("Port not open", 8080, [22, 80]).message
        'Port not open:\\n\\tSpecified: 8080\\n\\tActual: 22, 80'

    """
    observed = [_render(a) for a in actual]
    rendered = ", ".join(observed) if observed else "(none)"
    return CheckResult(code=1, message=f"{summary}:\n\tSpecified: {expected}\n\tActual: {rendered}")


@dataclass(frozen=True)
class CheckSpec:
    """A check name and its raw parameters, as read from a checklist."""

    check_id: str
    parameters: tuple[str, ...] = ()
    title: str = ""

    @property
    def label(self) -> str:
        return self.title or f"{self.check_id} {' '.join(self.parameters)}".strip()


class OutcomeStatus(str, Enum):
    """Classification of an executed (or skipped) check."""

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class CheckOutcome:
    """Outcome of evaluating one checklist entry during a run."""

    spec: CheckSpec
    status: OutcomeStatus
    code: int = 0
    message: str = ""
    duration_ms: int = 0
    error_code: str | None = None

    @property
    def passed(self) -> bool:
        return self.status is OutcomeStatus.PASS

    @classmethod
    def from_result(cls, spec: CheckSpec, result: CheckResult, duration_ms: int = 0) -> CheckOutcome:
        if result.passed:
            status = OutcomeStatus.PASS
        elif result.is_infrastructure_error:
            status = OutcomeStatus.ERROR
        else:
            status = OutcomeStatus.FAIL
        error_code = result.cause.error_code if isinstance(result.cause, HostcheckError) else None
        return cls(
            spec=spec,
            status=status,
            code=result.code,
            message=result.message,
            duration_ms=duration_ms,
            error_code=error_code,
        )

    @classmethod
    def skipped(cls, spec: CheckSpec, reason: str) -> CheckOutcome:
        return cls(spec=spec, status=OutcomeStatus.SKIPPED, code=1, message=reason)
