"""Output formatters for check run results.

Formatters convert a RunResult into JSON or CSV for reporting and CI/CD
integration.

Output Formats:
    - JSON: Structured document with per-check details and summary counts
    - CSV: Flat tabular format, one row per check

Usage Pattern:
    Results flow through: CheckResult -> CheckOutcome -> RunResult -> formatter

Example:
-------
    >>> from hostcheck.output import RunResult, write_output
    >>>
    >>> run = RunResult(checklist="web tier")
    >>> print(write_output(run, "json"))
    >>> write_output(run, "csv", "results.csv")

"""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from hostcheck._types import CheckOutcome, OutcomeStatus
from hostcheck.output.csv_fmt import format_csv
from hostcheck.output.json_fmt import format_json

__all__ = [
    "RunResult",
    "format_json",
    "format_csv",
    "write_output",
    "parse_output_spec",
    "EXIT_OK",
    "EXIT_FAILED",
    "EXIT_CONFIG_ERROR",
    "EXIT_ABORTED",
]

# Process exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_ABORTED = 3


# ── Result container ───────────────────────────────────────────────────────


@dataclass
class RunResult:
    """Aggregated results from one checklist run.

    Attributes:
        timestamp: When the run started (UTC).
        checklist: Name of the checklist, may be empty.
        host: Hostname of the machine that was checked.
        outcomes: One CheckOutcome per checklist entry, in checklist order.
        aborted: True if a fatal environment error stopped the run.
        abort_reason: Why the run stopped, when it did.

    """

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    checklist: str = ""
    host: str = field(default_factory=socket.gethostname)
    outcomes: list[CheckOutcome] = field(default_factory=list)
    aborted: bool = False
    abort_reason: str | None = None

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def pass_count(self) -> int:
        return self._count(OutcomeStatus.PASS)

    @property
    def fail_count(self) -> int:
        return self._count(OutcomeStatus.FAIL)

    @property
    def error_count(self) -> int:
        return self._count(OutcomeStatus.ERROR)

    @property
    def skip_count(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def exit_code(self) -> int:
        """0 when every check passed, 1 on any failure, 3 when aborted."""
        if self.aborted:
            return EXIT_ABORTED
        if self.fail_count or self.error_count:
            return EXIT_FAILED
        return EXIT_OK


# ── Output utilities ───────────────────────────────────────────────────────


def parse_output_spec(spec: str) -> tuple[str, str | None]:
    """Parse an output specification into format and filepath.

    Example:
    -------
        >>> parse_output_spec("json")
        ('json', None)
        >>> parse_output_spec("CSV:results.csv")
        ('csv', 'results.csv')

    """
    if ":" in spec:
        fmt, path = spec.split(":", 1)
        return fmt.lower(), path
    return spec.lower(), None


FORMATTERS = {
    "json": format_json,
    "csv": format_csv,
}


def write_output(run_result: RunResult, fmt: str, filepath: str | None = None) -> str:
    """Format results and optionally write them to a file.

    Returns:
        The formatted output.

    Raises:
        ValueError: If the format is unknown.

    """
    if fmt not in FORMATTERS:
        raise ValueError(f"Unknown output format: {fmt} (valid: {', '.join(FORMATTERS)})")

    output = FORMATTERS[fmt](run_result)

    if filepath:
        Path(filepath).write_text(output, encoding="utf-8")

    return output
