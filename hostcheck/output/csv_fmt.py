"""CSV output formatter for check run results.

One row per checklist entry. Parameters are joined with a space, the
same way a check is labelled on the console.

Example:
-------
    >>> from hostcheck.output import RunResult, format_csv
    >>> print(format_csv(RunResult(checklist="web")))
    host,checklist,id,parameters,title,status,code,duration_ms,error_code,message

"""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostcheck._types import CheckOutcome
    from hostcheck.output import RunResult


# Identification first, then status, message last.
COLUMNS = [
    "host",
    "checklist",
    "id",
    "parameters",
    "title",
    "status",
    "code",
    "duration_ms",
    "error_code",
    "message",
]


def format_csv(run_result: RunResult) -> str:
    """Format run results as CSV with a header row."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=COLUMNS, lineterminator="\n")
    writer.writeheader()
    for outcome in run_result.outcomes:
        writer.writerow(_build_row(run_result, outcome))
    return output.getvalue()


def _build_row(run_result: RunResult, outcome: CheckOutcome) -> dict:
    return {
        "host": run_result.host,
        "checklist": run_result.checklist,
        "id": outcome.spec.check_id,
        "parameters": " ".join(outcome.spec.parameters),
        "title": outcome.spec.title,
        "status": outcome.status.value,
        "code": outcome.code,
        "duration_ms": outcome.duration_ms,
        "error_code": outcome.error_code or "",
        "message": outcome.message,
    }
