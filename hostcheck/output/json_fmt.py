"""JSON output formatter for check run results.

Output Structure:
    {
        "timestamp": "ISO-8601 datetime",
        "checklist": "name",
        "host": "hostname",
        "aborted": false,
        "abort_reason": null,
        "results": [...],
        "summary": {counts}
    }

"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hostcheck.output import RunResult


def format_json(run_result: RunResult) -> str:
    """Format run results as pretty-printed JSON (2-space indent).

    Each result carries the check id, its parameters, the outcome status,
    the numeric code and the diagnostic message. ``error_code`` is set for
    checks that could not run.
    """
    data: dict[str, Any] = {
        "timestamp": run_result.timestamp.isoformat(),
        "checklist": run_result.checklist,
        "host": run_result.host,
        "aborted": run_result.aborted,
        "abort_reason": run_result.abort_reason,
        "results": [],
        "summary": {
            "total": run_result.total,
            "pass": run_result.pass_count,
            "fail": run_result.fail_count,
            "error": run_result.error_count,
            "skip": run_result.skip_count,
            "exit_code": run_result.exit_code,
        },
    }

    for outcome in run_result.outcomes:
        result_data: dict[str, Any] = {
            "id": outcome.spec.check_id,
            "parameters": list(outcome.spec.parameters),
            "title": outcome.spec.title,
            "status": outcome.status.value,
            "passed": outcome.passed,
            "code": outcome.code,
            "message": outcome.message,
            "duration_ms": outcome.duration_ms,
        }
        if outcome.error_code:
            result_data["error_code"] = outcome.error_code
        data["results"].append(result_data)

    return json.dumps(data, indent=2)
