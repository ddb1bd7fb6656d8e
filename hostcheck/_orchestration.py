"""Checklist evaluation: build every check, run them, collect outcomes."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Sequence

from hostcheck._types import CheckOutcome, CheckResult, CheckSpec, OutcomeStatus
from hostcheck.errors import ChecklistError, FatalEnvironmentError, UnknownCheckError, ValidationError
from hostcheck.local import LocalSession
from hostcheck.output import RunResult

if TYPE_CHECKING:
    from hostcheck.checks import Check
    from hostcheck.registry import CheckRegistry

logger = logging.getLogger(__name__)

SKIP_REASON = "Not run: the run was aborted after a fatal environment error"


def build_checks(specs: Sequence[CheckSpec], registry: CheckRegistry) -> list[Check]:
    """Validate and construct every check before any of them runs.

    Raises:
        ChecklistError: Listing every entry that failed lookup or validation.

    """
    checks = []
    errors = []
    for index, spec in enumerate(specs):
        try:
            checks.append(registry.build(spec))
        except (UnknownCheckError, ValidationError) as exc:
            errors.append(f"#{index + 1} {spec.label}: {exc}")
    if errors:
        raise ChecklistError(
            f"{len(errors)} of {len(specs)} checks failed validation",
            errors=errors,
        )
    return checks


def evaluate_check(check: Check, spec: CheckSpec, session: LocalSession) -> tuple[CheckOutcome, CheckResult | None]:
    """Execute one check and classify its result.

    Returns the outcome and, when the check produced one, the raw result
    so callers can inspect its cause.
    """
    start = time.monotonic()
    try:
        result = check.execute(session)
    except Exception as exc:
        logger.exception("%s raised unexpectedly", spec.label)
        duration_ms = int((time.monotonic() - start) * 1000)
        outcome = CheckOutcome(
            spec=spec,
            status=OutcomeStatus.ERROR,
            code=1,
            message=f"Error: {exc}",
            duration_ms=duration_ms,
            error_code="UNEXPECTED_ERROR",
        )
        return outcome, None

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info("%s -> %s (%d ms)", spec.label, "pass" if result.passed else "fail", duration_ms)
    return CheckOutcome.from_result(spec, result, duration_ms), result


def _is_fatal(result: CheckResult | None) -> bool:
    return result is not None and isinstance(result.cause, FatalEnvironmentError)


def run_checks(
    specs: Sequence[CheckSpec],
    *,
    registry: CheckRegistry,
    session: LocalSession | None = None,
    workers: int = 1,
    abort_on_fatal: bool = True,
    checklist_name: str = "",
) -> RunResult:
    """Run a checklist and return its aggregated results.

    Every check is built before any executes, so a configuration error
    never leaves the host half-checked. Outcomes keep checklist order
    whatever the number of workers.

    Args:
        specs: Checks to run, in checklist order.
        registry: Frozen registry used to build the checks.
        session: Execution session; a default LocalSession if omitted.
        workers: Number of checks run in parallel (1 runs sequentially).
        abort_on_fatal: Stop the run when a check reports a fatal
            environment error. Pending checks are reported as skipped.
        checklist_name: Name recorded in the result.

    Raises:
        ChecklistError: If any check fails lookup or validation.

    """
    checks = build_checks(specs, registry)
    session = session or LocalSession()
    run = RunResult(checklist=checklist_name)
    outcomes: list[CheckOutcome | None] = [None] * len(specs)

    def record_fatal(index: int, result: CheckResult) -> None:
        run.aborted = True
        run.abort_reason = f"{specs[index].label}: {result.message}"
        logger.error("Aborting run: %s", run.abort_reason)

    if workers <= 1:
        for index, (check, spec) in enumerate(zip(checks, specs)):
            outcome, result = evaluate_check(check, spec, session)
            outcomes[index] = outcome
            if abort_on_fatal and _is_fatal(result):
                record_fatal(index, result)
                break
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(evaluate_check, check, spec, session): index
                for index, (check, spec) in enumerate(zip(checks, specs))
            }
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                index = futures[future]
                outcome, result = future.result()
                outcomes[index] = outcome
                if abort_on_fatal and _is_fatal(result) and not run.aborted:
                    record_fatal(index, result)
                    for pending in futures:
                        pending.cancel()

    run.outcomes = [
        outcome if outcome is not None else CheckOutcome.skipped(spec, SKIP_REASON)
        for outcome, spec in zip(outcomes, specs)
    ]
    return run
