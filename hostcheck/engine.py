"""Check engine: re-export facade and convenience functions.

This module provides factory functions for common use cases:
- check_single(): Build and run one ad-hoc check
- check_from_path(): Load a checklist and run every check in it

Example:
-------
    Single check::

        from hostcheck.engine import check_single

        result = check_single("PortTCP", ["22"])
        print("PASS" if result.passed else result.message)

    Full checklist::

        from hostcheck.engine import check_from_path

        run = check_from_path("checklists/", workers=4)
        for outcome in run.outcomes:
            print(f"{outcome.spec.label}: {outcome.status.value}")

"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from hostcheck._config import Settings, get_settings, parse_var_overrides  # noqa: F401
from hostcheck._loading import LoadedChecklist, load_checklist, parse_checklist  # noqa: F401
from hostcheck._orchestration import build_checks, evaluate_check, run_checks  # noqa: F401
from hostcheck._types import CheckOutcome, CheckResult, CheckSpec, OutcomeStatus  # noqa: F401
from hostcheck.local import LocalSession
from hostcheck.output import RunResult
from hostcheck.registry import CheckRegistry, build_registry


def _session_for(settings: Settings) -> LocalSession:
    return LocalSession(timeout=settings.timeout or None)


def check_single(
    name: str,
    params: Sequence[str] = (),
    *,
    session: LocalSession | None = None,
    registry: CheckRegistry | None = None,
) -> CheckResult:
    """Build one check by name and execute it.

    Args:
        name: Variant name, case-insensitive.
        params: Raw string parameters.
        session: Execution session; settings-derived default if omitted.
        registry: Registry to build from; the default registry if omitted.

    Returns:
        The check's CheckResult.

    Raises:
        UnknownCheckError: If no variant has that name.
        ValidationError: If the parameters are malformed.

    """
    registry = registry or build_registry()
    check = registry.build(CheckSpec(check_id=name, parameters=tuple(params)))
    return check.execute(session or _session_for(get_settings()))


def check_from_path(
    path: str,
    *,
    variables: Mapping[str, Any] | None = None,
    workers: int | None = None,
    abort_on_fatal: bool | None = None,
    session: LocalSession | None = None,
    registry: CheckRegistry | None = None,
) -> RunResult:
    """Load a checklist file or directory and run it.

    Unset arguments fall back to ``Settings``.

    Raises:
        ChecklistError: If the checklist cannot be loaded or validated.

    """
    settings = get_settings()
    loaded = load_checklist(path, cli_overrides=variables)
    return run_checks(
        loaded.specs,
        registry=registry or build_registry(),
        session=session or _session_for(settings),
        workers=workers if workers is not None else settings.workers,
        abort_on_fatal=settings.abort_on_fatal if abort_on_fatal is None else abort_on_fatal,
        checklist_name=loaded.name,
    )
