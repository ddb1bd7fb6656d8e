"""hostcheck CLI: run checklists and ad-hoc checks against this host."""

from __future__ import annotations

import json
import logging
import sys

import click
import pydantic
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostcheck import __version__
from hostcheck._config import MAX_WORKERS, Settings, get_settings, parse_var_overrides
from hostcheck._loading import load_checklist
from hostcheck._orchestration import run_checks
from hostcheck._params import parse_duration
from hostcheck._types import CheckOutcome, CheckSpec, OutcomeStatus
from hostcheck.errors import (
    ChecklistError,
    FatalEnvironmentError,
    ParameterTypeError,
    UnknownCheckError,
    ValidationError,
)
from hostcheck.local import LocalSession
from hostcheck.output import (
    EXIT_ABORTED,
    EXIT_CONFIG_ERROR,
    EXIT_FAILED,
    EXIT_OK,
    RunResult,
    parse_output_spec,
    write_output,
)
from hostcheck.registry import build_registry

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

STATUS_LABELS = {
    OutcomeStatus.PASS: "[green]PASS[/green] ",
    OutcomeStatus.FAIL: "[red]FAIL[/red] ",
    OutcomeStatus.ERROR: "[yellow]ERROR[/yellow]",
    OutcomeStatus.SKIPPED: "[dim]SKIP[/dim] ",
}


# ── Setup helpers ──────────────────────────────────────────────────────────


def _load_settings() -> Settings:
    try:
        return get_settings()
    except pydantic.ValidationError as exc:
        console.print(f"[red]Error:[/red] Invalid HOSTCHECK_* settings:\n{escape(str(exc))}")
        sys.exit(EXIT_CONFIG_ERROR)


def _configure_logging(settings: Settings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _resolve_timeout(timeout: str | None, settings: Settings) -> float | None:
    if not timeout:
        return settings.timeout or None
    try:
        return parse_duration(timeout) or None
    except ParameterTypeError as exc:
        console.print(f"[red]Error:[/red] --timeout: {escape(str(exc))}")
        sys.exit(EXIT_CONFIG_ERROR)


def _print_config_error(exc: ChecklistError) -> None:
    console.print(f"[red]Error:[/red] {escape(exc.message)}")
    for err in exc.errors:
        console.print(f"  [dim]-[/dim] {escape(err)}")


# ── Common options ─────────────────────────────────────────────────────────


def execution_options(f):
    """Options shared by run/check."""
    f = click.option(
        "--timeout",
        "-t",
        default=None,
        metavar="DURATION",
        help="Deadline for commands and HTTP requests (e.g., 30s, 1m30s)",
    )(f)
    f = click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")(f)
    return f


def output_options(f):
    """Output format options for run."""
    f = click.option(
        "--output",
        "-o",
        "outputs",
        multiple=True,
        help="Output format (csv, json). Add :path to write to file (e.g., -o json:results.json)",
    )(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress terminal output (useful with -o)")(f)
    return f


# ── CLI group ───────────────────────────────────────────────────────────────

MAIN_HELP_EPILOG = """
\b
Exit codes:
  0  every check passed
  1  at least one check failed or could not run
  2  checklist or parameter error, nothing was run
  3  run aborted after a fatal environment error (or `check` hit one)

\b
Environment:
  HOSTCHECK_WORKERS         Parallel checks (1-50, default: 1)
  HOSTCHECK_TIMEOUT         Command/HTTP deadline (e.g., 30s)
  HOSTCHECK_LOG_LEVEL       Log level (default: WARNING)
  HOSTCHECK_ABORT_ON_FATAL  Abort on fatal environment errors (default: true)

\b
Examples:
  hostcheck run checklists/web.yml
  hostcheck run checklists/ -w 8 -o json:results.json -q
  hostcheck run web.yml -V http_port=8443
  hostcheck check PortTCP 22
  hostcheck check TCPTimeout eff.org:443 5s
  hostcheck list
"""


@click.group(epilog=MAIN_HELP_EPILOG, context_settings={"max_content_width": 120})
@click.version_option(version=__version__, prog_name="hostcheck")
def main():
    """hostcheck: health checks for the local host."""
    pass


# ── run ─────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--workers",
    "-w",
    default=None,
    type=click.IntRange(1, MAX_WORKERS),
    help=f"Number of checks run in parallel (default: 1, max: {MAX_WORKERS})",
)
@click.option(
    "--var",
    "-V",
    "var",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override checklist variable (e.g., -V http_port=8443)",
)
@click.option("--no-abort", is_flag=True, help="Keep running after a fatal environment error")
@execution_options
@output_options
def run(paths, workers, var, no_abort, timeout, verbose, outputs, quiet):
    """Run the checks in one or more checklist files or directories."""
    settings = _load_settings()
    _configure_logging(settings, verbose)

    try:
        overrides = parse_var_overrides(var)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(EXIT_CONFIG_ERROR)

    specs: list[CheckSpec] = []
    names: list[str] = []
    try:
        for path in paths:
            loaded = load_checklist(path, cli_overrides=overrides)
            specs.extend(loaded.specs)
            if loaded.name:
                names.append(loaded.name)
        run_result = run_checks(
            specs,
            registry=build_registry(),
            session=LocalSession(timeout=_resolve_timeout(timeout, settings)),
            workers=workers or settings.workers,
            abort_on_fatal=settings.abort_on_fatal and not no_abort,
            checklist_name=", ".join(names),
        )
    except ChecklistError as exc:
        _print_config_error(exc)
        sys.exit(EXIT_CONFIG_ERROR)

    if not quiet:
        _print_run(run_result)
    _write_outputs(run_result, outputs)
    sys.exit(run_result.exit_code)


def _print_outcome(outcome: CheckOutcome) -> None:
    label = escape(outcome.spec.label)
    console.print(f"  {STATUS_LABELS[outcome.status]}  {label}")
    if outcome.message and not outcome.passed:
        for line in outcome.message.splitlines():
            console.print(f"         [dim]{escape(line.expandtabs(4))}[/dim]")


def _print_run(run_result: RunResult) -> None:
    title = run_result.checklist or "checklist"
    console.rule(f"[bold]{escape(title)}[/bold] on {escape(run_result.host)}")
    for outcome in run_result.outcomes:
        _print_outcome(outcome)
    console.print()
    if run_result.aborted:
        console.print(f"[red bold]Aborted:[/red bold] {escape(run_result.abort_reason or '')}")
    console.print(
        f"{run_result.total} checks: "
        f"[green]{run_result.pass_count} passed[/green], "
        f"[red]{run_result.fail_count} failed[/red], "
        f"[yellow]{run_result.error_count} errors[/yellow], "
        f"[dim]{run_result.skip_count} skipped[/dim]"
    )


def _write_outputs(run_result: RunResult, outputs: tuple[str, ...]) -> None:
    """Write formatted outputs based on --output flags."""
    for spec in outputs:
        try:
            fmt, filepath = parse_output_spec(spec)
            output = write_output(run_result, fmt, filepath)
        except ValueError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(EXIT_CONFIG_ERROR)
        if filepath:
            console.print(f"[dim]Wrote {fmt} output to {escape(filepath)}[/dim]")
        else:
            # Print to stdout
            print(output)


# ── check ───────────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("params", nargs=-1)
@execution_options
def check(name, params, timeout, verbose):
    """Run a single check, e.g. `hostcheck check Port 22`."""
    settings = _load_settings()
    _configure_logging(settings, verbose)

    spec = CheckSpec(check_id=name, parameters=tuple(params))
    try:
        built = build_registry().build(spec)
    except (UnknownCheckError, ValidationError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(EXIT_CONFIG_ERROR)

    result = built.execute(LocalSession(timeout=_resolve_timeout(timeout, settings)))
    _print_outcome(CheckOutcome.from_result(spec, result))
    if isinstance(result.cause, FatalEnvironmentError):
        sys.exit(EXIT_ABORTED)
    sys.exit(EXIT_OK if result.passed else EXIT_FAILED)


# ── list ────────────────────────────────────────────────────────────────────


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the catalogue as JSON")
def list_checks(as_json):
    """List the available checks."""
    registry = build_registry()
    entries = [registry.lookup(name) for name in registry.names()]

    if as_json:
        data = [{"name": e.name, "arity": e.arity, "description": e.description} for e in entries]
        print(json.dumps(data, indent=2))
        return

    table = Table(title="Available checks")
    table.add_column("Check", style="bold")
    table.add_column("Params", justify="right")
    table.add_column("Description")
    for e in entries:
        table.add_row(e.name, str(e.arity), e.description)
    console.print(table)


if __name__ == "__main__":
    main()
