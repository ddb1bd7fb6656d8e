"""
Hostcheck Exceptions

This module defines the exception hierarchy shared by the parameter
validator, the check registry, the checklist loader and the check
variants themselves. All exceptions inherit from HostcheckError so that
callers can catch the whole family in one place.

Exception Hierarchy:
    HostcheckError (base)
    ├── ValidationError (parameters malformed, check never executes)
    │   ├── ArityError (wrong parameter count)
    │   └── ParameterTypeError (parameter cannot be converted)
    ├── ChecklistError (checklist file malformed or references unknown variables)
    ├── UnknownCheckError (no variant registered under that name)
    ├── DuplicateCheckError (two variants registered under one name)
    ├── RegistryFrozenError (registration attempted after startup)
    └── InfrastructureError (host environment prevented the probe)
        ├── MissingDependencyError (required utility not installed)
        ├── CommandError (utility ran but failed unexpectedly)
        ├── CommandTimeoutError (utility exceeded its deadline)
        └── FatalEnvironmentError (environment corrupt, abort the whole run)

ValidationError and ChecklistError are configuration bugs and are never
retried. InfrastructureError is distinct from a probe that ran and found
its condition false: a check converts it into a failing result that keeps
the error as its cause, so an operator can tell the two apart.
"""

from __future__ import annotations

from typing import Any, Sequence


class HostcheckError(Exception):
    """
    Base exception for all hostcheck operations.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        context: Additional context for debugging
        cause: Original exception if wrapping another error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "HOSTCHECK_ERROR",
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for JSON output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationError(HostcheckError):
    """Raised when check parameters are malformed."""

    def __init__(
        self,
        message: str,
        error_code: str = "VALIDATION_ERROR",
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, error_code, context, cause)


class ArityError(ValidationError):
    """
    Raised when a check receives the wrong number of parameters.

    Usage:
        raise ArityError("Port", expected=1, params=["80", "81"])
    """

    def __init__(self, check_id: str, expected: int, params: Sequence[str]):
        self.check_id = check_id
        self.expected = expected
        self.params = list(params)
        message = (
            f"{check_id} expects {expected} parameter{'' if expected == 1 else 's'}, "
            f"got {len(self.params)}: {self.params}"
        )
        super().__init__(
            message,
            error_code="ARITY_ERROR",
            context={"check": check_id, "expected": expected, "actual": len(self.params)},
        )


class ParameterTypeError(ValidationError):
    """
    Raised when a parameter cannot be converted to its semantic type.

    Usage:
        raise ParameterTypeError("eighty", "uint16")
    """

    def __init__(self, value: str, expected_type: str, cause: BaseException | None = None):
        self.value = value
        self.expected_type = expected_type
        super().__init__(
            f"{value!r} is not a valid {expected_type}",
            error_code="PARAMETER_TYPE_ERROR",
            context={"value": value, "expected_type": expected_type},
            cause=cause,
        )


class ChecklistError(HostcheckError):
    """
    Raised when a checklist cannot be turned into runnable checks.

    Covers unreadable or malformed files, schema violations, undefined
    variables, and aggregated validation failures across a checklist.

    Attributes:
        errors: Individual error messages, one per offending entry
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[str] | None = None,
        source: str | None = None,
        cause: BaseException | None = None,
    ):
        self.errors = list(errors or [])
        self.source = source
        context: dict[str, Any] = {}
        if source:
            context["source"] = source
        if self.errors:
            context["errors"] = self.errors
        super().__init__(message, error_code="CHECKLIST_ERROR", context=context, cause=cause)


# =============================================================================
# Registry Exceptions
# =============================================================================


class UnknownCheckError(HostcheckError):
    """Raised when no check variant is registered under the requested name."""

    def __init__(self, check_id: str, suggestions: Sequence[str] = ()):
        self.check_id = check_id
        self.suggestions = list(suggestions)
        message = f"Unknown check: {check_id}"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message, error_code="UNKNOWN_CHECK", context={"check": check_id})


class DuplicateCheckError(HostcheckError):
    """Raised when two variants claim the same name. Treated as fatal at startup."""

    def __init__(self, check_id: str):
        self.check_id = check_id
        super().__init__(
            f"Check {check_id!r} is already registered",
            error_code="DUPLICATE_CHECK",
            context={"check": check_id},
        )


class RegistryFrozenError(HostcheckError):
    """Raised when registering into a registry that is already in use."""

    def __init__(self, check_id: str):
        self.check_id = check_id
        super().__init__(
            f"Cannot register {check_id!r}: registry is frozen",
            error_code="REGISTRY_FROZEN",
            context={"check": check_id},
        )


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureError(HostcheckError):
    """
    Base exception for host environment failures.

    Raised when a probe cannot answer its question at all: a utility is
    missing, a subprocess cannot start, or an OS call fails for reasons
    unrelated to the monitored condition.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "INFRASTRUCTURE_ERROR",
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, error_code, context, cause)


class MissingDependencyError(InfrastructureError):
    """Raised when a required executable is not available on this host."""

    def __init__(self, program: str, cause: BaseException | None = None):
        self.program = program
        super().__init__(
            f"Required utility not found: {program}",
            error_code="MISSING_DEPENDENCY",
            context={"program": program},
            cause=cause,
        )


class CommandError(InfrastructureError):
    """
    Raised when a utility runs but fails in a way the check cannot interpret.

    Attributes:
        command: The argv that was executed, joined for display
        exit_code: Process exit status
        output: Captured output, for diagnosis
    """

    def __init__(self, command: str, exit_code: int, output: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        message = f"`{command}` failed with exit code {exit_code}"
        if output.strip():
            message += f": {output.strip()}"
        super().__init__(
            message,
            error_code="COMMAND_ERROR",
            context={"command": command, "exit_code": exit_code},
        )


class CommandTimeoutError(InfrastructureError):
    """Raised when a utility does not finish before its deadline."""

    def __init__(self, command: str, timeout: float, cause: BaseException | None = None):
        self.command = command
        self.timeout = timeout
        super().__init__(
            f"`{command}` did not finish within {timeout:g}s",
            error_code="COMMAND_TIMEOUT",
            context={"command": command, "timeout": timeout},
            cause=cause,
        )


class FatalEnvironmentError(InfrastructureError):
    """
    Raised when the host environment is too broken to continue the run.

    A check never terminates the process itself. It reports this error as
    the cause of its failing result and the orchestrator decides whether
    to abort the remaining checks.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, error_code="FATAL_ENVIRONMENT", context=context)
