"""Runtime settings and checklist variable resolution.

Settings come from the environment (``HOSTCHECK_*``) or a ``.env`` file
in the working directory. Checklist variables are declared in the
checklist's ``variables`` section and referenced from parameters as
``{{ name }}``.

Variables are resolved at load time with this priority (highest first):
1. CLI --var KEY=VALUE overrides
2. variables section of the checklist

Example:
-------
    >>> from hostcheck._config import substitute
    >>> substitute("{{ host }}:{{ port }}", {"host": "eff.org", "port": 443})
    'eff.org:443'

"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Mapping

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostcheck._params import parse_duration
from hostcheck.errors import ParameterTypeError

# ── Settings ───────────────────────────────────────────────────────────────

MAX_WORKERS = 50


class Settings(BaseSettings):
    """Runtime settings for check runs."""

    model_config = SettingsConfigDict(env_prefix="HOSTCHECK_", env_file=".env", extra="ignore")

    workers: int = Field(default=1, ge=1, le=MAX_WORKERS, description="Checks run in parallel")
    timeout: float | None = Field(
        default=None,
        ge=0,
        description="Deadline in seconds for subprocesses and HTTP requests; unset blocks",
    )
    log_level: str = "WARNING"
    abort_on_fatal: bool = True

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v):
        # accept "30", "30s" and "1m30s" alike
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                return float(v)
            except ValueError:
                pass
            try:
                return parse_duration(v)
            except ParameterTypeError as exc:
                raise ValueError(str(exc)) from exc
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_exist(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached runtime settings"""
    return Settings()


# ── Variable substitution ──────────────────────────────────────────────────

VARIABLE_NAME = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

# {{ name }}, whitespace inside the braces optional
VARIABLE_PATTERN = re.compile(r"\{\{\s*(" + VARIABLE_NAME.pattern + r")\s*\}\}")


def effective_variables(
    declared: Mapping[str, Any] | None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge checklist variables with CLI overrides (overrides win)."""
    effective = dict(declared or {})
    if cli_overrides:
        effective.update(cli_overrides)
    return effective


def substitute(value: str, variables: Mapping[str, Any]) -> str:
    """Substitute {{ variable }} patterns in a string.

    Raises:
        KeyError: If a referenced variable is undefined.

    """

    def replace_var(match: re.Match) -> str:
        var_name = match.group(1)
        if var_name not in variables:
            raise KeyError(var_name)
        return str(variables[var_name])

    return VARIABLE_PATTERN.sub(replace_var, value)


def parse_var_overrides(var_flags: tuple[str, ...]) -> dict[str, str]:
    """Parse --var KEY=VALUE flags into a dict.

    Args:
        var_flags: Tuple of "KEY=VALUE" strings from CLI.

    Returns:
        Dict mapping variable names to values.

    Raises:
        ValueError: If a flag is malformed.

    """
    overrides: dict[str, str] = {}
    for flag in var_flags:
        name, sep, value = flag.partition("=")
        name = name.strip()
        if not sep:
            raise ValueError(f"Invalid --var {flag!r}: expected KEY=VALUE")
        if not VARIABLE_NAME.fullmatch(name):
            raise ValueError(f"Invalid --var {flag!r}: {name!r} is not a variable name")
        overrides[name] = value
    return overrides
