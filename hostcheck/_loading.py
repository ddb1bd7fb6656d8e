"""Checklist loading and schema validation.

A checklist is a YAML (or JSON) document naming the checks to run::

    name: web tier
    variables:
      http_port: 8080
    checklist:
      - id: Port
        parameters: ["{{ http_port }}"]
        title: app port open

Keys are matched case-insensitively, so ``{"Name": ..., "Checklist":
[{"ID": ..., "Parameters": [...]}]}`` loads the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hostcheck._config import effective_variables, substitute
from hostcheck._types import CheckSpec
from hostcheck.errors import ChecklistError

logger = logging.getLogger(__name__)

CHECKLIST_SUFFIXES = (".yml", ".yaml", ".json")


# ── Schema ─────────────────────────────────────────────────────────────────


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"parameters must be scalars, got {type(value).__name__}")


class ChecklistEntry(BaseModel):
    """One check in a checklist."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    parameters: list[str] = Field(default_factory=list)
    title: str = ""

    @field_validator("parameters", mode="before")
    @classmethod
    def coerce_parameters(cls, v):
        if v is None:
            return []
        if isinstance(v, (str, int, float, bool)):
            v = [v]
        if not isinstance(v, list):
            raise ValueError("parameters must be a list")
        return [_scalar_to_str(item) for item in v]

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v):
        return "" if v is None else v


class ChecklistDocument(BaseModel):
    """Top level of a checklist file."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    variables: dict[str, Any] = Field(default_factory=dict)
    checklist: list[ChecklistEntry] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        return "" if v is None else str(v)

    @field_validator("variables", mode="before")
    @classmethod
    def coerce_variables(cls, v):
        return {} if v is None else v


def _lower_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def _normalize(data: Mapping[str, Any]) -> dict[str, Any]:
    """Lower-case structural keys; variable names keep their case."""
    doc = _lower_keys(data)
    entries = doc.get("checklist")
    if isinstance(entries, list):
        doc["checklist"] = [_lower_keys(e) if isinstance(e, Mapping) else e for e in entries]
    return doc


def _format_validation_errors(exc: pydantic.ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        errors.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return errors


# ── Loading ────────────────────────────────────────────────────────────────


@dataclass
class LoadedChecklist:
    """Checks read from one or more checklist files, ready to build."""

    name: str
    specs: list[CheckSpec] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)


def parse_checklist(
    data: Any,
    *,
    source: str = "<checklist>",
    cli_overrides: Mapping[str, Any] | None = None,
) -> LoadedChecklist:
    """Validate a parsed checklist document and resolve its variables.

    Raises:
        ChecklistError: On schema violations or undefined variables.

    """
    if not isinstance(data, Mapping):
        raise ChecklistError(f"{source}: checklist must be a mapping", source=source)
    try:
        doc = ChecklistDocument.model_validate(_normalize(data))
    except pydantic.ValidationError as exc:
        raise ChecklistError(
            f"{source}: invalid checklist",
            errors=_format_validation_errors(exc),
            source=source,
            cause=exc,
        ) from exc

    variables = effective_variables(doc.variables, cli_overrides)
    specs = []
    undefined = []
    for index, entry in enumerate(doc.checklist):
        params = []
        for param in entry.parameters:
            try:
                params.append(substitute(param, variables))
            except KeyError as exc:
                undefined.append(f"checklist.{index} ({entry.id}): undefined variable {exc.args[0]!r}")
                params.append(param)
        specs.append(CheckSpec(check_id=entry.id, parameters=tuple(params), title=entry.title))
    if undefined:
        raise ChecklistError(f"{source}: undefined variables", errors=undefined, source=source)

    return LoadedChecklist(name=doc.name, specs=specs, sources=[source])


def read_checklist(path: str | Path, *, cli_overrides: Mapping[str, Any] | None = None) -> LoadedChecklist:
    """Load one checklist file."""
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ChecklistError(f"Cannot read checklist {p}: {exc}", source=str(p), cause=exc) from exc
    except yaml.YAMLError as exc:
        raise ChecklistError(f"Malformed checklist {p}: {exc}", source=str(p), cause=exc) from exc
    if data is None:
        raise ChecklistError(f"Checklist {p} is empty", source=str(p))

    loaded = parse_checklist(data, source=str(p), cli_overrides=cli_overrides)
    logger.debug("loaded %d checks from %s", len(loaded.specs), p)
    return loaded


def load_checklist(path: str | Path, *, cli_overrides: Mapping[str, Any] | None = None) -> LoadedChecklist:
    """Load checks from a file or a directory (recursive).

    Files in a directory are read in sorted order and their checks are
    concatenated.

    Raises:
        ChecklistError: If the path does not exist, holds no checklist
            files, or any file is invalid.

    """
    p = Path(path)
    if p.is_file():
        return read_checklist(p, cli_overrides=cli_overrides)
    if not p.is_dir():
        raise ChecklistError(f"Checklist path not found: {path}", source=str(path))

    files = sorted(f for f in p.rglob("*") if f.is_file() and f.suffix.lower() in CHECKLIST_SUFFIXES)
    if not files:
        raise ChecklistError(f"No checklist files found in {path}", source=str(path))

    combined = LoadedChecklist(name=p.name)
    names = []
    for f in files:
        loaded = read_checklist(f, cli_overrides=cli_overrides)
        combined.specs.extend(loaded.specs)
        combined.sources.extend(loaded.sources)
        if loaded.name:
            names.append(loaded.name)
    if len(names) == 1:
        combined.name = names[0]
    return combined
