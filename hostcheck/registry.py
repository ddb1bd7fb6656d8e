"""Check registry: variant name to constructor.

The registry is populated once at startup and frozen before any check
runs, so worker threads read it without locking. There is no module-level
instance; callers build one with ``build_registry()`` and pass it along.

Example:
-------
    >>> from hostcheck.registry import build_registry
    >>> from hostcheck._types import CheckSpec
    >>> registry = build_registry()
    >>> check = registry.build(CheckSpec("PortTCP", ("22",)))
    >>> check.identifier()
    'PortTCP'

"""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from hostcheck._params import check_arity
from hostcheck._types import CheckSpec
from hostcheck.checks import Check, register_default_checks
from hostcheck.errors import DuplicateCheckError, RegistryFrozenError, UnknownCheckError

logger = logging.getLogger(__name__)

Constructor = Callable[[Sequence[str]], Check]


@dataclass(frozen=True)
class RegistryEntry:
    """A registered variant: canonical name, parameter count and constructor."""

    name: str
    arity: int
    constructor: Constructor
    description: str = ""


class CheckRegistry:
    """Case-insensitive mapping from variant name to RegistryEntry."""

    def __init__(self):
        self._entries: dict[str, RegistryEntry] = {}
        self._frozen = False

    def register(self, name: str, arity: int, constructor: Constructor, description: str = "") -> None:
        """Add a variant.

        Raises:
            DuplicateCheckError: If the name (ignoring case) is taken.
            RegistryFrozenError: If the registry is already frozen.

        """
        if self._frozen:
            raise RegistryFrozenError(name)
        key = name.lower()
        if key in self._entries:
            raise DuplicateCheckError(name)
        self._entries[key] = RegistryEntry(name, arity, constructor, description)

    def freeze(self) -> CheckRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def entries(self) -> Mapping[str, RegistryEntry]:
        """Read-only view keyed by lower-cased name."""
        return MappingProxyType(self._entries)

    def lookup(self, name: str) -> RegistryEntry:
        """Return the entry registered under ``name``.

        Raises:
            UnknownCheckError: With close matches as suggestions.

        """
        entry = self._entries.get(name.lower())
        if entry is None:
            close = difflib.get_close_matches(name.lower(), list(self._entries), n=3)
            raise UnknownCheckError(name, [self._entries[key].name for key in close])
        return entry

    def build(self, spec: CheckSpec) -> Check:
        """Validate ``spec`` and construct its check.

        Raises:
            UnknownCheckError: If no variant has that name.
            ValidationError: If the parameters are malformed.

        """
        entry = self.lookup(spec.check_id)
        params = check_arity(entry.name, entry.arity, spec.parameters)
        return entry.constructor(params)

    def names(self) -> list[str]:
        """Canonical variant names, sorted."""
        return sorted(entry.name for entry in self._entries.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def build_registry() -> CheckRegistry:
    """Create, populate and freeze the default registry."""
    registry = register_default_checks(CheckRegistry()).freeze()
    logger.debug("registry ready with %d checks", len(registry))
    return registry
