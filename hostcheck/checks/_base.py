"""The contract every check variant implements.

A variant is a frozen dataclass holding its validated, typed parameters.
It is built once from raw strings with ``from_params`` and then executed
with ``execute``, which is the only place it performs I/O.

Example:
-------
    >>> from hostcheck.checks import Port
    >>> check = Port.from_params(["22"])
    >>> check.identifier()
    'Port'
    >>> result = check.execute()
    >>> print("PASS" if result.passed else result.message)

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Sequence

from hostcheck._params import check_arity
from hostcheck._types import CheckResult
from hostcheck.errors import InfrastructureError
from hostcheck.local import LocalSession

logger = logging.getLogger(__name__)


class Check(ABC):
    """Base class for check variants.

    Subclasses set ``check_id`` and ``arity``, convert raw parameters in
    ``_from_params`` and answer their question in ``probe``.
    """

    check_id: ClassVar[str]
    arity: ClassVar[int]

    @classmethod
    def from_params(cls, params: Sequence[str]) -> Check:
        """Validate raw parameters and build a ready-to-run check.

        Raises:
            ArityError: Wrong number of parameters.
            ParameterTypeError: A parameter has the wrong shape.

        """
        return cls._from_params(check_arity(cls.check_id, cls.arity, params))

    @classmethod
    @abstractmethod
    def _from_params(cls, params: tuple[str, ...]) -> Check:
        """Convert already arity-checked parameters into a check."""

    @classmethod
    def describe(cls) -> str:
        """First line of the variant's docstring."""
        doc = (cls.__doc__ or "").strip()
        return doc.splitlines()[0] if doc else ""

    def identifier(self) -> str:
        return self.check_id

    @abstractmethod
    def probe(self, session: LocalSession) -> CheckResult:
        """Inspect the host. May raise InfrastructureError."""

    def execute(self, session: LocalSession | None = None) -> CheckResult:
        """Run the probe and always return a result.

        Infrastructure failures become failing results that keep the error
        as their cause, so they stay distinguishable from a condition that
        was simply false.
        """
        session = session or LocalSession()
        try:
            return self.probe(session)
        except InfrastructureError as exc:
            logger.warning("%s could not run: %s", self.check_id, exc)
            return CheckResult.from_error(exc)
