"""hostcheck: small, independent health checks for the local host."""

__version__ = "0.1.0"

from hostcheck._types import CheckOutcome, CheckResult, CheckSpec, OutcomeStatus  # noqa: E402
from hostcheck.checks import Check  # noqa: E402
from hostcheck.engine import check_from_path, check_single  # noqa: E402
from hostcheck.registry import CheckRegistry, RegistryEntry, build_registry  # noqa: E402

__all__ = [
    "__version__",
    "Check",
    "CheckOutcome",
    "CheckRegistry",
    "CheckResult",
    "CheckSpec",
    "OutcomeStatus",
    "RegistryEntry",
    "build_registry",
    "check_from_path",
    "check_single",
]
