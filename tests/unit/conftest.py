"""
Unit test fixtures and helpers.

Provides a scripted session so check variants can be exercised without
touching real system utilities.
"""

from __future__ import annotations

import pytest

from hostcheck._config import get_settings
from hostcheck.local import LocalSession, Result
from hostcheck.registry import build_registry


class FakeSession(LocalSession):
    """LocalSession whose commands and executables are scripted.

    ``commands`` maps the space-joined argv to a Result (or to a
    ``(exit_code, stdout)`` tuple). ``programs`` is the set of executables
    ``which`` reports as installed; every scripted command's program is
    added automatically.
    """

    def __init__(self, commands=None, programs=None, **kwargs):
        super().__init__(**kwargs)
        self.commands: dict[str, Result] = {}
        self.programs: set[str] = set(programs or ())
        self.calls: list[list[str]] = []
        for cmd, result in (commands or {}).items():
            self.script(cmd, result)

    def script(self, cmd: str, result) -> None:
        if isinstance(result, tuple):
            exit_code, stdout = result
            result = Result(exit_code=exit_code, stdout=stdout, stderr="")
        self.commands[cmd] = result
        self.programs.add(cmd.split(" ", 1)[0])

    def which(self, program: str) -> str | None:
        return program if program in self.programs else None

    def run(self, argv, *, timeout=None, merge_stderr=False) -> Result:
        self.calls.append(list(argv))
        key = " ".join(argv)
        if key not in self.commands:
            raise AssertionError(f"unscripted command: {key}")
        return self.commands[key]


@pytest.fixture
def fake_session():
    """Factory for FakeSession instances."""

    def _make(commands=None, programs=None, **kwargs) -> FakeSession:
        return FakeSession(commands, programs, **kwargs)

    return _make


@pytest.fixture
def registry():
    """A fresh, frozen default registry."""
    return build_registry()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from HOSTCHECK_* variables and the settings cache."""
    import os

    for key in list(os.environ):
        if key.startswith("HOSTCHECK_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
