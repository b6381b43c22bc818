"""Shared pytest fixtures for the exgen test suite.

Provides reusable fixtures for:
- An isolated home directory and config environment
- A recording logger and a console logger writing to a buffer
- Resolved option records for TypeScript and JavaScript projects
- Mocked executable probes and subprocess runners
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from exgen.logger import ConsoleLogger
from exgen.models import PackageManager, ResolvedOptions
from exgen.utils import Available, Unavailable


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp directory so no real config file is discovered."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("EXGEN_CONFIG", raising=False)
    return home


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory the test runs in."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


# ---------------------------------------------------------------------------
# Loggers
# ---------------------------------------------------------------------------

class RecordingLogger:
    """Logger double that keeps ``(level, message)`` pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warn(self, message: str) -> None:
        self.records.append(("warn", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        self.records.append(("status", message))
        yield

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console_logger(console_buffer: io.StringIO) -> ConsoleLogger:
    """A ConsoleLogger whose output lands in ``console_buffer``."""
    console = Console(file=console_buffer, width=120, force_terminal=False, color_system=None)
    return ConsoleLogger(verbose=True, console=console)


# ---------------------------------------------------------------------------
# Option records
# ---------------------------------------------------------------------------

def make_resolved(project_path: Path, **fields: Any) -> ResolvedOptions:
    """Build a ResolvedOptions directly, bypassing presets and probes."""
    fields.setdefault("project_name", project_path.name)
    fields.setdefault("package_manager", PackageManager.NPM)
    return ResolvedOptions(project_path=project_path, **fields)


@pytest.fixture
def resolved_factory():
    """Factory fixture wrapping :func:`make_resolved`."""
    return make_resolved


@pytest.fixture
def ts_options(tmp_path: Path) -> ResolvedOptions:
    """TypeScript API project with a handful of features."""
    return make_resolved(
        tmp_path / "ts-api",
        is_typescript=True,
        cors=True,
        helmet=True,
        test=True,
        no_view=True,
        features=("TypeScript", "CORS", "Helmet", "Jest Testing"),
    )


@pytest.fixture
def js_options(tmp_path: Path) -> ResolvedOptions:
    """Plain JavaScript project with an EJS view."""
    return make_resolved(
        tmp_path / "js-app",
        view="ejs",
        view_engine="ejs",
        features=("JavaScript", "View: ejs"),
    )


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def no_package_managers(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Make every executable probe in the resolver report 'unavailable'."""
    probe = AsyncMock(side_effect=lambda name, timeout=5: Unavailable(name, "not installed"))
    monkeypatch.setattr("exgen.resolver.probe_command", probe)
    return probe


@pytest.fixture
def all_tools_available(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    probe = AsyncMock(side_effect=lambda name, timeout=5: Available(name, "1.0.0"))
    monkeypatch.setattr("exgen.resolver.probe_command", probe)
    monkeypatch.setattr("exgen.validation.probe_command", probe)
    monkeypatch.setattr("exgen.installer.probe_command", probe)
    monkeypatch.setattr("exgen.git.probe_command", probe)
    return probe
