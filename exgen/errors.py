"""Exception hierarchy for exgen.

Every error that the CLI is expected to report (rather than crash on) derives
from :class:`ExgenError`.  ``cli.main`` catches the base class, prints the
message through the logger and exits with status 1.
"""

from __future__ import annotations


class ExgenError(Exception):
    """Base class for all reportable exgen failures."""


class ValidationFailed(ExgenError):
    """Raised once with every fatal validation error collected across checks."""

    def __init__(self, errors: list[str], context: str = "Invalid configuration") -> None:
        self.errors = list(errors)
        self.context = context
        details = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{context}:\n{details}")


class GenerationError(ExgenError):
    """Raised when writing the project tree fails part-way.

    No rollback is attempted: files written before the failure stay on disk.
    """

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class InstallError(ExgenError):
    """Raised when a package-manager subprocess fails or times out."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class ConfigError(ExgenError):
    """Raised when a config file cannot be parsed, validated or written."""


class UnknownPresetError(ExgenError):
    """Raised when a named preset is not in the built-in or custom catalog."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Preset '{name}' not found. Available presets: {', '.join(self.available)}"
        )
