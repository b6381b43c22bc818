"""Validation checks that gate every filesystem mutation.

Each check returns a ``ValidationResult``.  Checks never short-circuit one
another: the caller aggregates all of them with :func:`aggregate_results` so
the user sees every problem in one pass.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from urllib.parse import quote

from exgen.constants import (
    MAX_PROJECT_NAME_LENGTH,
    OPTIONAL_TOOLS,
    REQUIRED_TOOLS,
    SUPPORTED_CSS_ENGINES,
    SUPPORTED_VIEW_ENGINES,
)
from exgen.models import RawOptions, ValidationResult
from exgen.utils import Unavailable, probe_command

# Names npm refuses for new packages.
BLACKLISTED_NAMES: frozenset[str] = frozenset({"node_modules", "favicon.ico"})

NODE_CORE_MODULES: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

_SCOPED_NAME = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")
_SPECIAL_CHARS = re.compile(r"[~'!()*]")


def _url_safe(value: str) -> bool:
    """Mirror of JavaScript's ``encodeURIComponent(value) === value``."""
    return quote(value, safe="-_.!~*'()") == value


# ---------------------------------------------------------------------------
# Name
# ---------------------------------------------------------------------------


def validate_project_name(name: str) -> ValidationResult:
    """Check *name* against the npm package-naming rules.

    Capital letters only produce a warning; every other rule violation is an
    error.
    """
    result = ValidationResult()

    if not name:
        result.add_error("Project name is required")
        return result

    problems: list[str] = []
    if name.startswith("."):
        problems.append("name cannot start with a period")
    if name.startswith("_"):
        problems.append("name cannot start with an underscore")
    if name.strip() != name:
        problems.append("name cannot contain leading or trailing spaces")
    if name.lower() in BLACKLISTED_NAMES:
        problems.append(f"{name} is a blacklisted name")
    if name.lower() in NODE_CORE_MODULES:
        problems.append(f"{name} is a core module name")
    if _SPECIAL_CHARS.search(name.split("/")[-1]):
        problems.append("name can no longer contain special characters (\"~'!()*\")")
    if not _url_safe(name):
        match = _SCOPED_NAME.match(name)
        scoped_ok = bool(
            match and match.group(1) and _url_safe(match.group(1)) and _url_safe(match.group(2))
        )
        if not scoped_ok:
            problems.append("name can only contain URL-friendly characters")

    if problems:
        result.add_error("Project name must be a valid npm package name")
        for problem in problems:
            result.add_error(problem)

    if len(name) > MAX_PROJECT_NAME_LENGTH:
        result.add_error(f"Project name must be less than {MAX_PROJECT_NAME_LENGTH} characters")

    if name != name.lower():
        result.add_warning("Project name should be lowercase")

    return result


def sanitize_project_name(name: str) -> str:
    """Turn *name* into a safe directory name.

    Examples::

        sanitize_project_name("My Cool App") -> "my-cool-app"
        sanitize_project_name("@scope/pkg")  -> "scopepkg"
    """
    result = re.sub(r"\s+", "-", name.lower())
    result = re.sub(r"[^a-z0-9-]", "", result)
    result = re.sub(r"-+", "-", result)
    return result.strip("-")


# ---------------------------------------------------------------------------
# Path
# ---------------------------------------------------------------------------


def validate_project_path(project_path: str | Path) -> ValidationResult:
    """Check that the project can be created at *project_path*.

    An existing plain file is fatal; a directory holding anything besides
    dotfiles is only a warning (its contents are not protected); an
    unwritable parent is fatal.
    """
    result = ValidationResult()
    path = Path(project_path).absolute()

    try:
        if path.exists():
            if not path.is_dir():
                result.add_error("A file with this name already exists")
                return result
            if not is_empty_directory(path):
                result.add_warning("Directory is not empty. Files may be overwritten")

        if not os.access(path.parent, os.W_OK):
            result.add_error("Parent directory is not writable")
    except OSError as exc:
        result.add_error(f"Cannot access project path: {exc}")

    return result


def is_empty_directory(path: str | Path) -> bool:
    """``True`` if *path* is missing or contains only dotfiles."""
    directory = Path(path)
    try:
        if not directory.exists():
            return True
        return all(entry.name.startswith(".") for entry in directory.iterdir())
    except OSError:
        return False


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def validate_options(options: RawOptions, explicit: RawOptions | None = None) -> ValidationResult:
    """Check flag combinations for sanity.

    Engine names and database choices are checked on the merged *options*.
    The language and view conflicts are checked on *explicit*, the flags the
    user gave (defaults to *options*).
    """
    explicit = explicit if explicit is not None else options
    result = ValidationResult()

    if options.view and options.view not in SUPPORTED_VIEW_ENGINES:
        result.add_error(
            f"Unsupported view engine: {options.view}. "
            f"Supported engines: {', '.join(SUPPORTED_VIEW_ENGINES)}"
        )

    if options.css and options.css not in SUPPORTED_CSS_ENGINES:
        result.add_error(
            f"Unsupported CSS engine: {options.css}. "
            f"Supported engines: {', '.join(SUPPORTED_CSS_ENGINES)}"
        )

    if explicit.typescript and explicit.javascript:
        result.add_warning("Both TypeScript and JavaScript flags specified. TypeScript will be used")

    if options.mongodb and options.postgres:
        result.add_warning("Both MongoDB and PostgreSQL selected. Both will be included")

    if explicit.no_view and explicit.view:
        result.add_error("Cannot specify both --no-view and --view")

    if len(options.active_presets()) > 1:
        result.add_warning("Multiple presets specified. Last one will take precedence")

    return result


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


async def validate_environment() -> ValidationResult:
    """Probe the tools a generated project needs.

    Missing required tools are errors; missing optional tools are warnings.
    """
    result = ValidationResult()
    names = [*REQUIRED_TOOLS, *OPTIONAL_TOOLS]
    probes = await asyncio.gather(*(probe_command(name) for name in names))

    for probe in probes:
        if not isinstance(probe, Unavailable):
            continue
        if probe.name in REQUIRED_TOOLS:
            result.add_error(f"{probe.name} is not installed or not in PATH")
        else:
            result.add_warning(f"{probe.name} is not available (optional)")
    return result


def aggregate_results(*results: ValidationResult) -> ValidationResult:
    """Combine several check results into one, keeping every message."""
    combined = ValidationResult()
    for result in results:
        combined = combined.merge(result)
    return combined
