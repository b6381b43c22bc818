"""Option resolution.

Turns one ``RawOptions`` bundle (already merged with config defaults and any
custom preset) into the immutable ``ResolvedOptions`` every downstream stage
consumes:

1. built-in presets are folded in priority order and explicit values are
   re-applied on top (:func:`exgen.presets.apply_presets`);
2. the language is decided (:func:`resolve_typescript`);
3. the ordered feature labels are derived (:func:`determine_features`);
4. the package manager is detected (:func:`detect_package_manager`).
"""

from __future__ import annotations

from pathlib import Path

from exgen.config import ExgenConfig
from exgen.constants import (
    DEFAULT_PACKAGE_MANAGER,
    LOCKFILES,
    PACKAGE_MANAGER_PROBE_ORDER,
)
from exgen.logger import Logger
from exgen.models import PackageManager, RawOptions, ResolvedOptions
from exgen.presets import apply_presets
from exgen.utils import Available, probe_command

# Presets that select TypeScript unless JavaScript is asked for explicitly.
TYPESCRIPT_PRESETS: tuple[str, ...] = ("api", "microservice", "startup", "prod", "min", "light")


async def resolve_options(
    project_name: str,
    project_path: str | Path,
    raw: RawOptions,
    *,
    explicit: RawOptions | None = None,
    config: ExgenConfig | None = None,
    logger: Logger | None = None,
) -> ResolvedOptions:
    """Resolve *raw* into the final configuration for one run.

    Args:
        project_name: Canonical (already sanitised) project name.
        project_path: Target directory; made absolute here.
        raw: Merged user intent (config defaults, custom preset and flags).
            Its values are re-applied over the built-in presets.
        explicit: The flags the user actually gave; decides the language
            against presets.  Defaults to *raw*.
        config: Loaded config, consulted for the package-manager preference.
        logger: Receives debug output about detection decisions.
    """
    merged = apply_presets(raw)
    is_typescript = resolve_typescript(merged, explicit=explicit if explicit is not None else raw)
    features = determine_features(merged, is_typescript)
    path = Path(project_path).resolve()
    package_manager = await detect_package_manager(path, config, logger)

    return ResolvedOptions(
        **merged.explicit(),
        project_name=project_name,
        project_path=path,
        package_manager=package_manager,
        is_typescript=is_typescript,
        features=tuple(features),
        view_engine=get_final_view_engine(merged),
        css_engine=get_final_css_engine(merged),
    )


def resolve_typescript(options: RawOptions, explicit: RawOptions | None = None) -> bool:
    """Decide between TypeScript and JavaScript.

    *explicit* holds the caller's own flags (before presets).  An explicit
    ``typescript=False``, or ``javascript`` without an explicit
    ``typescript=True``, selects JavaScript even when a preset implies
    TypeScript.  Otherwise TypeScript wins if it is set anywhere or a
    TypeScript preset is active.  The fallback is JavaScript.
    """
    explicit = explicit if explicit is not None else options
    if explicit.typescript is False:
        return False
    if explicit.javascript and explicit.typescript is not True:
        return False
    if options.typescript:
        return True
    return any(getattr(options, name) for name in TYPESCRIPT_PRESETS)


def determine_features(options: RawOptions, is_typescript: bool) -> list[str]:
    """Ordered, human-readable labels for every enabled feature (display only)."""
    features = ["TypeScript" if is_typescript else "JavaScript"]

    view = get_final_view_engine(options)
    if view:
        features.append(f"View: {'EJS' if view == 'ejs' and not options.view else view}")
    if options.css:
        features.append(f"CSS: {options.css}")

    # Databases
    if options.mongodb:
        features.append("MongoDB")
    if options.postgres:
        features.append("PostgreSQL")
    if options.redis:
        features.append("Redis")

    # Authentication and security
    if options.auth:
        features.append("JWT Auth")
    if options.cors:
        features.append("CORS")
    if options.helmet:
        features.append("Helmet")
    if options.rate_limit:
        features.append("Rate Limiting")

    # Validation and documentation
    if options.validation:
        features.append("Joi Validation")
    if options.swagger:
        features.append("Swagger/OpenAPI")

    # Development and operations
    if options.test:
        features.append("Jest Testing")
    if options.docker:
        features.append("Docker")
    if options.elk:
        features.append("ELK Logging")

    if options.git is not False:
        features.append("Git")
    return features


def get_final_view_engine(options: RawOptions) -> str | None:
    """The view engine to generate for, or ``None`` when views are off."""
    if options.no_view:
        return None
    if options.view:
        return options.view
    if options.fullstack:
        return "ejs"
    return None


def get_final_css_engine(options: RawOptions) -> str | None:
    """The CSS engine to generate for, or ``None``."""
    if options.css:
        return options.css
    if options.fullstack:
        return "sass"
    return None


def should_include_feature(feature: str, options: ResolvedOptions) -> bool:
    """Whether *feature* is part of the resolved project.

    Unknown feature names are never included.
    """
    if feature == "view":
        return options.view_engine is not None
    if feature == "css":
        return options.css_engine is not None
    if feature == "typescript":
        return options.is_typescript
    if feature in {
        "mongodb",
        "postgres",
        "redis",
        "swagger",
        "docker",
        "test",
        "auth",
        "cors",
        "helmet",
        "rate_limit",
        "validation",
        "elk",
    }:
        return bool(getattr(options, feature))
    return False


async def detect_package_manager(
    project_path: str | Path,
    config: ExgenConfig | None = None,
    logger: Logger | None = None,
) -> PackageManager:
    """Pick the package manager for *project_path*.

    Lockfile at the target path, then the config preference, then the first
    executable that answers ``--version``, then npm.  Never raises.
    """
    path = Path(project_path)
    for lockfile, manager in LOCKFILES:
        try:
            if (path / lockfile).exists():
                if logger:
                    logger.debug(f"Found {lockfile}; using {manager.value}")
                return manager
        except OSError:
            continue

    if config is not None and config.package_manager is not None:
        if logger:
            logger.debug(f"Using package manager from config: {config.package_manager.value}")
        return config.package_manager

    for manager in PACKAGE_MANAGER_PROBE_ORDER:
        probe = await probe_command(manager.value)
        if isinstance(probe, Available):
            if logger:
                logger.debug(f"Detected {manager.value} {probe.version}".rstrip())
            return manager
        if logger:
            logger.debug(f"{manager.value} unavailable: {probe.reason}")

    return DEFAULT_PACKAGE_MANAGER
