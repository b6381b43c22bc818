"""The project-creation pipeline.

Implements the six steps of ``exgen <name>``:

Step 1: VALIDATE -- Check the project name and target path.
Step 2: RESOLVE  -- Merge config defaults and presets, validate flag
        combinations, resolve the final options.
Step 3: GENERATE -- Write the project tree (fatal on failure).
Step 4: INSTALL  -- Install dependencies (best-effort).
Step 5: GIT      -- Initialise a repository (best-effort).
Step 6: REPORT   -- Print the next steps.

No filesystem mutation happens before every validation check has passed;
all fatal validation errors are raised together as one ``ValidationFailed``.
"""

from __future__ import annotations

import os
from pathlib import Path

from rich.markup import escape

from exgen.config import ExgenConfig, get_preset_from_config, load_config, merge_with_config
from exgen.errors import InstallError, UnknownPresetError, ValidationFailed
from exgen.git import initialize_git
from exgen.installer import get_install_script, get_run_script, install_dependencies
from exgen.logger import ConsoleLogger
from exgen.models import RawOptions, ResolvedOptions, ValidationResult
from exgen.presets import merge_layers, preset_names
from exgen.resolver import resolve_options
from exgen.scaffolder import ProjectGenerator
from exgen.validation import (
    aggregate_results,
    sanitize_project_name,
    validate_options,
    validate_project_name,
    validate_project_path,
)

TOTAL_STEPS = 6


async def create_project(
    project_name: str | None,
    raw: RawOptions,
    logger: ConsoleLogger,
    *,
    preset: str | None = None,
    cwd: str | Path | None = None,
    config: ExgenConfig | None = None,
) -> ResolvedOptions:
    """Run the full creation pipeline for *project_name*.

    Args:
        project_name: Name typed by the user; the directory and package name
            are its sanitised form.
        raw: Explicit flags from the command line or the interactive flow.
        logger: Console logger for all output.
        preset: Name of a custom preset from the config file (built-in
            preset names are accepted too).
        cwd: Directory the project is created in; defaults to the working
            directory.
        config: Pre-loaded configuration.  When omitted it is discovered
            from *cwd*.

    Returns:
        The resolved options the project was (or, under ``dry_run``, would
        be) generated from.

    Raises:
        ValidationFailed: If any name, path or option check fails.
        UnknownPresetError: If *preset* is not defined anywhere.
        GenerationError: If writing the project tree fails.
    """
    base_dir = Path(cwd) if cwd is not None else Path.cwd()

    logger.header("EXGEN - Express Application Generator")

    # Step 1: name and path
    logger.step(1, TOTAL_STEPS, "Validating project configuration...")
    if not project_name:
        raise ValidationFailed(
            ["Project name is required. Use: exgen <project-name> [options]"],
            context="Invalid project name",
        )

    name_result = validate_project_name(project_name)
    canonical_name = sanitize_project_name(project_name) or project_name
    project_path = (base_dir / canonical_name).resolve()
    path_result = validate_project_path(project_path)

    # Step 2: options
    logger.step(2, TOTAL_STEPS, "Resolving project options...")
    if config is None:
        config = load_config(base_dir, logger)

    merged = merge_with_config(_apply_named_preset(raw, preset, config), config)
    options_result = validate_options(merged, explicit=raw)

    _check(aggregate_results(name_result, path_result, options_result), logger)

    resolved = await resolve_options(
        canonical_name, project_path, merged, explicit=raw, config=config, logger=logger
    )
    generator = ProjectGenerator(resolved, config=config, logger=logger)

    if resolved.dry_run:
        show_dry_run(resolved, generator, logger)
        return resolved

    display_project_summary(resolved, logger)

    # Step 3: files
    logger.step(3, TOTAL_STEPS, "Creating project structure...")
    with logger.status("Setting up project directories..."):
        written = await generator.generate()
    logger.success(f"Project structure created ({len(written)} files)")

    # Step 4: dependencies
    installed = False
    if resolved.skip_install:
        logger.info("Skipping dependency installation")
    else:
        logger.step(4, TOTAL_STEPS, "Installing dependencies...")
        try:
            await install_dependencies(resolved, logger)
            installed = True
        except InstallError as exc:
            logger.error(str(exc))
            logger.warn(
                "Dependencies were not installed. Run "
                f"'{get_install_script(resolved.package_manager)}' inside the project."
            )

    # Step 5: version control
    if resolved.skip_git or resolved.git is False:
        logger.info("Skipping Git initialization")
    else:
        logger.step(5, TOTAL_STEPS, "Initializing Git repository...")
        await initialize_git(project_path, logger)

    # Step 6: report
    logger.step(6, TOTAL_STEPS, "Finalizing project setup...")
    show_completion_message(resolved, logger, installed=installed, cwd=base_dir)
    return resolved


def _apply_named_preset(raw: RawOptions, preset: str | None, config: ExgenConfig | None) -> RawOptions:
    """Layer the ``--preset`` bundle under the explicit flags."""
    if not preset:
        return raw

    custom = get_preset_from_config(preset, config)
    if custom is not None:
        return merge_layers([custom, raw])
    if preset in preset_names():
        return merge_layers([RawOptions(**{preset: True}), raw])

    available = preset_names() + sorted(config.presets if config else {})
    raise UnknownPresetError(preset, available)


def _check(result: ValidationResult, logger: ConsoleLogger) -> None:
    """Print every warning, then raise once if any check failed."""
    for warning in result.warnings:
        logger.warn(warning)
    if not result.valid:
        raise ValidationFailed(result.errors)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def summary_rows(options: ResolvedOptions) -> list[tuple[str, str]]:
    rows = [
        ("Project Name", options.project_name),
        ("Location", str(options.project_path)),
        ("Language", "TypeScript" if options.is_typescript else "JavaScript"),
        ("Package Manager", options.package_manager.value),
        ("Features", ", ".join(options.features) or "Basic Express setup"),
    ]
    if options.view_engine:
        rows.append(("View Engine", options.view_engine))
    if options.css_engine:
        rows.append(("CSS Engine", options.css_engine))
    return rows


def display_project_summary(options: ResolvedOptions, logger: ConsoleLogger) -> None:
    logger.table(summary_rows(options), title="Project Summary")


def show_dry_run(
    options: ResolvedOptions, generator: ProjectGenerator, logger: ConsoleLogger
) -> None:
    """Print the configuration and the files that would be written."""
    logger.info("DRY RUN - Project would be created with the following configuration:")
    display_project_summary(options, logger)
    logger.info("Files that would be created:")
    for path in generator.plan():
        logger.info(f"  {path}")


def show_completion_message(
    options: ResolvedOptions,
    logger: ConsoleLogger,
    *,
    installed: bool,
    cwd: Path,
) -> None:
    manager = options.package_manager
    try:
        location = os.path.relpath(options.project_path, cwd)
    except ValueError:
        location = str(options.project_path)

    logger.success("Project created successfully!")

    next_steps = [f"cd {location}"]
    if not installed:
        next_steps.append(get_install_script(manager))
    if options.is_typescript:
        next_steps.append(get_run_script(manager, "build"))
    next_steps.append(get_run_script(manager, "dev"))

    logger.console.print("\n[bold]Next steps:[/bold]")
    for index, step in enumerate(next_steps, start=1):
        logger.console.print(f"  {index}. {escape(step)}")

    notes: list[str] = []
    if options.swagger:
        notes.append("Swagger documentation will be available at http://localhost:3000/api-docs")
    if options.mongodb:
        notes.append("MongoDB connection configured - update MONGODB_URI in .env")
    if options.postgres:
        notes.append("PostgreSQL connection configured - update DB_* settings in .env")
    if options.redis:
        notes.append("Redis connection configured - update REDIS_HOST in .env")
    if options.docker:
        notes.append("Docker setup included - run: docker compose up --build")
    if options.test:
        notes.append(f"Test suite configured - run: {get_run_script(manager, 'test')}")

    if notes:
        logger.console.print("\n[bold]Additional information:[/bold]")
        for note in notes:
            logger.console.print(f"  {escape(note)}")

    logger.console.print("\nDocumentation is included in the generated README.md")
    logger.console.print()
