"""``exgen info``: versions and development-environment report."""

from __future__ import annotations

import os
import platform
import sys

from exgen import __version__
from exgen.config import ExgenConfig
from exgen.installer import get_available_package_managers, validate_package_manager
from exgen.logger import ConsoleLogger
from exgen.models import ValidationResult
from exgen.validation import aggregate_results, validate_environment


def system_rows() -> list[tuple[str, str]]:
    return [
        ("exgen", __version__),
        ("Python", sys.version.split()[0]),
        ("Platform", f"{platform.system()} {platform.release()} ({platform.machine()})"),
        ("Working directory", os.getcwd()),
    ]


async def show_info(logger: ConsoleLogger, config: ExgenConfig | None = None) -> ValidationResult:
    """Print system information and probe the tools a generated project needs.

    When *config* names a preferred package manager, its absence is reported
    as an error.
    """
    logger.header("EXGEN - System Information")
    logger.table(system_rows(), title="System")

    with logger.status("Checking development environment..."):
        result = await validate_environment()
        managers = await get_available_package_managers()
        if config is not None and config.package_manager is not None:
            result = aggregate_results(result, await validate_package_manager(config.package_manager))

    logger.table(
        [("Package managers", ", ".join(m.value for m in managers) or "none found")],
        title="Tooling",
    )
    for error in result.errors:
        logger.error(error)
    for warning in result.warnings:
        logger.warn(warning)
    if result.valid and not result.warnings:
        logger.success("All development tools are available")
    elif result.valid:
        logger.success("Required development tools are available")
    return result
