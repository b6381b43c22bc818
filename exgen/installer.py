"""Dependency computation and package-manager installation.

The two dependency lists are a pure function of ``ResolvedOptions``: every
feature maps to a fixed set of package names and no versions are resolved.
Installation shells out to the chosen package manager once per dependency
class, with a bounded timeout.
"""

from __future__ import annotations

from exgen.constants import INSTALL_TIMEOUT_SECONDS
from exgen.errors import InstallError
from exgen.logger import Logger
from exgen.models import PackageManager, ResolvedOptions, ValidationResult
from exgen.resolver import should_include_feature
from exgen.utils import ProbeResult, probe_command, run_command

# View engine name -> npm package that provides it.
VIEW_ENGINE_PACKAGES: dict[str, str] = {
    "ejs": "ejs",
    "pug": "pug",
    "hbs": "hbs",
    "hogan": "hjs",
    "mustache": "mustache-express",
    "handlebars": "express-handlebars",
}

# CSS engine name -> npm middleware package.
CSS_ENGINE_PACKAGES: dict[str, str] = {
    "sass": "node-sass-middleware",
    "scss": "node-sass-middleware",
    "less": "less-middleware",
    "stylus": "stylus",
    "compass": "node-compass",
}

# Hard-coded version ranges written into package.json.
PACKAGE_VERSIONS: dict[str, str] = {
    "express": "^4.18.2",
    "dotenv": "^16.0.3",
    "cors": "^2.8.5",
    "cookie-parser": "^1.4.6",
    "morgan": "^1.10.0",
    "ejs": "^3.1.9",
    "pug": "^3.0.2",
    "hbs": "^4.2.0",
    "hjs": "^0.0.6",
    "mustache-express": "^1.3.2",
    "express-handlebars": "^7.0.7",
    "node-sass-middleware": "^1.0.1",
    "less-middleware": "^3.1.0",
    "stylus": "^0.60.0",
    "node-compass": "^0.2.4",
    "mongoose": "^7.3.0",
    "sequelize": "^6.32.0",
    "pg": "^8.11.0",
    "ioredis": "^5.3.2",
    "swagger-jsdoc": "^6.2.8",
    "swagger-ui-express": "^4.6.3",
    "jsonwebtoken": "^9.0.0",
    "bcryptjs": "^2.4.3",
    "helmet": "^7.0.0",
    "express-rate-limit": "^6.7.0",
    "joi": "^17.9.2",
    "winston": "^3.10.0",
    "winston-elasticsearch": "^0.17.4",
    "nodemon": "^2.0.22",
    "typescript": "^5.1.3",
    "ts-node": "^10.9.1",
    "tsx": "^3.12.7",
    "@types/node": "^20.3.1",
    "@types/express": "^4.17.17",
    "@types/cors": "^2.8.13",
    "@types/cookie-parser": "^1.4.3",
    "@types/morgan": "^1.9.4",
    "@types/ejs": "^3.1.2",
    "@types/pg": "^8.10.2",
    "@types/swagger-jsdoc": "^6.0.1",
    "@types/swagger-ui-express": "^4.1.3",
    "@types/jsonwebtoken": "^9.0.2",
    "@types/bcryptjs": "^2.4.2",
    "sequelize-cli": "^6.6.1",
    "jest": "^29.5.0",
    "supertest": "^6.3.3",
    "ts-jest": "^29.1.0",
    "@types/jest": "^29.5.2",
    "@types/supertest": "^2.0.12",
}

DEFAULT_VERSION = "latest"


# ---------------------------------------------------------------------------
# Dependency lists
# ---------------------------------------------------------------------------


def get_required_dependencies(options: ResolvedOptions) -> list[str]:
    """Runtime packages needed by the generated project, in a stable order."""
    deps = ["express", "dotenv"]

    if should_include_feature("cors", options):
        deps.append("cors")

    if should_include_feature("view", options):
        deps.extend(["cookie-parser", "morgan"])
        deps.append(VIEW_ENGINE_PACKAGES.get(options.view_engine, options.view_engine))

    if should_include_feature("css", options):
        package = CSS_ENGINE_PACKAGES.get(options.css_engine)
        if package:
            deps.append(package)

    if should_include_feature("mongodb", options):
        deps.append("mongoose")
    if should_include_feature("postgres", options):
        deps.extend(["sequelize", "pg"])
    if should_include_feature("redis", options):
        deps.append("ioredis")
    if should_include_feature("swagger", options):
        deps.extend(["swagger-jsdoc", "swagger-ui-express"])
    if should_include_feature("auth", options):
        deps.extend(["jsonwebtoken", "bcryptjs"])
    if should_include_feature("helmet", options):
        deps.append("helmet")
    if should_include_feature("rate_limit", options):
        deps.append("express-rate-limit")
    if should_include_feature("validation", options):
        deps.append("joi")
    if should_include_feature("elk", options):
        deps.extend(["winston", "winston-elasticsearch"])

    return _unique(deps)


def get_required_dev_dependencies(options: ResolvedOptions) -> list[str]:
    """Development packages (toolchain and type declarations), in a stable order."""
    dev_deps = ["nodemon"]

    if should_include_feature("typescript", options):
        dev_deps.extend(["typescript", "@types/node", "@types/express", "ts-node", "tsx"])

        if should_include_feature("cors", options):
            dev_deps.append("@types/cors")
        if should_include_feature("view", options):
            dev_deps.extend(["@types/cookie-parser", "@types/morgan"])
            if options.view_engine == "ejs":
                dev_deps.append("@types/ejs")
        if should_include_feature("postgres", options):
            dev_deps.append("@types/pg")
        if should_include_feature("swagger", options):
            dev_deps.extend(["@types/swagger-jsdoc", "@types/swagger-ui-express"])
        if should_include_feature("auth", options):
            dev_deps.extend(["@types/jsonwebtoken", "@types/bcryptjs"])

    if should_include_feature("postgres", options):
        dev_deps.append("sequelize-cli")

    if should_include_feature("test", options):
        dev_deps.extend(["jest", "supertest"])
        if options.is_typescript:
            dev_deps.extend(["@types/jest", "@types/supertest", "ts-jest"])

    return _unique(dev_deps)


def versioned(packages: list[str]) -> dict[str, str]:
    """Map each package to its hard-coded version range, sorted by name."""
    return {name: PACKAGE_VERSIONS.get(name, DEFAULT_VERSION) for name in sorted(packages)}


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


# ---------------------------------------------------------------------------
# Package manager commands
# ---------------------------------------------------------------------------


def get_install_command(manager: PackageManager, dev: bool = False) -> list[str]:
    """The argv prefix that adds packages with *manager*."""
    if manager is PackageManager.YARN:
        return ["yarn", "add", "--dev"] if dev else ["yarn", "add"]
    if manager is PackageManager.PNPM:
        return ["pnpm", "add", "--save-dev"] if dev else ["pnpm", "add"]
    if manager is PackageManager.BUN:
        return ["bun", "add", "--dev"] if dev else ["bun", "add"]
    return ["npm", "install", "--save-dev"] if dev else ["npm", "install", "--save"]


def get_install_script(manager: PackageManager) -> str:
    """Command a user runs to install an existing project's dependencies."""
    return f"{manager.value} install"


def get_run_script(manager: PackageManager, script: str) -> str:
    """Command a user runs to execute a ``package.json`` script."""
    if manager is PackageManager.YARN:
        return f"yarn {script}"
    return f"{manager.value} run {script}"


async def check_package_manager_availability(manager: PackageManager) -> ProbeResult:
    return await probe_command(manager.value)


async def get_available_package_managers() -> list[PackageManager]:
    """Every package manager whose executable answers ``--version``."""
    available: list[PackageManager] = []
    for manager in PackageManager:
        if await check_package_manager_availability(manager):
            available.append(manager)
    return available


async def validate_package_manager(manager: PackageManager) -> ValidationResult:
    result = ValidationResult()
    available = await get_available_package_managers()
    if manager not in available:
        names = ", ".join(m.value for m in available) or "none"
        result.add_error(
            f'Package manager "{manager.value}" is not available. Available options: {names}'
        )
    return result


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------


async def install_dependencies(
    options: ResolvedOptions,
    logger: Logger,
    timeout: float = INSTALL_TIMEOUT_SECONDS,
) -> None:
    """Install the runtime then the development dependencies.

    Raises:
        InstallError: On the first failed or timed-out package-manager run.
    """
    dependencies = get_required_dependencies(options)
    dev_dependencies = get_required_dev_dependencies(options)

    if dependencies:
        await _install_packages(dependencies, False, options, logger, timeout)
    if dev_dependencies:
        await _install_packages(dev_dependencies, True, options, logger, timeout)

    logger.info("All dependencies installed successfully")


async def _install_packages(
    packages: list[str],
    dev: bool,
    options: ResolvedOptions,
    logger: Logger,
    timeout: float,
) -> None:
    kind = "development" if dev else "production"
    cmd = [*get_install_command(options.package_manager, dev), *packages]
    cmd_str = " ".join(cmd)

    with logger.status(f"Installing {kind} dependencies ({len(packages)} packages)..."):
        try:
            returncode, stdout, stderr = await run_command(
                cmd, cwd=options.project_path, timeout=timeout
            )
        except OSError as exc:
            raise InstallError(
                f"Failed to start {options.package_manager.value}: {exc}", command=cmd_str
            ) from exc

    if returncode != 0:
        message = stderr or f"Process exited with code {returncode}"
        raise InstallError(
            f"Failed to install {kind} dependencies: {message}",
            command=cmd_str,
            stderr=stderr,
        )

    logger.success(f"{kind.capitalize()} dependencies installed ({len(packages)} packages)")
    logger.debug(f"Installed packages: {', '.join(packages)}")
