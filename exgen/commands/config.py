"""``exgen config``: view, reset, export and import configuration files."""

from __future__ import annotations

import json
from pathlib import Path

from rich.markup import escape

from exgen.config import (
    ExgenConfig,
    discover_config_file,
    export_config,
    get_default_config,
    import_config,
    load_config,
    user_config_path,
)
from exgen.errors import ConfigError
from exgen.logger import ConsoleLogger

ACTIONS: tuple[str, ...] = ("view", "reset", "export", "import", "path")


def view_config(logger: ConsoleLogger, cwd: Path | None = None) -> ExgenConfig | None:
    """Print the config that applies to *cwd*, if any."""
    config = load_config(cwd, logger)
    if config is None:
        logger.info("No config file found. Run 'exgen config reset' to create one.")
        return None

    logger.info(f"Config file: {config.source}")
    logger.console.print(escape(json.dumps(config.to_dict(), indent=2)))
    return config


def reset_config(logger: ConsoleLogger, path: Path | None = None) -> Path:
    """Write the default config to *path* (the user config by default)."""
    target = get_default_config().save(path or user_config_path())
    logger.success(f"Default config written to {target}")
    return target


def export_active_config(destination: str | Path, logger: ConsoleLogger, cwd: Path | None = None) -> Path:
    """Write the active config (or the defaults when none exists) to *destination*.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config = load_config(cwd, logger)
    if config is None:
        logger.warn("No config file found; exporting the default configuration")
        config = get_default_config()
    target = export_config(config, destination)
    logger.success(f"Config exported to {target}")
    return target


def import_user_config(source: str | Path, logger: ConsoleLogger) -> ExgenConfig:
    """Validate *source* and install it as the user config.

    Raises:
        ConfigError: If *source* cannot be read or fails validation.
    """
    config = import_config(source)
    logger.success(f"Config imported from {source} to {config.source}")
    return config


def show_config_path(logger: ConsoleLogger, cwd: Path | None = None) -> Path | None:
    path = discover_config_file(cwd)
    if path is None:
        logger.info(f"No config file found. User config location: {user_config_path()}")
    else:
        logger.info(f"Active config file: {path}")
    return path


def run_config_command(
    action: str,
    logger: ConsoleLogger,
    path: str | None = None,
    cwd: Path | None = None,
) -> None:
    """Dispatch one ``exgen config`` action.

    Raises:
        ConfigError: For an unknown action, a missing path argument, or any
            failure reported by the action itself.
    """
    if action == "view":
        view_config(logger, cwd)
    elif action == "reset":
        reset_config(logger)
    elif action == "path":
        show_config_path(logger, cwd)
    elif action in ("export", "import"):
        if not path:
            raise ConfigError(f"'exgen config {action}' requires a file path")
        if action == "export":
            export_active_config(path, logger, cwd)
        else:
            import_user_config(path, logger)
    else:
        raise ConfigError(f"Unknown config action: {action}. Available actions: {', '.join(ACTIONS)}")
