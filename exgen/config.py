"""exgen configuration files.

An optional ``ExgenConfig`` supplies default options, user-named custom
presets, a preferred package manager and a custom template directory.  It is
discovered on disk (see :func:`discover_config_file`) and merged at the
lowest precedence, below built-in presets and explicit flags.

Config files use camelCase keys (``noView``,
``packageManager`` ...); snake_case field names are accepted as well.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exgen.constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAMES,
    USER_CONFIG_DIR,
    USER_CONFIG_FILE,
)
from exgen.errors import ConfigError
from exgen.logger import Logger
from exgen.models import PackageManager, RawOptions, ValidationResult
from exgen.presets import merge_layers


class TemplatesConfig(BaseModel):
    """Custom template look-up: one extra directory and a list of skipped outputs."""

    model_config = ConfigDict(populate_by_name=True)

    path: Optional[Path] = Field(default=None, description="Directory searched before the built-in templates")
    exclude: list[str] = Field(default_factory=list, description="Output paths that are never written")


class ExgenConfig(BaseModel):
    """On-disk exgen configuration.

    Instances are read-only once loaded; ``source`` records the file they came
    from and is never serialised.
    """

    model_config = ConfigDict(populate_by_name=True)

    defaults: RawOptions = Field(default_factory=RawOptions)
    presets: dict[str, RawOptions] = Field(default_factory=dict)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    package_manager: Optional[PackageManager] = Field(default=None, alias="packageManager")
    author: str = Field(default="")
    license: str = Field(default="MIT")
    source: Optional[Path] = Field(default=None, exclude=True)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible, camelCase representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.

        Raises:
            ConfigError: If the file cannot be written.
        """
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config file {target}: {exc}") from exc
        return target

    @classmethod
    def load(cls, path: Path, logger: Logger | None = None) -> "ExgenConfig":
        """Load and validate a config file.

        Unknown option keys inside ``defaults`` and ``presets`` are dropped
        with a warning.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated.
        """
        path = Path(path)
        data = _read_config_data(path)
        data = _drop_unknown_option_keys(data, path, logger)
        try:
            config = cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config file {path}:\n{exc}") from exc
        return config.model_copy(update={"source": path})


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def user_config_path() -> Path:
    """Location of the per-user config written by ``exgen config``."""
    return Path.home() / USER_CONFIG_DIR / USER_CONFIG_FILE


def discover_config_file(search_from: str | Path | None = None) -> Path | None:
    """Find the config file that applies to *search_from*.

    Order: the ``EXGEN_CONFIG`` environment variable; each directory from
    *search_from* (default: the working directory) up to the filesystem
    root; the home directory; the user config file.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)

    start = Path(search_from or Path.cwd()).resolve()
    directories = [start, *start.parents, Path.home()]
    for directory in directories:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate

    user_file = user_config_path()
    if user_file.is_file():
        return user_file
    return None


def load_config(
    search_from: str | Path | None = None,
    logger: Logger | None = None,
) -> ExgenConfig | None:
    """Discover and load the applicable config file.

    Never raises: a missing file yields ``None`` and a broken file is
    reported as a warning and ignored.
    """
    path = discover_config_file(search_from)
    if path is None:
        if logger:
            logger.debug("No config file found")
        return None

    try:
        config = ExgenConfig.load(path, logger)
    except ConfigError as exc:
        if logger:
            logger.warn(f"Error loading config file: {exc}")
        return None

    if logger:
        logger.debug(f"Found config file: {path}")
    return config


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def merge_with_config(options: RawOptions, config: ExgenConfig | None) -> RawOptions:
    """Merge config defaults under *options* (explicit options win)."""
    if config is None:
        return options
    return merge_layers([config.defaults, options])


def get_preset_from_config(name: str, config: ExgenConfig | None) -> RawOptions | None:
    """Return the custom preset called *name*, or ``None`` if it is not defined."""
    if config is None:
        return None
    return config.presets.get(name)


def list_available_presets(config: ExgenConfig | None) -> list[tuple[str, str]]:
    """Return ``(name, description)`` for every custom preset in *config*."""
    if config is None:
        return []
    presets: list[tuple[str, str]] = []
    for name, options in config.presets.items():
        keys = ", ".join(options.model_dump(by_alias=True, exclude_none=True))
        presets.append((name, f"Custom preset with: {keys}"))
    return presets


# ---------------------------------------------------------------------------
# Defaults, validation, export / import
# ---------------------------------------------------------------------------


def get_default_config() -> ExgenConfig:
    """The configuration written by ``exgen config reset``."""
    return ExgenConfig(
        defaults=RawOptions(typescript=True, git=True, cors=True, helmet=True),
        presets={
            "quick-api": RawOptions(
                typescript=True,
                no_view=True,
                cors=True,
                helmet=True,
                validation=True,
                test=True,
            ),
            "full-app": RawOptions(
                typescript=True,
                view="ejs",
                css="sass",
                mongodb=True,
                auth=True,
                test=True,
                swagger=True,
            ),
        },
        package_manager=PackageManager.NPM,
    )


def validate_config(data: dict[str, Any]) -> ValidationResult:
    """Check raw config data before it is imported.

    Reports an unknown package manager, presets that are not mappings, and
    option keys that exgen does not recognise.
    """
    result = ValidationResult()

    manager = data.get("packageManager", data.get("package_manager"))
    if manager is not None and manager not in {m.value for m in PackageManager}:
        result.add_error(f"Invalid package manager: {manager}")

    defaults = data.get("defaults", {})
    if not isinstance(defaults, dict):
        result.add_error('"defaults" must be an object')
    else:
        for key in sorted(set(defaults) - _known_option_keys()):
            result.add_error(f'Unknown option "{key}" in defaults')

    presets = data.get("presets", {})
    if not isinstance(presets, dict):
        result.add_error('"presets" must be an object')
        return result
    for name, preset in presets.items():
        if not isinstance(preset, dict):
            result.add_error(f'Invalid preset "{name}": must be an object')
            continue
        for key in sorted(set(preset) - _known_option_keys()):
            result.add_error(f'Unknown option "{key}" in preset "{name}"')

    return result


def export_config(config: ExgenConfig, path: str | Path) -> Path:
    """Write *config* to *path* as JSON."""
    return config.save(Path(path))


def import_config(source: str | Path, destination: str | Path | None = None) -> ExgenConfig:
    """Validate the config at *source* and save it as the user config.

    Raises:
        ConfigError: If the file cannot be read or fails validation.
    """
    source = Path(source)
    data = _read_config_data(source)
    result = validate_config(data)
    if not result.valid:
        raise ConfigError(f"Invalid config file {source}:\n" + "\n".join(result.errors))
    try:
        config = ExgenConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {source}:\n{exc}") from exc
    target = Path(destination) if destination else user_config_path()
    config.save(target)
    return config.model_copy(update={"source": target})


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _known_option_keys() -> set[str]:
    keys: set[str] = set()
    for name, field in RawOptions.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def _read_config_data(path: Path) -> dict[str, Any]:
    """Parse a config file into a mapping.

    ``.json`` files are parsed as JSON; ``.exgenrc`` and YAML files with
    PyYAML, which also accepts JSON.
    """
    if path.suffix == ".js":
        raise ConfigError(f"JavaScript config files are not supported: {path}")
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain an object")
    return data


def _drop_unknown_option_keys(
    data: dict[str, Any], path: Path, logger: Logger | None
) -> dict[str, Any]:
    known = _known_option_keys()
    cleaned = dict(data)

    def _clean(section: Any, where: str) -> Any:
        if not isinstance(section, dict):
            return section
        unknown = sorted(set(section) - known)
        if unknown and logger:
            logger.warn(f"{path}: ignoring unknown option(s) in {where}: {', '.join(unknown)}")
        return {k: v for k, v in section.items() if k in known}

    if "defaults" in cleaned:
        cleaned["defaults"] = _clean(cleaned["defaults"], "defaults")
    if isinstance(cleaned.get("presets"), dict):
        cleaned["presets"] = {
            name: _clean(preset, f'preset "{name}"')
            for name, preset in cleaned["presets"].items()
        }
    return cleaned
