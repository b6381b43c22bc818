"""``exgen presets``: browse the built-in and custom preset catalog."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from exgen.config import ExgenConfig, list_available_presets
from exgen.errors import UnknownPresetError
from exgen.logger import ConsoleLogger
from exgen.presets import PRESET_DEFINITIONS, PresetDefinition, get_preset


def list_presets(logger: ConsoleLogger, config: ExgenConfig | None = None) -> None:
    """Print every built-in preset, then any custom presets from *config*."""
    table = Table(title="Built-in Presets", title_style="bold cyan")
    table.add_column("Flag", style="green", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description")
    for preset in PRESET_DEFINITIONS:
        table.add_row(f"--{preset.name}", preset.title, escape(preset.description))
    logger.console.print(table)

    custom = list_available_presets(config)
    if custom:
        custom_table = Table(title="Custom Presets", title_style="bold cyan")
        custom_table.add_column("Preset", style="green", no_wrap=True)
        custom_table.add_column("Description")
        for name, description in custom:
            custom_table.add_row(f"--preset {escape(name)}", escape(description))
        logger.console.print(custom_table)

    logger.console.print("\nUse [green]exgen presets --details <name>[/green] for more information.")


def find_preset(name: str, config: ExgenConfig | None = None) -> PresetDefinition:
    """Look up *name* among the built-in presets, then the custom ones.

    Custom presets are wrapped in a ``PresetDefinition`` so both kinds print
    the same way.

    Raises:
        UnknownPresetError: If no preset has that name.
    """
    try:
        return get_preset(name)
    except UnknownPresetError as exc:
        if config is not None and name in config.presets:
            options = config.presets[name]
            keys = tuple(options.model_dump(by_alias=True, exclude_none=True))
            return PresetDefinition(
                name=name,
                title=name,
                description="Custom preset from " + str(config.source or "config"),
                options=options,
                example=f"exgen my-app --preset {name}",
                flags=("--preset", name),
                features=keys,
            )
        raise UnknownPresetError(name, exc.available + sorted(config.presets if config else {})) from None


def show_preset_details(name: str, logger: ConsoleLogger, config: ExgenConfig | None = None) -> None:
    preset = find_preset(name, config)
    console = logger.console

    console.print(f"\n[bold cyan]{escape(preset.title)} Preset[/bold cyan]")
    console.print(escape(preset.description))
    console.print("\n[bold]Features:[/bold]")
    for feature in preset.features:
        console.print(f"  [green]✓[/green] {escape(feature)}")
    console.print("\n[bold]Equivalent flags:[/bold]")
    console.print(f"  {escape(' '.join(preset.flags))}")
    if preset.example:
        console.print("\n[bold]Usage:[/bold]")
        console.print(f"  {escape(preset.example)}")
    console.print()


def preset_flags(name: str, config: ExgenConfig | None = None) -> str:
    """The flags a preset stands for, as one shell-ready string."""
    return " ".join(find_preset(name, config).flags)
