"""Interactive project setup (``exgen init`` or ``exgen`` with no arguments).

Questions are asked with Rich prompts and the answers are collected into an
:class:`InitAnswers` record.  :func:`answers_to_options` turns that record
into the same ``RawOptions`` shape the flag parser produces; feature choices
travel as explicit :class:`~exgen.models.FeatureToggle` pairs.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field
from rich.console import Console
from rich.prompt import Confirm, Prompt

from exgen.commands.create import create_project
from exgen.logger import ConsoleLogger
from exgen.models import FEATURE_LABELS, Feature, FeatureToggle, RawOptions, ResolvedOptions
from exgen.validation import validate_project_name

PROJECT_TYPES: dict[str, str] = {
    "custom": "Custom (choose features manually)",
    "api": "API Server",
    "fullstack": "Full-Stack Application",
    "microservice": "Microservice",
    "startup": "Startup MVP",
    "light": "Lightweight Setup",
    "prod": "Production Ready",
}

VIEW_CHOICES = ("none", "ejs", "pug", "hbs", "mustache")
CSS_CHOICES = ("none", "sass", "less", "stylus")
DATABASE_CHOICES = ("none", "mongodb", "postgres")

# Features offered by the checklist; databases have their own question.
CHECKLIST_FEATURES: tuple[Feature, ...] = tuple(
    f for f in Feature if f not in (Feature.MONGODB, Feature.POSTGRES)
)


class InitAnswers(BaseModel):
    """Everything the interactive flow asks for."""

    project_name: str
    language: str = "typescript"
    project_type: str = "custom"
    view: Optional[str] = None
    css: Optional[str] = None
    database: Optional[str] = None
    features: list[Feature] = Field(default_factory=list)
    git: bool = True
    skip_install: bool = False
    verbose: bool = False


# ---------------------------------------------------------------------------
# Answers -> options
# ---------------------------------------------------------------------------


def feature_toggles(answers: InitAnswers) -> list[FeatureToggle]:
    """Explicit on/off toggles for every feature of a custom project."""
    chosen = set(answers.features)
    if answers.database == "mongodb":
        chosen.add(Feature.MONGODB)
    elif answers.database == "postgres":
        chosen.add(Feature.POSTGRES)
    return [FeatureToggle(feature=feature, enabled=feature in chosen) for feature in Feature]


def answers_to_options(answers: InitAnswers) -> RawOptions:
    """Build the ``RawOptions`` equivalent of the given answers.

    Preset project types switch on the preset flag itself, so the built-in
    catalog decides the bundle; the language answer is always explicit.
    """
    typescript = answers.language == "typescript"
    base = RawOptions(
        typescript=typescript,
        javascript=not typescript,
        git=answers.git,
        skip_git=not answers.git,
        skip_install=answers.skip_install,
        verbose=answers.verbose,
    )

    if answers.project_type != "custom":
        return base.model_copy(update={answers.project_type: True})

    update: dict[str, object] = {}
    if answers.view:
        update["view"] = answers.view
        if answers.css:
            update["css"] = answers.css
    else:
        update["no_view"] = True
    return base.model_copy(update=update).with_toggles(feature_toggles(answers))


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def parse_selection(text: str, count: int) -> list[int]:
    """Parse ``"1, 3,4"`` into zero-based indexes below *count*.

    Raises:
        ValueError: If an entry is not a number in ``1..count``.
    """
    indexes: list[int] = []
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        number = int(part)
        if not 1 <= number <= count:
            raise ValueError(f"{number} is not between 1 and {count}")
        if number - 1 not in indexes:
            indexes.append(number - 1)
    return indexes


def _ask_project_name(console: Console) -> str:
    while True:
        name = Prompt.ask("What is your project name?", default="my-express-app", console=console).strip()
        result = validate_project_name(name)
        if result.valid:
            return name
        for error in result.errors:
            console.print(f"[red]{error}[/red]")


def _ask_features(console: Console) -> list[Feature]:
    for index, feature in enumerate(CHECKLIST_FEATURES, start=1):
        console.print(f"  {index:2d}. {FEATURE_LABELS[feature]}")
    while True:
        text = Prompt.ask(
            "Select additional features (comma-separated numbers)", default="", console=console
        )
        try:
            return [CHECKLIST_FEATURES[i] for i in parse_selection(text, len(CHECKLIST_FEATURES))]
        except ValueError as exc:
            console.print(f"[red]Invalid selection: {exc}[/red]")


def collect_answers(console: Console) -> InitAnswers:
    """Ask every question and return the answers (blocking)."""
    console.print("\n[bold cyan]EXGEN - Interactive Project Setup[/bold cyan]\n")

    project_name = _ask_project_name(console)
    language = Prompt.ask(
        "Which language would you like to use?",
        choices=["typescript", "javascript"],
        default="typescript",
        console=console,
    )
    for key, label in PROJECT_TYPES.items():
        console.print(f"  [cyan]{key:<13}[/cyan] {label}")
    project_type = Prompt.ask(
        "What type of project are you building?",
        choices=list(PROJECT_TYPES),
        default="custom",
        console=console,
    )

    answers = InitAnswers(project_name=project_name, language=language, project_type=project_type)

    if project_type == "custom":
        view = Prompt.ask("Select view engine", choices=list(VIEW_CHOICES), default="none", console=console)
        if view != "none":
            answers.view = view
            css = Prompt.ask("Select CSS preprocessor", choices=list(CSS_CHOICES), default="none", console=console)
            answers.css = None if css == "none" else css
        database = Prompt.ask("Select database", choices=list(DATABASE_CHOICES), default="none", console=console)
        answers.database = None if database == "none" else database
        answers.features = _ask_features(console)

    answers.git = Confirm.ask("Initialize Git repository?", default=True, console=console)
    answers.skip_install = not Confirm.ask("Install dependencies now?", default=True, console=console)
    answers.verbose = Confirm.ask("Verbose output?", default=False, console=console)
    return answers


def print_answers(answers: InitAnswers, console: Console) -> None:
    console.print("\n[yellow]Project Configuration Summary:[/yellow]")
    console.print(f"Project Name: [green]{answers.project_name}[/green]")
    console.print(f"Language: [green]{'TypeScript' if answers.language == 'typescript' else 'JavaScript'}[/green]")
    console.print(f"Type: [green]{PROJECT_TYPES[answers.project_type]}[/green]")
    for feature in answers.features:
        console.print(f"  [green]✓[/green] {FEATURE_LABELS[feature]}")


def ask_init_answers(logger: ConsoleLogger) -> InitAnswers | None:
    """Run the interactive questions on the calling thread.

    Returns ``None`` when the user cancels, with Ctrl+C, end of input or a
    "no" at the final confirmation.
    """
    console = logger.console
    try:
        answers = collect_answers(console)
        print_answers(answers, console)
        proceed = Confirm.ask("Create project with these settings?", default=True, console=console)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Project creation cancelled.[/yellow]")
        return None

    if not proceed:
        console.print("[yellow]Project creation cancelled.[/yellow]")
        return None
    return answers


async def init_project(answers: InitAnswers, logger: ConsoleLogger) -> ResolvedOptions:
    """Run the creation pipeline for answers collected by :func:`ask_init_answers`."""
    logger.verbose = logger.verbose or answers.verbose
    logger.console.print("\n[green]Creating your project...[/green]\n")
    return await create_project(answers.project_name, answers_to_options(answers), logger)
