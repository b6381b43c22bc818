"""Command-line entry point for exgen.

Usage::

    exgen <project-name> [flags]      create a project
    exgen                             interactive setup
    exgen init                        interactive setup
    exgen presets [--details NAME]    browse presets
    exgen config <action> [PATH]      manage configuration
    exgen info                        environment report

Every flag that feeds option resolution defaults to ``None`` so the resolver
can tell an explicit ``--js`` apart from "not given".
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Sequence

from exgen import __version__
from exgen.commands.config import ACTIONS as CONFIG_ACTIONS
from exgen.commands.config import run_config_command
from exgen.commands.create import create_project
from exgen.commands.info import show_info
from exgen.commands.init import ask_init_answers, init_project
from exgen.commands.presets import list_presets, preset_flags, show_preset_details
from exgen.config import load_config
from exgen.constants import SUPPORTED_CSS_ENGINES, SUPPORTED_VIEW_ENGINES
from exgen.errors import ExgenError
from exgen.logger import ConsoleLogger
from exgen.models import RawOptions

SUBCOMMANDS: tuple[str, ...] = ("init", "presets", "config", "info")

EPILOG = (
    "Examples:\n"
    "  exgen my-app\n"
    "  exgen my-api --api\n"
    "  exgen my-app --ts --mongo --auth --docker\n"
    "  exgen my-app --view pug --css sass --test\n"
    "  exgen my-app --preset quick-api\n"
    "  exgen presets --details startup\n"
)


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def _flag(group: Any, *names: str, dest: str, help: str) -> None:
    """Add a tri-state boolean flag: ``True`` when given, ``None`` otherwise."""
    group.add_argument(*names, dest=dest, action="store_const", const=True, default=None, help=help)


def build_parser() -> argparse.ArgumentParser:
    """Parser for ``exgen <project-name> [flags]``."""
    parser = argparse.ArgumentParser(
        prog="exgen",
        description="EXGEN -- Express application generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("project_name", nargs="?", help="Name of the project directory to create")
    parser.add_argument("-v", "--version", action="version", version=f"exgen {__version__}")

    generator = parser.add_argument_group("express-generator options")
    generator.add_argument(
        "--view", default=None, metavar="ENGINE",
        help=f"View engine ({', '.join(SUPPORTED_VIEW_ENGINES)})",
    )
    generator.add_argument(
        "--css", default=None, metavar="ENGINE",
        help=f"CSS engine ({', '.join(SUPPORTED_CSS_ENGINES)})",
    )
    _flag(generator, "--no-view", dest="no_view", help="Generate without a view engine")
    _flag(generator, "--git", dest="git", help="Initialize a git repository")

    presets = parser.add_argument_group("presets")
    _flag(presets, "--light", dest="light", help="Lightweight TypeScript setup")
    _flag(presets, "--api", dest="api", help="REST API with CORS, Helmet, validation and tests")
    _flag(presets, "--fullstack", dest="fullstack", help="Views, authentication and MongoDB")
    _flag(presets, "--microservice", dest="microservice", help="Docker, Redis, tests and logging")
    _flag(presets, "--startup", dest="startup", help="Everything a startup MVP needs")
    _flag(presets, "--min", dest="min", help="Minimal production setup")
    _flag(presets, "--prod", dest="prod", help="Full production setup")
    _flag(presets, "--all", dest="all", help="Every feature except database, Docker and Swagger")
    presets.add_argument("--preset", default=None, metavar="NAME", help="Use a custom preset from the config file")

    language = parser.add_argument_group("language")
    _flag(language, "--ts", "--typescript", dest="typescript", help="Generate TypeScript")
    _flag(language, "--js", "--javascript", dest="javascript", help="Generate JavaScript")

    features = parser.add_argument_group("features")
    _flag(features, "--mongo", "--mongodb", dest="mongodb", help="MongoDB with Mongoose")
    _flag(features, "--pg", "--postgres", dest="postgres", help="PostgreSQL with Sequelize")
    _flag(features, "--redis", dest="redis", help="Redis client")
    _flag(features, "--swagger", dest="swagger", help="Swagger/OpenAPI documentation")
    _flag(features, "--docker", dest="docker", help="Dockerfiles and Compose files")
    _flag(features, "--test", dest="test", help="Jest and Supertest")
    _flag(features, "--elk", dest="elk", help="Winston logging to Elasticsearch")
    _flag(features, "--auth", dest="auth", help="JWT authentication")
    _flag(features, "--cors", dest="cors", help="CORS middleware")
    _flag(features, "--helmet", dest="helmet", help="Helmet security headers")
    _flag(features, "--rate-limit", dest="rate_limit", help="Rate limiting")
    _flag(features, "--validation", dest="validation", help="Joi request validation")

    control = parser.add_argument_group("pipeline control")
    _flag(control, "--skip-install", dest="skip_install", help="Do not install dependencies")
    _flag(control, "--skip-git", dest="skip_git", help="Do not initialize git")
    _flag(control, "--verbose", dest="verbose", help="Show debug output")
    _flag(control, "--dry-run", dest="dry_run", help="Show what would be created without writing files")
    control.add_argument("--init", action="store_true", help="Run the interactive setup")

    return parser


def build_subcommand_parser() -> argparse.ArgumentParser:
    """Parser for the ``init``, ``presets``, ``config`` and ``info`` sub-commands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Show debug output")

    parser = argparse.ArgumentParser(prog="exgen")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", parents=[common], help="Interactive project setup")

    presets = sub.add_parser("presets", parents=[common], help="List available presets")
    presets.add_argument("--list", action="store_true", help="List all presets (default)")
    presets.add_argument("--details", metavar="NAME", help="Show the features of one preset")
    presets.add_argument("--flags", metavar="NAME", help="Print the flags a preset stands for")

    config = sub.add_parser("config", parents=[common], help="Manage exgen configuration")
    config.add_argument("action", choices=CONFIG_ACTIONS)
    config.add_argument("path", nargs="?", help="File for export/import")

    sub.add_parser("info", parents=[common], help="Show system information")
    return parser


def raw_options_from_args(args: argparse.Namespace) -> RawOptions:
    """Collect the flags that were actually given into ``RawOptions``."""
    values = {
        name: value
        for name, value in vars(args).items()
        if name in RawOptions.model_fields and value is not None
    }
    return RawOptions(**values)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


# Options of the create parser that consume the next argument.
VALUE_OPTIONS: frozenset[str] = frozenset({"--view", "--css", "--preset"})


def find_subcommand(argv: Sequence[str]) -> int | None:
    """Index of the sub-command named by the first positional argument, if any."""
    skip = False
    for index, arg in enumerate(argv):
        if skip:
            skip = False
            continue
        if arg.startswith("-"):
            skip = arg in VALUE_OPTIONS
            continue
        return index if arg in SUBCOMMANDS else None
    return None


def _run_presets(args: argparse.Namespace, logger: ConsoleLogger) -> None:
    config = load_config(logger=logger)
    if args.flags:
        logger.console.print(preset_flags(args.flags, config), markup=False)
    if args.details:
        show_preset_details(args.details, logger, config)
    if args.list or not (args.flags or args.details):
        list_presets(logger, config)


async def _run_subcommand(args: argparse.Namespace, logger: ConsoleLogger) -> int:
    if args.command == "presets":
        _run_presets(args, logger)
    elif args.command == "config":
        run_config_command(args.action, logger, args.path)
    elif args.command == "info":
        result = await show_info(logger, load_config(logger=logger))
        return 0 if result.valid else 1
    return 0


async def _run_create(args: argparse.Namespace, logger: ConsoleLogger) -> int:
    await create_project(args.project_name, raw_options_from_args(args), logger, preset=args.preset)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run exgen and return the process exit code.

    Interactive questions are asked before the event loop starts so that
    Ctrl+C reaches the blocking prompt as ``KeyboardInterrupt``.
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    index = find_subcommand(argv)
    command = argv.pop(index) if index is not None else None
    if command is not None:
        args = build_subcommand_parser().parse_args([command, *argv])
        logger = ConsoleLogger(verbose=args.verbose)
        interactive = command == "init"
    else:
        args = build_parser().parse_args(argv)
        logger = ConsoleLogger(verbose=bool(args.verbose))
        interactive = args.init or args.project_name is None

    try:
        if interactive:
            answers = ask_init_answers(logger)
            if answers is None:
                return 0
            runner = init_project(answers, logger)
        elif command is not None:
            runner = _run_subcommand(args, logger)
        else:
            runner = _run_create(args, logger)
        return asyncio.run(runner)
    except KeyboardInterrupt:
        logger.console.print("\n[yellow]Operation cancelled.[/yellow]")
        return 1
    except ExgenError as exc:
        logger.exception(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
