"""exgen sub-commands: create, init, presets, config and info."""

from exgen.commands.create import create_project
from exgen.commands.info import show_info
from exgen.commands.init import ask_init_answers, init_project

__all__ = [
    "ask_init_answers",
    "create_project",
    "init_project",
    "show_info",
]
