"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads ``.j2`` templates from the
``exgen/scaffolder/templates/`` directory and renders them with the context
built from a ``ResolvedOptions`` record.  An optional custom directory is
searched first, so a user can override any built-in template by placing a
file with the same relative name there.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Templates are looked up in *custom_dir* (when given) and then in
    *template_dir*.  Blocks are trimmed so ``{% if %}`` lines do not leave
    blank lines behind in the generated sources.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        custom_dir: str | Path | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.custom_dir = Path(custom_dir).expanduser() if custom_dir else None

        loaders = [FileSystemLoader(str(self.template_dir))]
        if self.custom_dir is not None:
            loaders.insert(0, FileSystemLoader(str(self.custom_dir)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["title_case"] = _title_case_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"src/app.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def is_overridden(self, template_path: str) -> bool:
        """Whether the custom directory supplies *template_path*."""
        return self.custom_dir is not None and (self.custom_dir / template_path).is_file()

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output
        path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s@/.]+", "_", s2).strip("_").lower()


def _title_case_filter(value: str) -> str:
    """Convert ``my-cool-app`` or ``@scope/my_app`` to ``My Cool App``."""
    name = value.rsplit("/", 1)[-1]
    parts = re.split(r"[-_\s.]+", name)
    return " ".join(word.capitalize() for word in parts if word)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
