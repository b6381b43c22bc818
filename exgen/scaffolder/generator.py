"""Project materialisation.

Takes a ``ResolvedOptions`` record and writes a complete Express project:
the directory skeleton, ``package.json``, and every template in
``FILE_CATALOG`` whose condition holds.  Docker files are delegated to
:class:`DockerGenerator`.

The catalog is data: each entry names a template, an output path pattern and
an optional predicate over the resolved options.  :meth:`ProjectGenerator.plan`
walks the same catalog without touching the filesystem, which is what
``--dry-run`` prints.
"""

from __future__ import annotations

import asyncio
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import TemplateError

from exgen.config import ExgenConfig
from exgen.constants import BASE_DIRECTORIES
from exgen.errors import GenerationError
from exgen.installer import get_install_script, get_run_script
from exgen.logger import Logger
from exgen.models import ResolvedOptions
from exgen.utils import save_json

from .docker_gen import DockerGenerator
from .package_json import build_package_json
from .templates import TemplateRenderer

NODE_VERSION = "18"

# View engine -> file extension of its templates (also the ``view engine`` setting).
VIEW_FILE_EXTENSIONS: dict[str, str] = {
    "ejs": "ejs",
    "pug": "pug",
    "hbs": "hbs",
    "hogan": "hjs",
    "mustache": "mustache",
    "handlebars": "handlebars",
}

# CSS engine -> stylesheet extension.
CSS_FILE_EXTENSIONS: dict[str, str] = {
    "sass": "scss",
    "scss": "scss",
    "less": "less",
    "stylus": "styl",
    "compass": "scss",
}

Condition = Callable[[ResolvedOptions], bool]


# ---------------------------------------------------------------------------
# File catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CatalogEntry:
    """One generated file.

    ``output`` may contain ``{ext}``, ``{view_ext}`` and ``{css_ext}``
    placeholders.  ``extra`` is merged into the template context for this
    entry only.
    """

    template: str
    output: str
    condition: Optional[Condition] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def applies(self, options: ResolvedOptions) -> bool:
        return self.condition is None or self.condition(options)


def _has_database(options: ResolvedOptions) -> bool:
    return bool(options.mongodb or options.postgres)


FILE_CATALOG: tuple[CatalogEntry, ...] = (
    # Application
    CatalogEntry("src/app.j2", "src/app.{ext}"),
    CatalogEntry("src/bin/www.j2", "src/bin/www.{ext}"),
    CatalogEntry("src/api/routes/index.j2", "src/api/routes/index.{ext}"),
    CatalogEntry("src/api/routes/users.j2", "src/api/routes/users.{ext}"),
    CatalogEntry("src/api/middleware/error.j2", "src/api/middleware/error.{ext}"),
    CatalogEntry("src/api/middleware/auth.j2", "src/api/middleware/auth.{ext}", lambda o: bool(o.auth)),
    CatalogEntry(
        "src/api/middleware/validation.j2",
        "src/api/middleware/validation.{ext}",
        lambda o: bool(o.validation),
    ),
    # Configuration
    CatalogEntry("src/config/index.j2", "src/config/index.{ext}"),
    CatalogEntry("src/config/database.j2", "src/config/database.{ext}", _has_database),
    CatalogEntry("src/config/redis.j2", "src/config/redis.{ext}", lambda o: bool(o.redis)),
    CatalogEntry("src/config/swagger.j2", "src/config/swagger.{ext}", lambda o: bool(o.swagger)),
    # Models and utilities
    CatalogEntry("src/models/User.j2", "src/models/User.{ext}", _has_database),
    CatalogEntry("src/utils/jwt.j2", "src/utils/jwt.{ext}", lambda o: bool(o.auth)),
    CatalogEntry("src/utils/logger.j2", "src/utils/logger.{ext}", lambda o: bool(o.elk)),
    # Tooling
    CatalogEntry("tsconfig.json.j2", "tsconfig.json", lambda o: o.is_typescript),
    CatalogEntry("jest.config.js.j2", "jest.config.js", lambda o: bool(o.test)),
    CatalogEntry("tests/setup.j2", "tests/setup.{ext}", lambda o: bool(o.test)),
    CatalogEntry("tests/app.test.j2", "tests/integration/app.test.{ext}", lambda o: bool(o.test)),
    # Environment and docs
    CatalogEntry("env.j2", ".env", extra={"example": False}),
    CatalogEntry("env.j2", ".env.example", extra={"example": True}),
    CatalogEntry("README.md.j2", "README.md"),
    # Front end
    CatalogEntry("views/index.j2", "views/index.{view_ext}", lambda o: o.view_engine is not None),
    CatalogEntry(
        "public/stylesheets/style.j2",
        "public/stylesheets/style.{css_ext}",
        lambda o: o.css_engine is not None,
    ),
    CatalogEntry("gitignore.j2", ".gitignore"),
)

PACKAGE_JSON = "package.json"


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def build_context(options: ResolvedOptions, config: ExgenConfig | None = None) -> dict[str, Any]:
    """Build the Jinja2 template context from the resolved options."""
    config = config or ExgenConfig()
    manager = options.package_manager

    context: dict[str, Any] = options.model_dump()
    context.update({
        "ext": options.ext,
        "view_engine_name": VIEW_FILE_EXTENSIONS.get(options.view_engine or "", options.view_engine),
        "view_ext": VIEW_FILE_EXTENSIONS.get(options.view_engine or "", options.view_engine),
        "css_ext": CSS_FILE_EXTENSIONS.get(options.css_engine or "", "css"),
        "node_version": NODE_VERSION,
        "install_script": get_install_script(manager),
        "run_dev": get_run_script(manager, "dev"),
        "run_start": get_run_script(manager, "start"),
        "run_build": get_run_script(manager, "build"),
        "run_test": get_run_script(manager, "test"),
        "author": config.author,
        "license": config.license,
        "jwt_secret": secrets.token_hex(32),
        "example": False,
    })
    return context


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Writes an Express project for one ``ResolvedOptions`` record.

    ``config.templates.path`` is searched before the built-in templates and
    outputs listed in ``config.templates.exclude`` are never written.
    """

    def __init__(
        self,
        options: ResolvedOptions,
        config: ExgenConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.options = options
        self.config = config or ExgenConfig()
        self.logger = logger
        self.exclude = set(self.config.templates.exclude)
        self.renderer = TemplateRenderer(custom_dir=self.config.templates.path)
        self.docker_gen = DockerGenerator(self.renderer)

    # -- Public API --------------------------------------------------------

    def entries(self) -> list[tuple[CatalogEntry, str]]:
        """Catalog entries that apply, paired with their concrete output path."""
        names = {
            "ext": self.options.ext,
            "view_ext": VIEW_FILE_EXTENSIONS.get(self.options.view_engine or "", ""),
            "css_ext": CSS_FILE_EXTENSIONS.get(self.options.css_engine or "", "css"),
        }
        selected: list[tuple[CatalogEntry, str]] = []
        for entry in FILE_CATALOG:
            if not entry.applies(self.options):
                continue
            output = entry.output.format(**names)
            if output in self.exclude:
                continue
            selected.append((entry, output))
        return selected

    def plan(self) -> list[str]:
        """Relative paths of every file :meth:`generate` would write, in order."""
        paths = [] if PACKAGE_JSON in self.exclude else [PACKAGE_JSON]
        paths.extend(output for _, output in self.entries())
        if self.options.docker:
            paths.extend(p for p in self.docker_gen.outputs() if p not in self.exclude)
        return paths

    def directories(self) -> list[str]:
        """Directories created before any file is written."""
        dirs = list(BASE_DIRECTORIES)
        if self.options.view_engine is not None:
            dirs.append("views")
        if self.options.test:
            dirs.extend(["tests", "tests/unit", "tests/integration"])
        if self.options.elk:
            dirs.append("logs")
        return dirs

    async def generate(self) -> list[Path]:
        """Write the project tree.

        Returns:
            Paths of the written files, in :meth:`plan` order.

        Raises:
            GenerationError: On the first file or directory that cannot be
                written.  Files already written are left in place.
        """
        root = self.options.project_path
        context = build_context(self.options, self.config)

        await self._create_directory_structure(root)

        written: list[Path] = []
        if PACKAGE_JSON not in self.exclude:
            written.append(await self._write_package_json(root))

        for entry, output in self.entries():
            entry_ctx = {**context, **entry.extra} if entry.extra else context
            written.append(await self._render(entry.template, root, output, entry_ctx))

        if self.options.docker:
            try:
                docker_files = await self.docker_gen.generate_all(
                    root, context, exclude=self.exclude
                )
            except (OSError, TemplateError) as exc:
                raise GenerationError(f"Failed to generate Docker files: {exc}", path=str(root)) from exc
            written.extend(docker_files.values())
            self._debug(f"Created Docker files: {', '.join(docker_files)}")

        return written

    # -- Internal ----------------------------------------------------------

    async def _create_directory_structure(self, root: Path) -> None:
        """Create the project directory tree."""

        def _mkdirs() -> None:
            for directory in self.directories():
                (root / directory).mkdir(parents=True, exist_ok=True)

        try:
            await asyncio.to_thread(_mkdirs)
        except OSError as exc:
            raise GenerationError(f"Failed to create project directories: {exc}", path=str(root)) from exc

    async def _write_package_json(self, root: Path) -> Path:
        manifest = build_package_json(
            self.options, author=self.config.author, license=self.config.license
        )
        try:
            path = await save_json(manifest, root / PACKAGE_JSON)
        except OSError as exc:
            raise GenerationError(f"Failed to write {PACKAGE_JSON}: {exc}", path=PACKAGE_JSON) from exc
        self._debug(f"Created {PACKAGE_JSON}")
        return path

    async def _render(
        self, template: str, root: Path, output: str, context: dict[str, Any]
    ) -> Path:
        try:
            path = await self.renderer.render_to_file(template, root / output, context)
        except (OSError, TemplateError) as exc:
            raise GenerationError(f"Failed to generate {output}: {exc}", path=output) from exc
        if self.renderer.is_overridden(template):
            self._debug(f"Created {output} (custom template)")
        else:
            self._debug(f"Created {output}")
        return path

    def _debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)
