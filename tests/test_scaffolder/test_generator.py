"""Tests for the ProjectGenerator and its file catalog."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from exgen.config import ExgenConfig, TemplatesConfig
from exgen.errors import GenerationError
from exgen.scaffolder import FILE_CATALOG, ProjectGenerator
from exgen.scaffolder.generator import build_context


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Catalog and plan
# ---------------------------------------------------------------------------

class TestPlan:

    def test_javascript_plan(self, js_options):
        plan = ProjectGenerator(js_options).plan()

        assert plan[0] == "package.json"
        assert "src/app.js" in plan
        assert "src/bin/www.js" in plan
        assert "views/index.ejs" in plan
        assert "tsconfig.json" not in plan
        assert not any(p.endswith(".ts") for p in plan)

    def test_typescript_plan(self, ts_options):
        plan = ProjectGenerator(ts_options).plan()

        assert "src/app.ts" in plan
        assert "tsconfig.json" in plan
        assert "jest.config.js" in plan
        assert "tests/integration/app.test.ts" in plan
        assert not any(p.startswith("views/") for p in plan)

    def test_feature_files(self, tmp_path: Path, resolved_factory):
        options = resolved_factory(
            tmp_path / "app", auth=True, mongodb=True, redis=True, swagger=True, elk=True,
            validation=True, docker=True, css="stylus", css_engine="stylus",
        )
        plan = ProjectGenerator(options).plan()
        for expected in (
            "src/api/middleware/auth.js",
            "src/api/middleware/validation.js",
            "src/config/database.js",
            "src/config/redis.js",
            "src/config/swagger.js",
            "src/models/User.js",
            "src/utils/jwt.js",
            "src/utils/logger.js",
            "public/stylesheets/style.styl",
            "Dockerfile",
            "docker-compose.yml",
        ):
            assert expected in plan

    def test_every_project_gets_the_basics(self, js_options):
        plan = ProjectGenerator(js_options).plan()
        for expected in (".env", ".env.example", "README.md", ".gitignore", "src/config/index.js"):
            assert expected in plan

    def test_exclude(self, ts_options):
        config = ExgenConfig(templates=TemplatesConfig(exclude=["README.md", "package.json"]))
        plan = ProjectGenerator(ts_options, config=config).plan()
        assert "README.md" not in plan
        assert "package.json" not in plan

    def test_hogan_view_extension(self, tmp_path: Path, resolved_factory):
        options = resolved_factory(tmp_path / "app", view="hogan", view_engine="hogan")
        assert "views/index.hjs" in ProjectGenerator(options).plan()

    def test_catalog_templates_exist(self):
        renderer_dir = Path(__file__).resolve().parents[2] / "exgen" / "scaffolder" / "templates"
        for entry in FILE_CATALOG:
            assert (renderer_dir / entry.template).is_file(), entry.template


class TestDirectories:

    def test_optional_directories(self, tmp_path: Path, resolved_factory):
        options = resolved_factory(
            tmp_path / "app", view="ejs", view_engine="ejs", test=True, elk=True
        )
        dirs = ProjectGenerator(options).directories()
        assert {"src/api/routes", "views", "tests/unit", "logs"} <= set(dirs)


class TestBuildContext:

    def test_context_keys(self, ts_options):
        context = build_context(ts_options)
        assert context["ext"] == "ts"
        assert context["run_dev"] == "npm run dev"
        assert context["install_script"] == "npm install"
        assert context["license"] == "MIT"
        assert len(context["jwt_secret"]) == 64


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class TestGenerate:

    async def test_writes_every_planned_file(self, ts_options, recording_logger):
        generator = ProjectGenerator(ts_options, logger=recording_logger)
        written = await generator.generate()

        root = ts_options.project_path
        assert [p.relative_to(root).as_posix() for p in written] == generator.plan()
        for path in written:
            assert path.is_file()
        assert "Created package.json" in recording_logger.messages("debug")

    async def test_package_json_is_valid(self, ts_options):
        await ProjectGenerator(ts_options).generate()
        manifest = json.loads((ts_options.project_path / "package.json").read_text())
        assert manifest["name"] == "ts-api"
        assert "express" in manifest["dependencies"]

    async def test_custom_template_is_used(self, ts_options, tmp_path: Path, recording_logger):
        custom = tmp_path / "templates"
        custom.mkdir()
        (custom / "README.md.j2").write_text("# {{ project_name }} (house style)\n")
        config = ExgenConfig(templates=TemplatesConfig(path=custom))

        await ProjectGenerator(ts_options, config=config, logger=recording_logger).generate()

        readme = (ts_options.project_path / "README.md").read_text()
        assert readme == "# ts-api (house style)\n"
        assert "Created README.md (custom template)" in recording_logger.messages("debug")

    async def test_write_failure_raises_generation_error(self, ts_options):
        root = ts_options.project_path
        root.mkdir(parents=True)
        # A directory where a file must go makes the write fail.
        (root / "README.md").mkdir()

        with pytest.raises(GenerationError) as exc_info:
            await ProjectGenerator(ts_options).generate()

        assert exc_info.value.path == "README.md"
        # No rollback: earlier files stay.
        assert (root / "package.json").is_file()

    async def test_broken_custom_template(self, ts_options, tmp_path: Path):
        custom = tmp_path / "templates"
        custom.mkdir()
        (custom / "README.md.j2").write_text("{% if %}\n")
        config = ExgenConfig(templates=TemplatesConfig(path=custom))

        with pytest.raises(GenerationError, match="Failed to generate README.md"):
            await ProjectGenerator(ts_options, config=config).generate()
