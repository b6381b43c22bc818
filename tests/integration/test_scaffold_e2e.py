"""Integration tests for the resolve-then-scaffold pipeline.

These tests run the real resolver, validator and materializer end-to-end and
verify that the generated project directory contains valid, well-formed
configuration files.  Package installation and git are skipped; no Node.js
toolchain is required.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from exgen.commands.create import create_project
from exgen.models import RawOptions


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _scaffold(name: str, raw: RawOptions, cwd: Path, logger) -> Path:
    """Create a project with installation and git disabled; return its root."""
    raw = raw.model_copy(update={"skip_install": True, "skip_git": True})
    resolved = await create_project(name, raw, logger, cwd=cwd)
    return resolved.project_path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestScaffoldValidation:
    """Generated projects are complete and well-formed."""

    async def test_startup_project(self, workspace: Path, console_logger, no_package_managers):
        root = await _scaffold("demo-startup", RawOptions(startup=True), workspace, console_logger)

        manifest = json.loads((root / "package.json").read_text())
        assert manifest["name"] == "demo-startup"
        assert manifest["scripts"]["build"] == "tsc"
        for dep in ("express", "mongoose", "jsonwebtoken", "swagger-ui-express", "joi", "helmet"):
            assert dep in manifest["dependencies"]
        assert "typescript" in manifest["devDependencies"]

        compose = yaml.safe_load((root / "docker-compose.yml").read_text())
        assert "mongodb" in compose["services"]

        tsconfig = json.loads((root / "tsconfig.json").read_text())
        assert tsconfig["compilerOptions"]["outDir"] == "./dist"

        for relative in (
            "src/app.ts",
            "src/bin/www.ts",
            "src/config/database.ts",
            "src/config/swagger.ts",
            "src/api/middleware/auth.ts",
            "src/models/User.ts",
            "tests/integration/app.test.ts",
            ".env",
            ".env.example",
            ".gitignore",
            "README.md",
        ):
            assert (root / relative).is_file(), relative

    async def test_fullstack_project_is_javascript(self, workspace: Path, console_logger, no_package_managers):
        root = await _scaffold("shop", RawOptions(fullstack=True), workspace, console_logger)

        assert (root / "src" / "app.js").is_file()
        assert not (root / "tsconfig.json").exists()
        assert (root / "views" / "index.ejs").is_file()
        assert (root / "public" / "stylesheets" / "style.scss").is_file()

        app = (root / "src" / "app.js").read_text()
        assert "app.set('view engine', 'ejs')" in app

        manifest = json.loads((root / "package.json").read_text())
        assert manifest["scripts"]["start"] == "node src/bin/www.js"
        assert "ejs" in manifest["dependencies"]

    async def test_microservice_with_postgres(self, workspace: Path, console_logger, no_package_managers):
        root = await _scaffold(
            "orders", RawOptions(microservice=True, postgres=True), workspace, console_logger
        )

        compose = yaml.safe_load((root / "docker-compose.yml").read_text())
        assert set(compose["services"]) == {"app", "postgres", "redis", "elasticsearch", "kibana"}
        assert set(compose["volumes"]) == {"postgres_data", "redis_data", "elasticsearch_data"}

        env = (root / ".env").read_text()
        assert "DB_HOST=localhost" in env
        assert "REDIS_HOST=localhost" in env
        assert (root / "logs").is_dir()

    async def test_env_example_has_no_generated_secret(self, workspace: Path, console_logger, no_package_managers):
        root = await _scaffold("secure", RawOptions(auth=True), workspace, console_logger)

        env = (root / ".env").read_text()
        example = (root / ".env.example").read_text()
        secret = next(line for line in env.splitlines() if line.startswith("JWT_SECRET="))
        assert secret != "JWT_SECRET=change-me-in-production"
        assert secret not in example
