"""Tests for the Jinja2 TemplateRenderer."""

from __future__ import annotations

from pathlib import Path

import pytest

from exgen.scaffolder.generator import build_context
from exgen.scaffolder.templates import TemplateRenderer


pytestmark = pytest.mark.unit


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestFilters:

    def test_snake_case(self, renderer: TemplateRenderer):
        template = renderer.env.from_string("{{ name | snake_case }}")
        assert template.render(name="my-cool-app") == "my_cool_app"
        assert template.render(name="MyCoolApp") == "my_cool_app"

    def test_title_case(self, renderer: TemplateRenderer):
        template = renderer.env.from_string("{{ name | title_case }}")
        assert template.render(name="@scope/my_app") == "My App"


class TestRendering:

    def test_typescript_app(self, renderer: TemplateRenderer, ts_options):
        content = renderer.render("src/app.j2", build_context(ts_options))
        assert "import express, { Application } from 'express';" in content
        assert "import cors from 'cors';" in content
        assert "import helmet from 'helmet';" in content
        assert "require('express')" not in content

    def test_javascript_app(self, renderer: TemplateRenderer, js_options):
        content = renderer.render("src/app.j2", build_context(js_options))
        assert "const express = require('express');" in content
        assert "import cors" not in content

    def test_blocks_leave_no_blank_tag_lines(self, renderer: TemplateRenderer, js_options):
        content = renderer.render("src/app.j2", build_context(js_options))
        assert "{%" not in content
        assert "%}" not in content

    def test_env_example_hides_secret(self, renderer: TemplateRenderer, tmp_path: Path, resolved_factory):
        options = resolved_factory(tmp_path / "app", auth=True)
        context = build_context(options)
        real = renderer.render("env.j2", context)
        example = renderer.render("env.j2", {**context, "example": True})

        assert f"JWT_SECRET={context['jwt_secret']}" in real
        assert "JWT_SECRET=change-me-in-production" in example

    @pytest.mark.parametrize("engine, marker", [
        ("ejs", "<%= title %>"),
        ("hbs", "{{title}}"),
        ("pug", "title= title"),
    ])
    def test_view_placeholders(self, renderer: TemplateRenderer, tmp_path: Path, resolved_factory, engine, marker):
        options = resolved_factory(tmp_path / "app", view=engine, view_engine=engine)
        assert marker in renderer.render("views/index.j2", build_context(options))

    async def test_render_to_file_creates_parents(self, renderer: TemplateRenderer, tmp_path: Path):
        out = await renderer.render_to_file("gitignore.j2", tmp_path / "a" / "b" / ".gitignore", {})
        assert out.is_file()
        assert "node_modules/" in out.read_text()


class TestCustomTemplates:

    def test_custom_directory_overrides(self, tmp_path: Path):
        custom = tmp_path / "custom"
        custom.mkdir()
        (custom / "gitignore.j2").write_text("only-this\n")

        renderer = TemplateRenderer(custom_dir=custom)
        assert renderer.render("gitignore.j2", {}) == "only-this\n"
        assert renderer.is_overridden("gitignore.j2")
        assert not renderer.is_overridden("README.md.j2")

    def test_falls_back_to_builtin(self, tmp_path: Path):
        renderer = TemplateRenderer(custom_dir=tmp_path)
        assert "node_modules/" in renderer.render("gitignore.j2", {})
