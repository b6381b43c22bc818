"""Tests for Docker file generation.

Covers:
- Backing-service selection for the Compose file
- Which files are written and exclusion
- Rendered Compose content (parsed with PyYAML)
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from exgen.scaffolder.docker_gen import DockerGenerator, compose_services
from exgen.scaffolder.generator import build_context
from exgen.scaffolder.templates import TemplateRenderer


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_renderer() -> MagicMock:
    """A mock TemplateRenderer that tracks render_to_file calls."""
    renderer = MagicMock(spec=TemplateRenderer)

    async def mock_render_to_file(template_path: str, output_path, context):
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(f"# Rendered from {template_path}\n", encoding="utf-8")
        return out

    renderer.render_to_file = AsyncMock(side_effect=mock_render_to_file)
    return renderer


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestComposeServices:

    def test_no_services(self):
        assert compose_services({}) == {"services": [], "volumes": []}

    def test_all_services(self):
        result = compose_services({"mongodb": True, "postgres": True, "redis": True, "elk": True})
        assert result["services"] == ["mongodb", "postgres", "redis", "elasticsearch"]
        assert result["volumes"] == ["mongodb_data", "postgres_data", "redis_data", "elasticsearch_data"]


class TestDockerGenerator:

    async def test_generates_all_files(self, mock_renderer, tmp_path: Path):
        generator = DockerGenerator(mock_renderer)
        result = await generator.generate_all(tmp_path, {"project_name": "x"})

        assert list(result) == generator.outputs()
        assert (tmp_path / "Dockerfile").is_file()
        assert mock_renderer.render_to_file.await_count == 5

    async def test_context_carries_services(self, mock_renderer, tmp_path: Path):
        await DockerGenerator(mock_renderer).generate_all(tmp_path, {"redis": True})
        context = mock_renderer.render_to_file.await_args_list[0].args[2]
        assert context["services"] == ["redis"]

    async def test_exclude(self, mock_renderer, tmp_path: Path):
        result = await DockerGenerator(mock_renderer).generate_all(
            tmp_path, {}, exclude={"Dockerfile.dev", "docker-compose.dev.yml"}
        )
        assert set(result) == {"Dockerfile", ".dockerignore", "docker-compose.yml"}


class TestRenderedCompose:

    async def test_compose_is_valid_yaml(self, tmp_path: Path, resolved_factory):
        options = resolved_factory(
            tmp_path / "svc", is_typescript=True, docker=True, mongodb=True, redis=True
        )
        generator = DockerGenerator(TemplateRenderer())
        files = await generator.generate_all(options.project_path, build_context(options))

        compose = yaml.safe_load(files["docker-compose.yml"].read_text())
        assert set(compose["services"]) == {"app", "mongodb", "redis"}
        assert compose["services"]["app"]["depends_on"] == ["mongodb", "redis"]
        assert set(compose["volumes"]) == {"mongodb_data", "redis_data"}

        dev = yaml.safe_load(files["docker-compose.dev.yml"].read_text())
        assert "app" in dev["services"]

    async def test_typescript_dockerfile_is_multi_stage(self, tmp_path: Path, resolved_factory):
        options = resolved_factory(tmp_path / "svc", is_typescript=True, docker=True)
        files = await DockerGenerator(TemplateRenderer()).generate_all(
            options.project_path, build_context(options)
        )
        dockerfile = files["Dockerfile"].read_text()
        assert dockerfile.count("FROM ") >= 2
        assert "HEALTHCHECK" in dockerfile
