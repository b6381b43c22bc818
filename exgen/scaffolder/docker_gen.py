"""Docker file generation for the generated project.

Uses the ``docker/*.j2`` templates to produce the production and development
Dockerfiles, ``.dockerignore`` and the two Compose files.  Backing services
(MongoDB, PostgreSQL, Redis, Elasticsearch) are added to the production
Compose file according to the enabled features.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .templates import TemplateRenderer


class DockerGenerator:
    """Generates Dockerfiles and Docker Compose files."""

    # Template name -> output file name
    DOCKER_FILES: dict[str, str] = {
        "docker/Dockerfile.j2": "Dockerfile",
        "docker/Dockerfile.dev.j2": "Dockerfile.dev",
        "docker/dockerignore.j2": ".dockerignore",
        "docker/docker-compose.yml.j2": "docker-compose.yml",
        "docker/docker-compose.dev.yml.j2": "docker-compose.dev.yml",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def outputs(self) -> list[str]:
        """Relative paths of every file :meth:`generate_all` writes."""
        return list(self.DOCKER_FILES.values())

    async def generate_all(
        self,
        output_dir: Path,
        context: dict[str, Any],
        *,
        exclude: set[str] | None = None,
    ) -> dict[str, Path]:
        """Generate all Docker files to *output_dir*.

        Args:
            output_dir: Project root directory.
            context: Template rendering context (project_name, features, etc.).
            exclude: Output names that must not be written.

        Returns:
            Mapping of output name to written file path, e.g.
            ``{"Dockerfile": Path(".../Dockerfile"), ...}``.
        """
        exclude = exclude or set()
        docker_ctx = {**context, **compose_services(context)}

        result: dict[str, Path] = {}
        for template_name, output_name in self.DOCKER_FILES.items():
            if output_name in exclude:
                continue
            result[output_name] = await self.renderer.render_to_file(
                template_name, output_dir / output_name, docker_ctx
            )
        return result


def compose_services(context: dict[str, Any]) -> dict[str, list[str]]:
    """Backing services and named volumes required by the enabled features.

    Examples::

        compose_services({"mongodb": True, "redis": True})
        -> {"services": ["mongodb", "redis"],
            "volumes": ["mongodb_data", "redis_data"]}
    """
    services: list[str] = []
    volumes: list[str] = []
    for feature, service, volume in (
        ("mongodb", "mongodb", "mongodb_data"),
        ("postgres", "postgres", "postgres_data"),
        ("redis", "redis", "redis_data"),
        ("elk", "elasticsearch", "elasticsearch_data"),
    ):
        if context.get(feature):
            services.append(service)
            volumes.append(volume)
    return {"services": services, "volumes": volumes}
