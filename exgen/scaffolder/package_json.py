"""``package.json`` manifest construction.

The dependency sections come from the same pure functions the installer
uses, so the manifest and the install command always agree.
"""

from __future__ import annotations

from typing import Any

from exgen.installer import (
    get_required_dependencies,
    get_required_dev_dependencies,
    versioned,
)
from exgen.models import ResolvedOptions

NODE_ENGINE = ">=18"


def build_scripts(options: ResolvedOptions) -> dict[str, str]:
    """The ``scripts`` section for *options*."""
    if options.is_typescript:
        scripts = {
            "start": "node dist/bin/www.js",
            "dev": "tsx watch src/bin/www.ts",
            "build": "tsc",
            "type-check": "tsc --noEmit",
        }
    else:
        scripts = {
            "start": "node src/bin/www.js",
            "dev": "nodemon src/bin/www.js",
        }

    if options.test:
        scripts.update({
            "test": "jest",
            "test:watch": "jest --watch",
            "test:coverage": "jest --coverage",
        })
    if options.postgres:
        scripts["db:migrate"] = "sequelize-cli db:migrate"
    if options.docker:
        scripts.update({
            "docker:up": "docker compose up -d",
            "docker:dev": "docker compose -f docker-compose.dev.yml up",
        })
    return scripts


def build_package_json(
    options: ResolvedOptions,
    author: str = "",
    license: str = "MIT",
) -> dict[str, Any]:
    """Build the manifest for *options* as a JSON-ready dict."""
    keywords = ["express", "nodejs", "typescript" if options.is_typescript else "javascript"]
    if options.no_view or options.view_engine is None:
        keywords.append("api")

    return {
        "name": options.project_name,
        "version": "1.0.0",
        "private": True,
        "description": f"Express application {options.project_name}",
        "main": "dist/app.js" if options.is_typescript else "src/app.js",
        "scripts": build_scripts(options),
        "keywords": keywords,
        "author": author,
        "license": license,
        "engines": {"node": NODE_ENGINE},
        "dependencies": versioned(get_required_dependencies(options)),
        "devDependencies": versioned(get_required_dev_dependencies(options)),
    }
