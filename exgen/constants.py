"""Fixed catalogs shared across exgen: engine allow-lists, file names, layouts."""

from __future__ import annotations

from exgen.models import PackageManager

SUPPORTED_VIEW_ENGINES: tuple[str, ...] = (
    "ejs",
    "pug",
    "hbs",
    "hogan",
    "mustache",
    "handlebars",
)

SUPPORTED_CSS_ENGINES: tuple[str, ...] = (
    "less",
    "sass",
    "scss",
    "stylus",
    "compass",
)

# Lockfile name -> package manager, checked in this order.
LOCKFILES: tuple[tuple[str, PackageManager], ...] = (
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("bun.lockb", PackageManager.BUN),
)

# Executables probed when neither a lockfile nor the config names a manager.
PACKAGE_MANAGER_PROBE_ORDER: tuple[PackageManager, ...] = (
    PackageManager.YARN,
    PackageManager.PNPM,
)

DEFAULT_PACKAGE_MANAGER = PackageManager.NPM

# Searched in every directory from the working directory up to the root.
CONFIG_FILE_NAMES: tuple[str, ...] = (
    ".exgenrc",
    ".exgenrc.json",
    ".exgenrc.yaml",
    ".exgenrc.yml",
    ".exgenrc.js",
    "exgen.config.js",
    "exgen.config.json",
)

USER_CONFIG_DIR = ".exgen"
USER_CONFIG_FILE = "config.json"
CONFIG_ENV_VAR = "EXGEN_CONFIG"

INSTALL_TIMEOUT_SECONDS = 300

MAX_PROJECT_NAME_LENGTH = 214

BASE_DIRECTORIES: tuple[str, ...] = (
    "src",
    "src/api",
    "src/api/routes",
    "src/api/middleware",
    "src/bin",
    "src/config",
    "src/utils",
    "src/models",
    "src/services",
    "public",
    "public/stylesheets",
    "public/javascripts",
    "public/images",
)

REQUIRED_TOOLS: tuple[str, ...] = ("node", "npm")
OPTIONAL_TOOLS: tuple[str, ...] = ("git", "docker", "yarn", "pnpm")

GIT_COMMIT_MESSAGE = "Initial commit: Created with EXGEN"
