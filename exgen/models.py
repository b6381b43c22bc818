"""Pydantic v2 models for exgen option resolution.

Defines the option records that flow through a project-creation run:

* ``RawOptions`` -- user intent from flags, a config file, or a preset bundle.
  Every field is optional; ``None`` means "not supplied", which is what lets
  explicit flags be told apart from defaults.
* ``ResolvedOptions`` -- the single immutable configuration consumed by the
  validator, materialiser, installer and git initializer.
* ``ValidationResult`` -- the outcome of one validation check.
* ``FeatureToggle`` -- a ``{feature, enabled}`` pair over the closed
  ``Feature`` enumeration, used by the interactive front end.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PackageManager(str, Enum):
    """Package managers the installer knows how to drive."""
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


class Language(str, Enum):
    """Language of the generated project."""
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


class Feature(str, Enum):
    """Independent boolean feature toggles.

    Values are the ``RawOptions`` field names they switch on or off.
    """
    SWAGGER = "swagger"
    DOCKER = "docker"
    MONGODB = "mongodb"
    POSTGRES = "postgres"
    REDIS = "redis"
    TEST = "test"
    ELK = "elk"
    AUTH = "auth"
    CORS = "cors"
    HELMET = "helmet"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"


FEATURE_LABELS: dict[Feature, str] = {
    Feature.SWAGGER: "Swagger/OpenAPI Documentation",
    Feature.DOCKER: "Docker Support",
    Feature.MONGODB: "MongoDB (Mongoose)",
    Feature.POSTGRES: "PostgreSQL (Sequelize)",
    Feature.REDIS: "Redis Support",
    Feature.TEST: "Testing Setup (Jest + Supertest)",
    Feature.ELK: "Logging (Winston + ELK)",
    Feature.AUTH: "JWT Authentication",
    Feature.CORS: "CORS Middleware",
    Feature.HELMET: "Helmet Security",
    Feature.RATE_LIMIT: "Rate Limiting",
    Feature.VALIDATION: "Joi Validation",
}

# Names of the RawOptions fields that activate a built-in preset.
PRESET_FLAGS: tuple[str, ...] = (
    "light",
    "api",
    "fullstack",
    "microservice",
    "startup",
    "min",
    "prod",
    "all",
)


# ---------------------------------------------------------------------------
# Option records
# ---------------------------------------------------------------------------

class RawOptions(BaseModel):
    """Feature intent supplied by flags, a config file, or a preset bundle.

    Field names are snake_case; the camelCase names used by ``.exgenrc`` files
    (``noView``, ``rateLimit``, ``skipInstall`` ...) are accepted as aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    # Express-generator compatible
    view: Optional[str] = Field(default=None, description="View engine name")
    css: Optional[str] = Field(default=None, description="CSS engine name")
    git: Optional[bool] = Field(default=None, description="Create a git repository")
    no_view: Optional[bool] = Field(default=None, alias="noView")

    # Presets
    light: Optional[bool] = None
    api: Optional[bool] = None
    fullstack: Optional[bool] = None
    microservice: Optional[bool] = None
    startup: Optional[bool] = None
    min: Optional[bool] = None
    prod: Optional[bool] = None
    all: Optional[bool] = None

    # Language
    typescript: Optional[bool] = None
    javascript: Optional[bool] = None

    # Features
    swagger: Optional[bool] = None
    docker: Optional[bool] = None
    mongodb: Optional[bool] = None
    postgres: Optional[bool] = None
    redis: Optional[bool] = None
    test: Optional[bool] = None
    elk: Optional[bool] = None
    auth: Optional[bool] = None
    cors: Optional[bool] = None
    helmet: Optional[bool] = None
    rate_limit: Optional[bool] = Field(default=None, alias="rateLimit")
    validation: Optional[bool] = None

    # Pipeline control (never affects generated content)
    skip_install: Optional[bool] = Field(default=None, alias="skipInstall")
    skip_git: Optional[bool] = Field(default=None, alias="skipGit")
    verbose: Optional[bool] = None
    dry_run: Optional[bool] = Field(default=None, alias="dryRun")

    def explicit(self) -> dict[str, object]:
        """Return only the fields that carry a value, keyed by field name."""
        return self.model_dump(exclude_none=True)

    def active_presets(self) -> list[str]:
        """Names of the built-in presets switched on, in priority order."""
        return [name for name in PRESET_FLAGS if getattr(self, name)]

    def with_toggles(self, toggles: Iterable[FeatureToggle]) -> RawOptions:
        """Return a copy with each toggle's feature set to its ``enabled`` value."""
        update = {toggle.feature.value: toggle.enabled for toggle in toggles}
        return self.model_copy(update=update)


class FeatureToggle(BaseModel):
    """One ``{feature, enabled}`` selection made by the interactive front end."""

    model_config = ConfigDict(frozen=True)

    feature: Feature
    enabled: bool = True


class ResolvedOptions(RawOptions):
    """The authoritative, immutable configuration for one project-creation run."""

    project_name: str
    project_path: Path
    package_manager: PackageManager = PackageManager.NPM
    is_typescript: bool = False
    features: tuple[str, ...] = ()
    view_engine: Optional[str] = None
    css_engine: Optional[str] = None

    @property
    def language(self) -> Language:
        return Language.TYPESCRIPT if self.is_typescript else Language.JAVASCRIPT

    @property
    def ext(self) -> str:
        """Source file extension without the dot (``"ts"`` or ``"js"``)."""
        return "ts" if self.is_typescript else "js"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Outcome of one validation check.

    Errors are fatal (abort before any filesystem mutation); warnings are
    printed and execution continues.
    """

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Return a new result holding the errors and warnings of both."""
        return ValidationResult(
            valid=self.valid and other.valid,
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *other.warnings],
        )
