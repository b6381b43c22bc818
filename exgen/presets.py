"""Built-in preset catalog and the override-layer fold.

A preset is a named, fixed bundle of ``RawOptions``.  Presets are applied as
an explicit, ordered list of override layers folded by :func:`merge_layers`,
so the priority order is data (``PRESET_PRIORITY``) rather than source order.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from exgen.errors import UnknownPresetError
from exgen.models import PRESET_FLAGS, RawOptions


class PresetDefinition(BaseModel):
    """A named option bundle with its human-readable description."""

    model_config = ConfigDict(frozen=True)

    name: str
    title: str
    description: str
    options: RawOptions
    example: str = ""
    flags: tuple[str, ...] = ()
    features: tuple[str, ...] = Field(default=(), description="Display labels")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

PRESET_DEFINITIONS: tuple[PresetDefinition, ...] = (
    PresetDefinition(
        name="light",
        title="Light",
        description="Lightweight structure with essentials (TypeScript, basic structure)",
        options=RawOptions(light=True, typescript=True),
        example="exgen my-app --light",
        flags=("--light",),
        features=("TypeScript", "Minimal Express setup", "Basic routing"),
    ),
    PresetDefinition(
        name="api",
        title="API",
        description="REST API preset with TypeScript, CORS, Helmet, Validation, Tests",
        options=RawOptions(
            api=True,
            typescript=True,
            cors=True,
            helmet=True,
            validation=True,
            test=True,
            no_view=True,
        ),
        example="exgen my-api --api",
        flags=("--ts", "--cors", "--helmet", "--validation", "--test", "--no-view"),
        features=("TypeScript", "CORS middleware", "Helmet security", "Joi validation", "Jest testing"),
    ),
    PresetDefinition(
        name="fullstack",
        title="Fullstack",
        description="Full-stack application with views, authentication, and database",
        options=RawOptions(
            fullstack=True,
            view="ejs",
            css="sass",
            auth=True,
            mongodb=True,
            test=True,
        ),
        example="exgen my-fullstack-app --fullstack",
        flags=("--view", "ejs", "--css", "sass", "--auth", "--mongo", "--test"),
        features=("EJS views", "Sass CSS", "JWT authentication", "MongoDB", "Jest testing"),
    ),
    PresetDefinition(
        name="microservice",
        title="Microservice",
        description="Microservice-ready with Docker, Redis, Tests, and Logging",
        options=RawOptions(
            microservice=True,
            typescript=True,
            docker=True,
            redis=True,
            test=True,
            elk=True,
            no_view=True,
            cors=True,
            helmet=True,
        ),
        example="exgen my-service --microservice",
        flags=("--ts", "--docker", "--redis", "--test", "--elk", "--cors", "--helmet", "--no-view"),
        features=("TypeScript", "Docker containers", "Redis caching", "ELK logging", "Jest testing"),
    ),
    PresetDefinition(
        name="startup",
        title="Startup",
        description="Startup-ready with everything: TypeScript, MongoDB, Auth, Swagger, Docker, Tests",
        options=RawOptions(
            startup=True,
            typescript=True,
            mongodb=True,
            auth=True,
            swagger=True,
            docker=True,
            test=True,
            cors=True,
            helmet=True,
            rate_limit=True,
            validation=True,
        ),
        example="exgen my-startup --startup",
        flags=("--ts", "--mongo", "--auth", "--swagger", "--docker", "--test"),
        features=("TypeScript", "MongoDB", "JWT auth", "Swagger docs", "Docker", "Testing"),
    ),
    PresetDefinition(
        name="min",
        title="Minimal Production",
        description="Minimal production setup (excludes Docker and Swagger)",
        options=RawOptions(min=True, typescript=True, test=True, cors=True, helmet=True),
        example="exgen my-min-app --min",
        flags=("--min",),
        features=("Production optimized", "Security hardened", "Monitoring ready"),
    ),
    PresetDefinition(
        name="prod",
        title="Production",
        description="Full production setup with Docker, Swagger, ELK, Tests",
        options=RawOptions(
            prod=True,
            typescript=True,
            swagger=True,
            docker=True,
            test=True,
            elk=True,
            cors=True,
            helmet=True,
            rate_limit=True,
        ),
        example="exgen my-prod-app --prod",
        flags=("--prod",),
        features=("Docker containers", "Swagger documentation", "ELK logging", "Comprehensive testing"),
    ),
    PresetDefinition(
        name="all",
        title="All Features",
        description="Every feature except database, Docker and Swagger",
        options=RawOptions(
            all=True,
            typescript=True,
            cors=True,
            helmet=True,
            rate_limit=True,
            validation=True,
            test=True,
            elk=True,
        ),
        example="exgen my-app --all",
        flags=("--all",),
        features=("TypeScript", "CORS", "Helmet", "Rate limiting", "Joi validation", "Jest testing", "ELK logging"),
    ),
)

# Presets are applied in this order; a later preset's keys win on conflict.
PRESET_PRIORITY: tuple[str, ...] = PRESET_FLAGS

_BY_NAME: dict[str, PresetDefinition] = {p.name: p for p in PRESET_DEFINITIONS}


def get_preset(name: str) -> PresetDefinition:
    """Look up a built-in preset by name.

    Raises:
        UnknownPresetError: If *name* is not in the catalog.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownPresetError(name, list(_BY_NAME)) from None


def preset_names() -> list[str]:
    """Names of all built-in presets, in priority order."""
    return list(PRESET_PRIORITY)


# ---------------------------------------------------------------------------
# Layer fold
# ---------------------------------------------------------------------------

# Keys that cancel each other: a layer turning one on drops the other from
# the layers below it.
EXCLUSIVE_KEYS: dict[str, str] = {
    "typescript": "javascript",
    "javascript": "typescript",
    "view": "no_view",
    "no_view": "view",
}


def merge_layers(layers: list[RawOptions]) -> RawOptions:
    """Fold override layers left to right into one ``RawOptions``.

    Each layer's non-``None`` fields overwrite the accumulator (shallow key
    overwrite), so the last layer to set a key wins.  A layer that switches on
    one of :data:`EXCLUSIVE_KEYS` also removes its counterpart inherited from
    earlier layers; both survive only when the same layer sets both.
    """
    merged: dict[str, object] = {}
    for layer in layers:
        values = layer.explicit()
        for key, value in values.items():
            if value and key in EXCLUSIVE_KEYS:
                merged.pop(EXCLUSIVE_KEYS[key], None)
        merged.update(values)
    return RawOptions(**merged)


def preset_layers(options: RawOptions) -> list[RawOptions]:
    """Return the override layers for every active built-in preset, in priority order."""
    return [get_preset(name).options for name in options.active_presets()]


def apply_presets(options: RawOptions) -> RawOptions:
    """Apply the active built-in presets, then re-apply *options* on top.

    Explicit values therefore always take final precedence over anything a
    preset sets.
    """
    return merge_layers([options, *preset_layers(options), options])
