"""exgen -- Express application generator.

Resolves CLI flags, config-file defaults and named presets into one immutable
``ResolvedOptions`` record, validates it, and materialises an Express project
(JavaScript or TypeScript) from a catalog of Jinja2 templates.

Quick usage::

    from exgen.models import RawOptions
    from exgen.resolver import resolve_options

    resolved = await resolve_options("demo-api", "/tmp/demo-api", RawOptions(api=True))
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
