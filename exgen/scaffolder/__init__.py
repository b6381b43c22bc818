"""exgen scaffolder -- materialises an Express project from resolved options.

Quick usage::

    from exgen.scaffolder import ProjectGenerator

    generator = ProjectGenerator(resolved_options)
    print(generator.plan())
    written = await generator.generate()
"""

from exgen.scaffolder.generator import FILE_CATALOG, CatalogEntry, ProjectGenerator
from exgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "CatalogEntry",
    "FILE_CATALOG",
    "ProjectGenerator",
    "TemplateRenderer",
]
