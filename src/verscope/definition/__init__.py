"""
Versioned schema definition documents.

YAML hand-off format between a front-end and the engine: declared versions
plus an element tree with inline ``added`` / ``removed`` / ``renamed``
annotations and references by id or dotted path.

Public API::

    from verscope.definition import (
        # Schema models
        SchemaDefinition,
        ElementSpec,
        RenameSpec,
        # Loader
        DefinitionLoader,
        # Builder
        BuiltSchema,
        build_definition,
        load_and_freeze,
    )
"""

from verscope.definition.builder import BuiltSchema, build_definition, load_and_freeze
from verscope.definition.loader import DefinitionLoader
from verscope.definition.schema import ElementSpec, RenameSpec, SchemaDefinition

__all__ = [
    # Schema
    "SchemaDefinition",
    "ElementSpec",
    "RenameSpec",
    # Loader
    "DefinitionLoader",
    # Builder
    "BuiltSchema",
    "build_definition",
    "load_and_freeze",
]
