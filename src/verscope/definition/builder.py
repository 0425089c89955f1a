"""
Builds engine inputs from a ``SchemaDefinition``.

Creates the version registry, walks the element tree into a
``SchemaGraph``, records the inline lifecycle annotations, and resolves
references once every element exists (so forward and recursive
references work).

Usage::

    from verscope.definition.builder import build_definition, load_and_freeze

    built = build_definition(definition)
    bundle = freeze(built.graph, built.lifecycle, built.registry)

    # or in one step from a file
    bundle = load_and_freeze(Path("petstore.versions.yaml"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from verscope.definition.loader import DefinitionLoader
from verscope.definition.schema import ElementSpec, SchemaDefinition
from verscope.freeze import FrozenBundle, freeze
from verscope.graph.queries import GraphQueries
from verscope.graph.schema import SchemaGraph
from verscope.lifecycle import LifecycleStore
from verscope.versions import VersionRegistry, register

logger = logging.getLogger(__name__)


@dataclass
class BuiltSchema:
    """Unfrozen engine inputs produced from one definition document."""

    registry: VersionRegistry
    graph: SchemaGraph
    lifecycle: LifecycleStore

    def freeze(self) -> FrozenBundle:
        return freeze(self.graph, self.lifecycle, self.registry)


def build_definition(
    definition: SchemaDefinition, strict_containment: Optional[bool] = None
) -> BuiltSchema:
    """Turn a validated definition into registry, graph, and lifecycle store.

    Raises:
        ConfigError: If the declared versions are malformed.
        GraphIntegrityError: If the tree breaks containment rules or a
            reference cannot be resolved.
    """
    registry = register(definition.versions)
    graph = SchemaGraph(strict_containment=strict_containment)
    lifecycle = LifecycleStore(graph, registry)

    pending: list[tuple[str, ElementSpec]] = []
    stack: list[tuple[Optional[str], ElementSpec]] = [(None, definition.root)]
    while stack:
        parent_id, spec = stack.pop()
        element_id = graph.add_element(parent_id, spec.kind, spec.name, element_id=spec.id)
        if spec.added is not None:
            lifecycle.added(element_id, spec.added)
        if spec.removed is not None:
            lifecycle.removed(element_id, spec.removed)
        for rename in spec.renamed:
            lifecycle.renamed(element_id, rename.version, rename.name)
        if spec.references:
            pending.append((element_id, spec))
        stack.extend((element_id, child) for child in reversed(spec.children))

    queries = GraphQueries(graph)
    for element_id, spec in pending:
        for ref in spec.references:
            target = ref if ref in graph else queries.require_path(ref)
            graph.add_reference(element_id, target)

    logger.debug(
        "Built schema from definition: %d element(s), %d version(s)",
        len(graph),
        len(registry),
    )
    return BuiltSchema(registry=registry, graph=graph, lifecycle=lifecycle)


def load_and_freeze(path: Path, loader: Optional[DefinitionLoader] = None) -> FrozenBundle:
    """Load a YAML definition, build it, and freeze it.

    Raises:
        FreezeError: If the definition is inconsistent.
    """
    definition = (loader or DefinitionLoader()).load(path)
    return build_definition(definition).freeze()
