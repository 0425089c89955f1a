"""
verscope - version-scoped schema projection engine.

Takes one logical schema graph annotated with lifecycle events (added,
removed, renamed) plus an ordered set of API versions, validates the whole
thing once, and projects a self-consistent snapshot for each version.

Key Features:
- Ordinal version comparison, independent of label formatting
- Aggregated freeze-time diagnostics (dangling references, orphaned
  elements, name collisions, bad lifecycle ordering)
- Pure, thread-safe projection to immutable snapshots
- YAML definition documents for front-end hand-off

Example usage:
    from verscope import ElementKind, LifecycleStore, SchemaGraph, freeze, project, register

    registry = register(["1.0", "2.0"])
    graph = SchemaGraph()
    ns = graph.add_element(None, ElementKind.NAMESPACE, "PetStore")
    toy = graph.add_element(ns, ElementKind.MODEL, "Toy")
    lifecycle = LifecycleStore(graph, registry)
    lifecycle.added(toy, "2.0")

    bundle = freeze(graph, lifecycle, registry)
    assert toy not in project(bundle, "1.0")
"""

from verscope.errors import (
    ConfigError,
    DanglingReferenceError,
    DuplicateLifecycleEventError,
    FreezeError,
    FrozenStateError,
    GraphIntegrityError,
    InternalInvariantError,
    LifecycleError,
    NameCollisionError,
    OrphanedElementError,
    RedundantRenameError,
    UnknownVersionError,
    UnorderedRemovalError,
    VerscopeError,
)
from verscope.freeze import Diagnostic, FreezeReport, FreezeValidator, FrozenBundle, freeze, try_freeze
from verscope.graph import GraphQueries, SchemaElement, SchemaGraph
from verscope.lifecycle import LifecycleEvent, LifecycleStore
from verscope.projection import Snapshot, SnapshotElement, project, project_all
from verscope.types import DiagnosticCode, ElementKind, LifecycleAction
from verscope.versions import VersionIdentifier, VersionRegistry, register

__version__ = "0.1.0"
__all__ = [
    # Versions
    "register",
    "VersionIdentifier",
    "VersionRegistry",
    # Graph
    "ElementKind",
    "SchemaElement",
    "SchemaGraph",
    "GraphQueries",
    # Lifecycle
    "LifecycleAction",
    "LifecycleEvent",
    "LifecycleStore",
    # Freeze
    "Diagnostic",
    "DiagnosticCode",
    "FreezeReport",
    "FreezeValidator",
    "FrozenBundle",
    "freeze",
    "try_freeze",
    # Projection
    "Snapshot",
    "SnapshotElement",
    "project",
    "project_all",
    # Errors
    "VerscopeError",
    "ConfigError",
    "UnknownVersionError",
    "GraphIntegrityError",
    "FrozenStateError",
    "LifecycleError",
    "UnorderedRemovalError",
    "RedundantRenameError",
    "DuplicateLifecycleEventError",
    "OrphanedElementError",
    "DanglingReferenceError",
    "NameCollisionError",
    "FreezeError",
    "InternalInvariantError",
    "__version__",
]
