"""
Core enums shared across verscope modules.

Values are lowercase strings so they serialise directly into YAML
definition documents, span event attributes, and snapshot dicts.
"""

from __future__ import annotations

from enum import Enum


class ElementKind(str, Enum):
    """Kinds of node in the schema containment tree."""

    NAMESPACE = "namespace"
    MODEL = "model"
    PROPERTY = "property"
    ENUM_TYPE = "enum_type"
    ENUM_MEMBER = "enum_member"
    OPERATION = "operation"
    PARAMETER = "parameter"
    RESPONSE_VARIANT = "response_variant"


class LifecycleAction(str, Enum):
    """What a lifecycle event does to its element."""

    ADDED = "added"
    REMOVED = "removed"
    RENAMED = "renamed"


class DiagnosticCode(str, Enum):
    """Codes produced by the freeze pass, one per error class."""

    UNKNOWN_VERSION = "unknown_version"
    GRAPH_INTEGRITY = "graph_integrity"
    DUPLICATE_LIFECYCLE_EVENT = "duplicate_lifecycle_event"
    UNORDERED_REMOVAL = "unordered_removal"
    REDUNDANT_RENAME = "redundant_rename"
    ORPHANED_ELEMENT = "orphaned_element"
    DANGLING_REFERENCE = "dangling_reference"
    NAME_COLLISION = "name_collision"


# Which child kinds each parent kind may contain
ALLOWED_CHILDREN: dict[ElementKind, frozenset[ElementKind]] = {
    ElementKind.NAMESPACE: frozenset({
        ElementKind.NAMESPACE,
        ElementKind.MODEL,
        ElementKind.ENUM_TYPE,
        ElementKind.OPERATION,
    }),
    ElementKind.MODEL: frozenset({ElementKind.PROPERTY}),
    ElementKind.ENUM_TYPE: frozenset({ElementKind.ENUM_MEMBER}),
    ElementKind.OPERATION: frozenset({
        ElementKind.PARAMETER,
        ElementKind.RESPONSE_VARIANT,
    }),
    ElementKind.PROPERTY: frozenset(),
    ElementKind.ENUM_MEMBER: frozenset(),
    ElementKind.PARAMETER: frozenset(),
    ElementKind.RESPONSE_VARIANT: frozenset(),
}
