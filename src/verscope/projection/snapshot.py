"""
Immutable per-version snapshot handed to external emitters.

A ``Snapshot`` is the subtree of the schema valid at one version, with
names resolved and references restricted to elements of the same snapshot.
Elements are stored in preorder (declaration order among siblings).

Usage::

    snapshot = project(bundle, "2.0")
    pet = snapshot.find("PetStore.Pet")
    for prop in snapshot.children_of(pet.id):
        print(prop.name, [t.name for t in snapshot.resolve_references(prop.id)])
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from verscope.types import ElementKind


class SnapshotElement(BaseModel):
    """One element as it exists in a projected version."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Stable element identity")
    kind: ElementKind
    name: str = Field(..., min_length=1, description="Effective name at this version")
    declared_name: str = Field(..., min_length=1, description="Name before any rename")
    parent_id: Optional[str] = None
    children: tuple[str, ...] = Field(default=(), description="Included children in declaration order")
    references: tuple[str, ...] = Field(default=(), description="Included reference targets")

    @property
    def renamed(self) -> bool:
        return self.name != self.declared_name


class Snapshot(BaseModel):
    """Name-resolved, closure-consistent schema tree for one version."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str = Field(..., min_length=1, description="Version label")
    ordinal: int = Field(..., ge=0, description="Version ordinal in the registry")
    root_id: str = Field(..., min_length=1)
    elements: tuple[SnapshotElement, ...] = Field(
        ..., description="Included elements in preorder"
    )

    _index: dict[str, SnapshotElement] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._index = {e.id: e for e in self.elements}

    # -- lookup ---------------------------------------------------------

    def get(self, element_id: str) -> SnapshotElement:
        """Element by identity; KeyError if not included in this version."""
        try:
            return self._index[element_id]
        except KeyError:
            raise KeyError(
                f"Element '{element_id}' is not part of version '{self.version}'"
            ) from None

    @property
    def root(self) -> SnapshotElement:
        return self._index[self.root_id]

    def children_of(self, element_id: str) -> list[SnapshotElement]:
        return [self._index[c] for c in self.get(element_id).children]

    def resolve_references(self, element_id: str) -> list[SnapshotElement]:
        """Reference targets of an element as snapshot elements."""
        return [self._index[r] for r in self.get(element_id).references]

    def find(self, path: str) -> Optional[SnapshotElement]:
        """Look up an element by dotted path of effective names."""
        segments = path.split(".") if path else []
        if not segments or segments[0] != self.root.name:
            return None
        current = self.root
        for segment in segments[1:]:
            match = next(
                (c for c in self.children_of(current.id) if c.name == segment), None
            )
            if match is None:
                return None
            current = match
        return current

    def iter_preorder(self) -> Iterator[SnapshotElement]:
        return iter(self.elements)

    def of_kind(self, kind: ElementKind) -> list[SnapshotElement]:
        return [e for e in self.elements if e.kind is kind]

    @property
    def reference_count(self) -> int:
        return sum(len(e.references) for e in self.elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index

    def __len__(self) -> int:
        return len(self.elements)

    # -- emitter hand-off ----------------------------------------------

    def artifact_name(
        self, prefix: Optional[str] = None, extension: Optional[str] = None
    ) -> str:
        """Suggested artifact file name, e.g. ``openapi.2.0.yaml``."""
        if prefix is None or extension is None:
            from verscope.config import get_config

            config = get_config()
            prefix = prefix or config.artifact_prefix
            extension = extension or config.artifact_extension
        return f"{prefix}.{self.version}.{extension}"

    def to_dict(self) -> dict[str, Any]:
        """Nested JSON-ready tree for emitters."""
        root = _node_dict(self.root)
        stack = [(self.root, root)]
        while stack:
            element, node = stack.pop()
            for child in self.children_of(element.id):
                child_node = _node_dict(child)
                node["children"].append(child_node)
                stack.append((child, child_node))
        return {
            "version": self.version,
            "ordinal": self.ordinal,
            "root": root,
        }


def _node_dict(element: SnapshotElement) -> dict[str, Any]:
    return {
        "id": element.id,
        "kind": element.kind.value,
        "name": element.name,
        "references": list(element.references),
        "children": [],
    }
