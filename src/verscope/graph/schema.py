"""Schema graph module for verscope.

This module defines the element arena for a versioned schema: a strict
containment tree (namespace > model > property, ...) plus a separate set of
identity-to-identity reference edges which may freely cycle.

Elements are stored flat by stable identity, so a recursive structure
(a model whose property refers back to the model) never requires cyclic
ownership.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from verscope.errors import FrozenStateError, GraphIntegrityError
from verscope.types import ALLOWED_CHILDREN, ElementKind

__all__ = [
    "SchemaElement",
    "SchemaGraph",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaElement:
    """Immutable identity of a node in the schema tree.

    Attributes:
        id: Stable unique identifier
        kind: Kind of the element (ElementKind enum)
        name: Declared name, before any rename
        parent_id: Identifier of the containing element, None for the root
    """
    id: str
    kind: ElementKind
    name: str
    parent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert SchemaElement to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "parent_id": self.parent_id,
        }


class SchemaGraph:
    """Mutable arena of schema elements, built by a front-end then frozen.

    Containment (``parent_id`` / children) forms a tree rooted at a single
    namespace.  References are kept per source element in insertion order
    and have no structural restriction.

    Args:
        strict_containment: Enforce ``ALLOWED_CHILDREN`` kind rules.  When
            None, the value comes from ``get_config()``.
    """

    def __init__(self, strict_containment: Optional[bool] = None) -> None:
        if strict_containment is None:
            from verscope.config import get_config

            strict_containment = get_config().strict_containment
        self.strict_containment = strict_containment
        self._elements: Dict[str, SchemaElement] = {}
        self._children: Dict[str, List[str]] = {}
        # dict used as an ordered set of target ids
        self._references: Dict[str, Dict[str, None]] = {}
        self._root_id: Optional[str] = None
        self._frozen = False

    # -- construction ---------------------------------------------------

    def add_element(
        self,
        parent_id: Optional[str],
        kind: ElementKind,
        name: str,
        element_id: Optional[str] = None,
    ) -> str:
        """Add an element under ``parent_id`` and return its identity.

        Args:
            parent_id: Containing element, or None to add the root namespace
            kind: Element kind
            name: Declared name
            element_id: Explicit identity; derived from the parent path when
                omitted

        Raises:
            GraphIntegrityError: If the parent does not exist, a second root
                is added, the root is not a namespace, the kind is not allowed
                under the parent, or the identity is already taken
            FrozenStateError: If the graph has been frozen
        """
        self._check_mutable()
        kind = ElementKind(kind)
        if not name:
            raise GraphIntegrityError("Element name must be non-empty")

        if parent_id is None:
            if self._root_id is not None:
                raise GraphIntegrityError(
                    f"Graph already has a root '{self._root_id}'; "
                    f"cannot add second root '{name}'"
                )
            if kind is not ElementKind.NAMESPACE:
                raise GraphIntegrityError(
                    f"Root element must be a namespace, got {kind.value}"
                )
        else:
            parent = self._elements.get(parent_id)
            if parent is None:
                raise GraphIntegrityError(
                    f"Parent '{parent_id}' does not exist for element '{name}'"
                )
            self._check_kind(parent.kind, kind, name)

        if element_id is None:
            element_id = self._derive_id(parent_id, name)
        elif element_id in self._elements:
            raise GraphIntegrityError(f"Element id '{element_id}' already exists")

        element = SchemaElement(id=element_id, kind=kind, name=name, parent_id=parent_id)
        self._elements[element_id] = element
        self._children[element_id] = []
        self._references[element_id] = {}
        if parent_id is None:
            self._root_id = element_id
        else:
            self._children[parent_id].append(element_id)

        logger.debug("Added %s '%s' (id=%s, parent=%s)", kind.value, name, element_id, parent_id)
        return element_id

    def add_reference(self, from_id: str, to_id: str) -> None:
        """Add a reference edge; self and mutual cycles are legal.

        Raises:
            GraphIntegrityError: If either endpoint does not exist
            FrozenStateError: If the graph has been frozen
        """
        self._check_mutable()
        if from_id not in self._elements:
            raise GraphIntegrityError(f"Reference source '{from_id}' does not exist")
        if to_id not in self._elements:
            raise GraphIntegrityError(f"Reference target '{to_id}' does not exist")
        self._references[from_id][to_id] = None

    def reparent(self, element_id: str, new_parent_id: str) -> None:
        """Move an element (and its subtree) under a different parent.

        The element is appended as the new parent's last child.

        Raises:
            GraphIntegrityError: If either element is unknown, the root is
                moved, the move would create a containment cycle, or the kind
                is not allowed under the new parent
            FrozenStateError: If the graph has been frozen
        """
        self._check_mutable()
        element = self._require(element_id)
        new_parent = self._require(new_parent_id)
        if element.parent_id is None:
            raise GraphIntegrityError("Cannot reparent the root namespace")
        if new_parent_id == element_id or element_id in self.ancestors(new_parent_id):
            raise GraphIntegrityError(
                f"Moving '{element_id}' under '{new_parent_id}' would create a containment cycle"
            )
        self._check_kind(new_parent.kind, element.kind, element.name)

        self._children[element.parent_id].remove(element_id)
        self._children[new_parent_id].append(element_id)
        self._elements[element_id] = SchemaElement(
            id=element.id, kind=element.kind, name=element.name, parent_id=new_parent_id
        )

    # -- queries --------------------------------------------------------

    @property
    def root_id(self) -> Optional[str]:
        return self._root_id

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, element_id: str) -> Optional[SchemaElement]:
        """Retrieve an element by identity, None if absent."""
        return self._elements.get(element_id)

    def children_of(self, element_id: str) -> List[str]:
        """Child identities in declaration order."""
        self._require(element_id)
        return list(self._children[element_id])

    def references_from(self, element_id: str) -> List[str]:
        """Outgoing reference targets in insertion order."""
        self._require(element_id)
        return list(self._references[element_id])

    def references_to(self, element_id: str) -> List[str]:
        """Identities of elements referencing ``element_id``."""
        self._require(element_id)
        return [src for src, targets in self._references.items() if element_id in targets]

    def ancestors(self, element_id: str) -> List[str]:
        """Ancestor identities, nearest first."""
        result: List[str] = []
        current = self._require(element_id).parent_id
        while current is not None:
            result.append(current)
            current = self._elements[current].parent_id
        return result

    def iter_preorder(self) -> Iterator[SchemaElement]:
        """Depth-first walk of the containment tree in declaration order."""
        if self._root_id is None:
            return
        stack = [self._root_id]
        while stack:
            current = stack.pop()
            yield self._elements[current]
            stack.extend(reversed(self._children[current]))

    def iter_edges(self) -> Iterator[tuple[str, str]]:
        """All reference edges as ``(source, target)`` pairs."""
        for src, targets in self._references.items():
            for dst in targets:
                yield src, dst

    def path_of(self, element_id: str) -> str:
        """Dotted path of declared names from the root."""
        names = [self._require(element_id).name]
        names.extend(self._elements[a].name for a in self.ancestors(element_id))
        return ".".join(reversed(names))

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Convert the graph to a JSON-serializable dictionary."""
        return {
            "elements": [e.to_dict() for e in self.iter_preorder()],
            "references": [{"source_id": s, "target_id": t} for s, t in self.iter_edges()],
        }

    # -- internal helpers ----------------------------------------------

    def _mark_frozen(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenStateError("Schema graph is frozen and cannot be modified")

    def _require(self, element_id: str) -> SchemaElement:
        element = self._elements.get(element_id)
        if element is None:
            raise GraphIntegrityError(f"Element '{element_id}' does not exist")
        return element

    def _check_kind(self, parent_kind: ElementKind, kind: ElementKind, name: str) -> None:
        if self.strict_containment and kind not in ALLOWED_CHILDREN[parent_kind]:
            raise GraphIntegrityError(
                f"A {kind.value} ('{name}') cannot be contained in a {parent_kind.value}"
            )

    def _derive_id(self, parent_id: Optional[str], name: str) -> str:
        base = name if parent_id is None else f"{parent_id}/{name}"
        candidate = base
        n = 2
        while candidate in self._elements:
            candidate = f"{base}#{n}"
            n += 1
        return candidate
