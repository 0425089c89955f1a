"""
Schema graph queries for verscope.

Path lookup over the containment tree and BFS traversal over reference
edges.  Reference traversal tolerates cycles, which are expected for
recursive types such as a dictionary whose values contain the same shape.
"""
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set

from verscope.errors import GraphIntegrityError
from verscope.graph.schema import SchemaGraph

__all__ = ["ReferenceReport", "GraphQueries"]


@dataclass
class ReferenceReport:
    """Reference neighbourhood of one element."""
    element_id: str
    uses: List[str]  # elements reachable through outgoing references
    used_by: List[str]  # elements whose references reach this one
    recursive: bool  # element reaches itself through references


class GraphQueries:
    """Provides query operations on a schema graph."""

    def __init__(self, graph: SchemaGraph):
        """Initialize with a SchemaGraph instance."""
        self.graph = graph

    def find_by_path(self, path: str) -> Optional[str]:
        """
        Resolve a dotted path of declared names to an element identity.

        The first segment names the root namespace.  When siblings share a
        declared name (e.g. one removed and one added under the same name),
        the first declared sibling wins.

        Args:
            path: Dotted path such as ``"PetStore.Pet.age"``

        Returns:
            The element identity, or None if no element matches
        """
        root_id = self.graph.root_id
        if root_id is None or not path:
            return None
        segments = path.split(".")
        root = self.graph.get(root_id)
        if root is None or root.name != segments[0]:
            return None

        current = root_id
        for segment in segments[1:]:
            match = None
            for child_id in self.graph.children_of(current):
                child = self.graph.get(child_id)
                if child is not None and child.name == segment:
                    match = child_id
                    break
            if match is None:
                return None
            current = match
        return current

    def require_path(self, path: str) -> str:
        """Like ``find_by_path`` but raises GraphIntegrityError when unresolved."""
        found = self.find_by_path(path)
        if found is None:
            raise GraphIntegrityError(f"No element found at path '{path}'")
        return found

    def reachable(self, element_id: str, max_depth: Optional[int] = None) -> List[str]:
        """
        Elements reachable from ``element_id`` through reference edges.

        Uses BFS; the start element is only included when a cycle leads
        back to it.

        Args:
            element_id: Start element
            max_depth: Optional maximum number of edges to follow

        Returns:
            Reachable identities in BFS discovery order
        """
        queue: Deque[tuple[str, int]] = deque([(element_id, 0)])
        visited: Set[str] = set()
        order: List[str] = []

        while queue:
            current, depth = queue.popleft()
            if max_depth is not None and depth >= max_depth:
                continue
            for target in self.graph.references_from(current):
                if target in visited:
                    continue
                visited.add(target)
                order.append(target)
                queue.append((target, depth + 1))
        return order

    def is_recursive(self, element_id: str) -> bool:
        """True if the element reaches itself through references."""
        return element_id in self.reachable(element_id)

    def reference_report(self, element_id: str) -> ReferenceReport:
        """Summarise the reference neighbourhood of an element."""
        uses = self.reachable(element_id)
        used_by = [
            src for src in (e.id for e in self.graph.iter_preorder())
            if src != element_id and element_id in self.reachable(src)
        ]
        return ReferenceReport(
            element_id=element_id,
            uses=uses,
            used_by=used_by,
            recursive=element_id in uses,
        )
