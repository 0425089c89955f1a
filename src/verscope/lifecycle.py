"""
Lifecycle store: per-element timelines of added / removed / renamed events.

Lifecycle facts are kept apart from the schema graph and keyed by element
identity.  Event versions are stored as labels and only resolved against
the registry when queried, so that the freeze pass can report every
unregistered label instead of failing at record time.

Every query takes the target version explicitly; there is no ambient
"current version".

Usage::

    from verscope.lifecycle import LifecycleEvent, LifecycleStore

    store = LifecycleStore(graph, registry)
    store.added(toy_id, "2.0")
    store.renamed(age_id, "2.0", "age")
    store.is_present(toy_id, "1.0")        # False
    store.effective_name(age_id, "1.0")    # declared name
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

from verscope.errors import FrozenStateError, GraphIntegrityError, UnknownVersionError
from verscope.types import LifecycleAction
from verscope.versions import VersionIdentifier, VersionRef, VersionRegistry

if TYPE_CHECKING:  # pragma: no cover
    from verscope.graph.schema import SchemaGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleEvent:
    """A single lifecycle fact about one element.

    ``version`` is a registry label.  ``new_name`` is set only for
    ``RENAMED`` events.
    """

    action: LifecycleAction
    version: str
    new_name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", LifecycleAction(self.action))
        if self.action is LifecycleAction.RENAMED and not self.new_name:
            raise ValueError("Renamed event requires a non-empty new_name")
        if self.action is not LifecycleAction.RENAMED and self.new_name is not None:
            raise ValueError(f"{self.action.value} event does not take a new_name")

    @classmethod
    def added(cls, version: VersionRef) -> "LifecycleEvent":
        return cls(LifecycleAction.ADDED, str(version))

    @classmethod
    def removed(cls, version: VersionRef) -> "LifecycleEvent":
        return cls(LifecycleAction.REMOVED, str(version))

    @classmethod
    def renamed(cls, version: VersionRef, new_name: str) -> "LifecycleEvent":
        return cls(LifecycleAction.RENAMED, str(version), new_name)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for JSON/YAML emission."""
        d: dict[str, Any] = {"action": self.action.value, "version": self.version}
        if self.new_name is not None:
            d["new_name"] = self.new_name
        return d


# ---------------------------------------------------------------------------
# Timeline evaluation (shared by the mutable store and the frozen bundle)
# ---------------------------------------------------------------------------


def _ordinal(registry: VersionRegistry, label: str, element_id: str) -> int:
    try:
        return registry.resolve(label).ordinal
    except UnknownVersionError:
        raise UnknownVersionError(label, element_id=element_id) from None


def first_event(
    events: Iterable[LifecycleEvent], action: LifecycleAction
) -> Optional[LifecycleEvent]:
    """First event of ``action`` in insertion order, or None."""
    for event in events:
        if event.action is action:
            return event
    return None


def present_in_window(
    events: Iterable[LifecycleEvent],
    version: VersionIdentifier,
    registry: VersionRegistry,
    element_id: str,
) -> bool:
    """Evaluate an element's own Added/Removed window at ``version``."""
    events = tuple(events)
    added = first_event(events, LifecycleAction.ADDED)
    removed = first_event(events, LifecycleAction.REMOVED)
    if added is not None and _ordinal(registry, added.version, element_id) > version.ordinal:
        return False
    if removed is not None and _ordinal(registry, removed.version, element_id) <= version.ordinal:
        return False
    return True


def name_at(
    events: Iterable[LifecycleEvent],
    declared_name: str,
    version: VersionIdentifier,
    registry: VersionRegistry,
    element_id: str,
) -> str:
    """Name in effect at ``version`` after applying renames.

    The latest rename at or before ``version`` wins; on a tie the later
    insertion wins.
    """
    best_ordinal = -1
    name = declared_name
    for event in events:
        if event.action is not LifecycleAction.RENAMED:
            continue
        ordinal = _ordinal(registry, event.version, element_id)
        if ordinal <= version.ordinal and ordinal >= best_ordinal:
            best_ordinal = ordinal
            name = event.new_name or declared_name
    return name


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class LifecycleStore:
    """Per-element lifecycle timelines bound to one graph and registry.

    Args:
        graph: Graph whose elements the events describe.
        registry: Registry the event labels refer to.
    """

    def __init__(self, graph: "SchemaGraph", registry: VersionRegistry) -> None:
        self._graph = graph
        self._registry = registry
        self._timelines: dict[str, list[LifecycleEvent]] = {}
        self._frozen = False

    @property
    def graph(self) -> "SchemaGraph":
        return self._graph

    @property
    def registry(self) -> VersionRegistry:
        return self._registry

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- recording ------------------------------------------------------

    def record(self, element_id: str, event: LifecycleEvent) -> None:
        """Append ``event`` to the element's timeline.

        Raises:
            GraphIntegrityError: If the element is not in the graph.
            FrozenStateError: If the store has been frozen.
        """
        if self._frozen:
            raise FrozenStateError("Lifecycle store is frozen and cannot be modified")
        if element_id not in self._graph:
            raise GraphIntegrityError(
                f"Cannot record lifecycle event for unknown element '{element_id}'"
            )
        self._timelines.setdefault(element_id, []).append(event)
        logger.debug(
            "Recorded %s@%s for %s", event.action.value, event.version, element_id
        )

    def added(self, element_id: str, version: VersionRef) -> None:
        self.record(element_id, LifecycleEvent.added(version))

    def removed(self, element_id: str, version: VersionRef) -> None:
        self.record(element_id, LifecycleEvent.removed(version))

    def renamed(self, element_id: str, version: VersionRef, new_name: str) -> None:
        self.record(element_id, LifecycleEvent.renamed(version, new_name))

    # -- queries --------------------------------------------------------

    def timeline(self, element_id: str) -> list[LifecycleEvent]:
        """Events recorded for the element, in insertion order."""
        return list(self._timelines.get(element_id, ()))

    def annotated_elements(self) -> list[str]:
        """Identities that carry at least one event, in first-record order."""
        return list(self._timelines)

    def is_present(self, element_id: str, version: VersionRef) -> bool:
        """Whether the element's own window includes ``version``.

        Parent presence is not considered here; containment is applied by
        the freeze pass and the projector.

        Raises:
            GraphIntegrityError: If the element is not in the graph.
            UnknownVersionError: If ``version`` (or an event) is unregistered.
        """
        if element_id not in self._graph:
            raise GraphIntegrityError(f"Element '{element_id}' does not exist")
        v = self._registry.resolve(version)
        return present_in_window(self._timelines.get(element_id, ()), v, self._registry, element_id)

    def effective_name(self, element_id: str, version: VersionRef) -> str:
        """Name the element displays at ``version``.

        Raises:
            GraphIntegrityError: If the element is not in the graph.
            UnknownVersionError: If ``version`` (or an event) is unregistered.
        """
        element = self._graph.get(element_id)
        if element is None:
            raise GraphIntegrityError(f"Element '{element_id}' does not exist")
        v = self._registry.resolve(version)
        return name_at(self._timelines.get(element_id, ()), element.name, v, self._registry, element_id)

    def _mark_frozen(self) -> None:
        self._frozen = True
