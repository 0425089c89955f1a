"""
Freeze pass: one-time consistency validation producing an immutable bundle.

Runs every check over the whole graph and every declared version, and
collects all problems as ``Diagnostic`` records rather than stopping at the
first one.  ``freeze()`` then either returns a ``FrozenBundle`` or raises
``FreezeError`` carrying the complete report.

Follows the validator + structured result pattern: ``FreezeValidator``
never raises for bad input, it returns a ``FreezeReport``; the caller
(``freeze``) decides to raise, the way a strict-mode guard does.

Usage::

    from verscope.freeze import freeze
    from verscope.errors import FreezeError

    try:
        bundle = freeze(graph, lifecycle, registry)
    except FreezeError as exc:
        for diag in exc.diagnostics:
            print(diag.code.value, diag.message)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from verscope.errors import (
    ConfigError,
    DanglingReferenceError,
    DuplicateLifecycleEventError,
    FreezeError,
    GraphIntegrityError,
    InternalInvariantError,
    NameCollisionError,
    OrphanedElementError,
    RedundantRenameError,
    UnknownVersionError,
    UnorderedRemovalError,
    VerscopeError,
)
from verscope.graph.schema import SchemaElement, SchemaGraph
from verscope.lifecycle import (
    LifecycleEvent,
    LifecycleStore,
    first_event,
    name_at,
    present_in_window,
)
from verscope.otel import emit_freeze_diagnostic, emit_freeze_result
from verscope.types import DiagnosticCode, LifecycleAction
from verscope.versions import VersionIdentifier, VersionRef, VersionRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class Diagnostic(BaseModel):
    """A single consistency problem found by the freeze pass."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: DiagnosticCode = Field(..., description="Kind of problem")
    message: str = Field(..., description="Human-readable explanation")
    element_id: Optional[str] = Field(
        None, description="Offending element (parent element for name collisions)"
    )
    version: Optional[str] = Field(
        None, description="Version label the problem applies to"
    )
    target_id: Optional[str] = Field(
        None, description="Reference target for dangling references"
    )
    name: Optional[str] = Field(
        None, description="Colliding effective name for name collisions"
    )

    def to_exception(self) -> VerscopeError:
        """Materialise this diagnostic as its taxonomy exception."""
        code = self.code
        element_id = self.element_id or ""
        if code is DiagnosticCode.UNKNOWN_VERSION:
            return UnknownVersionError(self.version or "", element_id=self.element_id)
        if code is DiagnosticCode.GRAPH_INTEGRITY:
            return GraphIntegrityError(self.message)
        if code is DiagnosticCode.DUPLICATE_LIFECYCLE_EVENT:
            return DuplicateLifecycleEventError(self.message, element_id, self.version)
        if code is DiagnosticCode.UNORDERED_REMOVAL:
            return UnorderedRemovalError(self.message, element_id, self.version)
        if code is DiagnosticCode.REDUNDANT_RENAME:
            return RedundantRenameError(self.message, element_id, self.version)
        if code is DiagnosticCode.ORPHANED_ELEMENT:
            return OrphanedElementError(self.message, element_id, self.version)
        if code is DiagnosticCode.DANGLING_REFERENCE:
            return DanglingReferenceError(
                self.message, element_id, self.target_id or "", self.version or ""
            )
        return NameCollisionError(self.message, element_id, self.name or "", self.version or "")


class FreezeReport(BaseModel):
    """Aggregated result of the freeze pass."""

    model_config = ConfigDict(extra="forbid")

    passed: bool = Field(..., description="True if no diagnostics were produced")
    elements_checked: int = Field(0, description="Number of elements in the graph")
    versions_checked: int = Field(0, description="Number of declared versions checked")
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def by_code(self, code: DiagnosticCode) -> list[Diagnostic]:
        """Diagnostics with the given code, in discovery order."""
        return [d for d in self.diagnostics if d.code is code]

    @property
    def codes(self) -> set[DiagnosticCode]:
        return {d.code for d in self.diagnostics}


# ---------------------------------------------------------------------------
# Frozen bundle
# ---------------------------------------------------------------------------


class FrozenBundle:
    """Immutable, validated snapshot of graph + lifecycle + registry.

    Safe to share across threads; every accessor returns immutable data
    or a fresh copy.
    """

    __slots__ = (
        "_registry",
        "_root_id",
        "_elements",
        "_children",
        "_references",
        "_timelines",
        "_own_presence",
    )

    def __init__(
        self,
        registry: VersionRegistry,
        root_id: str,
        elements: Mapping[str, SchemaElement],
        children: Mapping[str, tuple[str, ...]],
        references: Mapping[str, tuple[str, ...]],
        timelines: Mapping[str, tuple[LifecycleEvent, ...]],
        own_presence: Mapping[int, frozenset[str]],
    ) -> None:
        self._registry = registry
        self._root_id = root_id
        self._elements = MappingProxyType(dict(elements))
        self._children = MappingProxyType(dict(children))
        self._references = MappingProxyType(dict(references))
        self._timelines = MappingProxyType(dict(timelines))
        self._own_presence = MappingProxyType(dict(own_presence))

    @property
    def registry(self) -> VersionRegistry:
        return self._registry

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def elements(self) -> Mapping[str, SchemaElement]:
        return self._elements

    def get(self, element_id: str) -> SchemaElement:
        element = self._elements.get(element_id)
        if element is None:
            raise GraphIntegrityError(f"Element '{element_id}' does not exist")
        return element

    def children_of(self, element_id: str) -> tuple[str, ...]:
        return self._children.get(element_id, ())

    def references_from(self, element_id: str) -> tuple[str, ...]:
        return self._references.get(element_id, ())

    def timeline(self, element_id: str) -> tuple[LifecycleEvent, ...]:
        return self._timelines.get(element_id, ())

    def resolve(self, version: VersionRef) -> VersionIdentifier:
        return self._registry.resolve(version)

    def is_present(self, element_id: str, version: VersionRef) -> bool:
        """Own-window presence, precomputed at freeze time."""
        self.get(element_id)
        v = self._registry.resolve(version)
        return element_id in self._own_presence[v.ordinal]

    def effective_name(self, element_id: str, version: VersionRef) -> str:
        v = self._registry.resolve(version)
        return name_at(
            self.timeline(element_id), self.get(element_id).name, v, self._registry, element_id
        )

    def __len__(self) -> int:
        return len(self._elements)

    def __repr__(self) -> str:
        return (
            f"FrozenBundle(root={self._root_id!r}, elements={len(self._elements)}, "
            f"versions={self._registry.labels!r})"
        )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class FreezeValidator:
    """Checks a graph / lifecycle / registry triple for consistency.

    Args:
        graph: The schema graph built by the front-end.
        lifecycle: Lifecycle store bound to ``graph`` and ``registry``.
        registry: Declared versions.

    Raises:
        ConfigError: If ``lifecycle`` is bound to a different graph or
            registry than the ones given.
    """

    def __init__(
        self,
        graph: SchemaGraph,
        lifecycle: LifecycleStore,
        registry: VersionRegistry,
    ) -> None:
        if lifecycle.graph is not graph:
            raise ConfigError("Lifecycle store is bound to a different schema graph")
        if lifecycle.registry is not registry:
            raise ConfigError("Lifecycle store is bound to a different version registry")
        self._graph = graph
        self._lifecycle = lifecycle
        self._registry = registry
        # Events whose versions resolve; unregistered ones are reported once
        # and then ignored by the per-version checks.
        self._events: dict[str, tuple[LifecycleEvent, ...]] = {}
        self._own: dict[int, frozenset[str]] = {}
        self._effective: dict[int, frozenset[str]] = {}

    def validate(self) -> FreezeReport:
        """Run every check and return the aggregated report."""
        diagnostics: list[Diagnostic] = []
        root_id = self._graph.root_id
        if root_id is None:
            diagnostics.append(Diagnostic(
                code=DiagnosticCode.GRAPH_INTEGRITY,
                message="Schema graph has no root namespace",
            ))
            return self._report(diagnostics)

        elements = list(self._graph.iter_preorder())
        for element in elements:
            diagnostics.extend(self._check_element(element, root_id))

        self._compute_presence(elements)

        for element in elements:
            if element.parent_id is not None and element.id in self._events:
                diagnostics.extend(self._check_containment(element))

        for version in self._registry:
            diagnostics.extend(self._check_references(version))
            diagnostics.extend(self._check_collisions(version))

        return self._report(diagnostics)

    # -- per-element checks --------------------------------------------

    def _check_element(self, element: SchemaElement, root_id: str) -> list[Diagnostic]:
        events = self._lifecycle.timeline(element.id)
        if not events:
            return []
        diagnostics: list[Diagnostic] = []
        path = self._graph.path_of(element.id)

        known: list[LifecycleEvent] = []
        for event in events:
            if event.version in self._registry:
                known.append(event)
            else:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.UNKNOWN_VERSION,
                    message=(
                        f"'{path}' has {event.action.value} event for "
                        f"unregistered version '{event.version}'"
                    ),
                    element_id=element.id,
                    version=event.version,
                ))
        self._events[element.id] = tuple(known)

        if element.id == root_id:
            for event in known:
                if event.action is not LifecycleAction.RENAMED:
                    diagnostics.append(Diagnostic(
                        code=DiagnosticCode.GRAPH_INTEGRITY,
                        message=(
                            f"Root namespace '{path}' cannot carry a "
                            f"{event.action.value} event"
                        ),
                        element_id=element.id,
                        version=event.version,
                    ))

        for action in (LifecycleAction.ADDED, LifecycleAction.REMOVED):
            matching = [e for e in known if e.action is action]
            for extra in matching[1:]:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.DUPLICATE_LIFECYCLE_EVENT,
                    message=(
                        f"'{path}' has more than one {action.value} event "
                        f"(extra at '{extra.version}')"
                    ),
                    element_id=element.id,
                    version=extra.version,
                ))

        added = first_event(known, LifecycleAction.ADDED)
        removed = first_event(known, LifecycleAction.REMOVED)
        if added is not None and removed is not None:
            if self._registry.compare(removed.version, added.version) <= 0:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.UNORDERED_REMOVAL,
                    message=(
                        f"'{path}' is removed at '{removed.version}' which is not "
                        f"after it was added at '{added.version}'"
                    ),
                    element_id=element.id,
                    version=removed.version,
                ))

        diagnostics.extend(self._check_renames(element, path, known))
        return diagnostics

    def _check_renames(
        self, element: SchemaElement, path: str, events: list[LifecycleEvent]
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        renames = sorted(
            (e for e in events if e.action is LifecycleAction.RENAMED),
            key=lambda e: self._registry.resolve(e.version).ordinal,
        )
        previous_version: Optional[str] = None
        in_effect = element.name
        for event in renames:
            if previous_version == event.version:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.REDUNDANT_RENAME,
                    message=f"'{path}' is renamed more than once at '{event.version}'",
                    element_id=element.id,
                    version=event.version,
                ))
            elif event.new_name == in_effect:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.REDUNDANT_RENAME,
                    message=(
                        f"'{path}' rename at '{event.version}' targets "
                        f"'{event.new_name}', the name already in effect"
                    ),
                    element_id=element.id,
                    version=event.version,
                ))
            previous_version = event.version
            in_effect = event.new_name or in_effect
        return diagnostics

    def _check_containment(self, element: SchemaElement) -> list[Diagnostic]:
        """Explicit window boundaries must fall where the parent exists."""
        diagnostics: list[Diagnostic] = []
        events = self._events[element.id]
        parent_id = element.parent_id
        path = self._graph.path_of(element.id)

        added = first_event(events, LifecycleAction.ADDED)
        if added is not None:
            at = self._registry.resolve(added.version)
            if self._owns(element.id, at) and parent_id not in self._effective[at.ordinal]:
                diagnostics.append(self._orphan(element, path, at, "added"))

        removed = first_event(events, LifecycleAction.REMOVED)
        if removed is not None:
            before = self._registry.previous(removed.version)
            if (
                before is not None
                and self._owns(element.id, before)
                and parent_id not in self._effective[before.ordinal]
            ):
                diagnostics.append(self._orphan(element, path, before, "still present"))
        return diagnostics

    def _orphan(
        self, element: SchemaElement, path: str, version: VersionIdentifier, how: str
    ) -> Diagnostic:
        return Diagnostic(
            code=DiagnosticCode.ORPHANED_ELEMENT,
            message=(
                f"'{path}' is {how} at '{version.label}' but its parent "
                f"'{element.parent_id}' is absent in that version"
            ),
            element_id=element.id,
            version=version.label,
        )

    # -- per-version checks --------------------------------------------

    def _check_references(self, version: VersionIdentifier) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        present = self._effective[version.ordinal]
        for element in self._graph.iter_preorder():
            if element.id not in present:
                continue
            for target in self._graph.references_from(element.id):
                if target in present:
                    continue
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.DANGLING_REFERENCE,
                    message=(
                        f"'{self._graph.path_of(element.id)}' references "
                        f"'{self._graph.path_of(target)}' which is absent in "
                        f"version '{version.label}'"
                    ),
                    element_id=element.id,
                    target_id=target,
                    version=version.label,
                ))
        return diagnostics

    def _check_collisions(self, version: VersionIdentifier) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        present = self._effective[version.ordinal]
        for parent in self._graph.iter_preorder():
            if parent.id not in present:
                continue
            by_name: dict[str, list[str]] = defaultdict(list)
            for child_id in self._graph.children_of(parent.id):
                if child_id in present:
                    by_name[self._name(child_id, version)].append(child_id)
            for name, ids in by_name.items():
                if len(ids) < 2:
                    continue
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.NAME_COLLISION,
                    message=(
                        f"{len(ids)} elements named '{name}' under "
                        f"'{self._graph.path_of(parent.id)}' in version "
                        f"'{version.label}': {', '.join(ids)}"
                    ),
                    element_id=parent.id,
                    name=name,
                    version=version.label,
                ))
        return diagnostics

    # -- helpers --------------------------------------------------------

    def _owns(self, element_id: str, version: VersionIdentifier) -> bool:
        return element_id in self._own[version.ordinal]

    def _name(self, element_id: str, version: VersionIdentifier) -> str:
        element = self._graph._require(element_id)
        return name_at(
            self._events.get(element_id, ()), element.name, version, self._registry, element_id
        )

    def _compute_presence(self, elements: list[SchemaElement]) -> None:
        for version in self._registry:
            own: set[str] = set()
            effective: set[str] = set()
            for element in elements:
                if present_in_window(
                    self._events.get(element.id, ()), version, self._registry, element.id
                ):
                    own.add(element.id)
                    # preorder: the parent has already been decided
                    if element.parent_id is None or element.parent_id in effective:
                        effective.add(element.id)
            self._own[version.ordinal] = frozenset(own)
            self._effective[version.ordinal] = frozenset(effective)

    def _report(self, diagnostics: list[Diagnostic]) -> FreezeReport:
        return FreezeReport(
            passed=not diagnostics,
            elements_checked=len(self._graph),
            versions_checked=len(self._registry),
            diagnostics=diagnostics,
        )

    def build_bundle(self) -> FrozenBundle:
        """Copy the validated state into a ``FrozenBundle``.

        Must only be called after ``validate()`` returned a passing report.
        """
        root_id = self._graph.root_id
        if root_id is None:
            raise InternalInvariantError("Cannot build a bundle for a graph without a root")
        elements = {e.id: e for e in self._graph.iter_preorder()}
        return FrozenBundle(
            registry=self._registry,
            root_id=root_id,
            elements=elements,
            children={eid: tuple(self._graph.children_of(eid)) for eid in elements},
            references={eid: tuple(self._graph.references_from(eid)) for eid in elements},
            timelines={eid: tuple(self._lifecycle.timeline(eid)) for eid in elements},
            own_presence=self._own,
        )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def freeze(
    graph: SchemaGraph,
    lifecycle: LifecycleStore,
    registry: VersionRegistry,
) -> FrozenBundle:
    """Validate and freeze a schema, all-or-nothing.

    On success the graph and lifecycle store are marked frozen and further
    mutation raises ``FrozenStateError``.

    Raises:
        FreezeError: If any diagnostic was produced; carries the report.
        ConfigError: If the lifecycle store is bound elsewhere.
    """
    validator = FreezeValidator(graph, lifecycle, registry)
    report = validator.validate()
    emit_freeze_result(report)

    if not report.passed:
        for diag in report.diagnostics:
            emit_freeze_diagnostic(diag)
        logger.warning(
            "Freeze failed: %d diagnostic(s) across %d version(s)",
            len(report.diagnostics),
            report.versions_checked,
        )
        raise FreezeError(report)

    bundle = validator.build_bundle()
    graph._mark_frozen()
    lifecycle._mark_frozen()
    logger.info(
        "Froze schema: %d element(s), %d version(s)",
        report.elements_checked,
        report.versions_checked,
    )
    return bundle


def try_freeze(
    graph: SchemaGraph,
    lifecycle: LifecycleStore,
    registry: VersionRegistry,
) -> Union[FrozenBundle, list[Diagnostic]]:
    """Like ``freeze`` but returns the diagnostics instead of raising."""
    try:
        return freeze(graph, lifecycle, registry)
    except FreezeError as exc:
        return exc.diagnostics
