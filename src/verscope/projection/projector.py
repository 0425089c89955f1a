"""
Projector: pure ``(bundle, version) -> Snapshot`` function.

Walks the frozen containment tree from the root, keeping a node only when
its own lifecycle window includes the target version and its parent was
kept, so containment is enforced by walk order.  Each call builds a fresh
output tree and never touches the bundle, so projections for any versions
may run concurrently.

Usage::

    from verscope.projection import project, project_all

    snapshot = project(bundle, "1.0")
    every = project_all(bundle)   # {"1.0": Snapshot, "2.0": Snapshot}
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from verscope.config import get_config
from verscope.errors import InternalInvariantError
from verscope.freeze import FrozenBundle
from verscope.otel import emit_projection
from verscope.projection.snapshot import Snapshot, SnapshotElement
from verscope.versions import VersionIdentifier, VersionRef

logger = logging.getLogger(__name__)


def project(bundle: FrozenBundle, version: VersionRef) -> Snapshot:
    """Project the frozen schema onto one declared version.

    Args:
        bundle: Output of ``freeze()``.
        version: Version label or identifier.

    Returns:
        Immutable ``Snapshot`` for ``version``.

    Raises:
        UnknownVersionError: If ``version`` is not registered.
        InternalInvariantError: If an included element references an
            excluded one, which the freeze pass should have rejected.
    """
    if not isinstance(bundle, FrozenBundle):
        raise TypeError(f"project() requires a FrozenBundle, got {type(bundle).__name__}")
    target = bundle.resolve(version)

    included = _included_ids(bundle, target)
    elements: list[SnapshotElement] = []
    for element_id in included:
        element = bundle.get(element_id)
        refs: list[str] = []
        for ref in bundle.references_from(element_id):
            if ref not in included:
                raise InternalInvariantError(
                    f"'{element_id}' references '{ref}' which is excluded from "
                    f"version '{target.label}'; the freeze pass missed a dangling reference"
                )
            refs.append(ref)
        elements.append(SnapshotElement(
            id=element_id,
            kind=element.kind,
            name=bundle.effective_name(element_id, target),
            declared_name=element.name,
            parent_id=element.parent_id,
            children=tuple(c for c in bundle.children_of(element_id) if c in included),
            references=tuple(refs),
        ))

    snapshot = Snapshot(
        version=target.label,
        ordinal=target.ordinal,
        root_id=bundle.root_id,
        elements=tuple(elements),
    )
    emit_projection(snapshot)
    return snapshot


def project_all(
    bundle: FrozenBundle, max_workers: Optional[int] = None
) -> dict[str, Snapshot]:
    """Project every declared version, in parallel.

    Args:
        bundle: Output of ``freeze()``.
        max_workers: Thread pool size; defaults to ``projection_workers``
            from the configuration.

    Returns:
        Mapping of version label to snapshot, in declaration order.
    """
    if max_workers is None:
        max_workers = get_config().projection_workers
    versions = list(bundle.registry)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        snapshots = list(pool.map(lambda v: project(bundle, v), versions))
    logger.debug("Projected %d version(s) with %d worker(s)", len(versions), max_workers)
    return {v.label: s for v, s in zip(versions, snapshots)}


def _included_ids(bundle: FrozenBundle, version: VersionIdentifier) -> dict[str, None]:
    """Preorder ids kept at ``version``; dict keeps walk order."""
    included: dict[str, None] = {}
    root_id = bundle.root_id
    if not bundle.is_present(root_id, version):
        raise InternalInvariantError(
            f"Root namespace '{root_id}' is absent in version '{version.label}'"
        )
    stack = [root_id]
    while stack:
        current = stack.pop()
        included[current] = None
        children = [c for c in bundle.children_of(current) if bundle.is_present(c, version)]
        stack.extend(reversed(children))
    return included
