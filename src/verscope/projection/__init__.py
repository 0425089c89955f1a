"""
Projection of a frozen schema onto declared versions.

Public API::

    from verscope.projection import (
        project,
        project_all,
        Snapshot,
        SnapshotElement,
    )
"""

from verscope.projection.projector import project, project_all
from verscope.projection.snapshot import Snapshot, SnapshotElement

__all__ = [
    "project",
    "project_all",
    "Snapshot",
    "SnapshotElement",
]
