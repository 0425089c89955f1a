"""
Exception taxonomy for the projection engine.

Construction-time errors (``ConfigError``, ``GraphIntegrityError``,
``FrozenStateError``) are raised immediately by the builders.  Consistency
errors found by the freeze pass are first collected as ``Diagnostic``
records (see ``verscope.freeze``) and only materialised as exceptions
through ``Diagnostic.to_exception()`` or the aggregate ``FreezeError``.

``InternalInvariantError`` sits outside the ``VerscopeError`` hierarchy.
It signals a defect in the engine, not bad input, and callers that catch
``VerscopeError`` must not swallow it.

Usage::

    from verscope.errors import FreezeError, UnknownVersionError

    try:
        bundle = freeze(graph, lifecycle, registry)
    except FreezeError as exc:
        for diag in exc.diagnostics:
            print(diag.code.value, diag.message)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from verscope.freeze import Diagnostic, FreezeReport


class VerscopeError(Exception):
    """Base class for every user-facing error raised by verscope."""


class ConfigError(VerscopeError):
    """Raised for a malformed version registry or engine configuration."""


class UnknownVersionError(VerscopeError, KeyError):
    """Raised when a version label was never registered."""

    def __init__(self, label: str, element_id: Optional[str] = None) -> None:
        self.label = label
        self.element_id = element_id
        msg = f"Unknown version '{label}'"
        if element_id is not None:
            msg = f"{msg} referenced by element '{element_id}'"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class GraphIntegrityError(VerscopeError):
    """Raised when the containment tree would become invalid."""


class FrozenStateError(VerscopeError):
    """Raised on any attempt to mutate a graph or store after freeze."""


# ---------------------------------------------------------------------------
# Lifecycle consistency
# ---------------------------------------------------------------------------


class LifecycleError(VerscopeError):
    """Base for inconsistent lifecycle annotations on a single element."""

    def __init__(self, message: str, element_id: str, version: Optional[str] = None) -> None:
        self.element_id = element_id
        self.version = version
        super().__init__(message)


class UnorderedRemovalError(LifecycleError):
    """``Removed`` is not strictly later than ``Added``."""


class RedundantRenameError(LifecycleError):
    """Renames out of order, or a rename to the name already in effect."""


class DuplicateLifecycleEventError(LifecycleError):
    """More than one ``Added`` or ``Removed`` on the same element."""


class OrphanedElementError(LifecycleError):
    """Element is marked present where its parent is absent."""


# ---------------------------------------------------------------------------
# Per-version closure
# ---------------------------------------------------------------------------


class DanglingReferenceError(VerscopeError):
    """A reference edge targets an element absent in the referrer's version."""

    def __init__(self, message: str, source_id: str, target_id: str, version: str) -> None:
        self.source_id = source_id
        self.target_id = target_id
        self.version = version
        super().__init__(message)


class NameCollisionError(VerscopeError):
    """Two present siblings share an effective name in the same version."""

    def __init__(self, message: str, parent_id: str, name: str, version: str) -> None:
        self.parent_id = parent_id
        self.name = name
        self.version = version
        super().__init__(message)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class FreezeError(VerscopeError):
    """Raised by ``freeze()`` when the consistency pass produced diagnostics.

    Carries the full report so callers can render every problem at once.
    """

    def __init__(self, report: "FreezeReport") -> None:
        self.report = report
        count = len(report.diagnostics)
        codes = sorted({d.code.value for d in report.diagnostics})
        super().__init__(
            f"Schema freeze failed with {count} diagnostic(s): [{', '.join(codes)}]"
        )

    @property
    def diagnostics(self) -> list["Diagnostic"]:
        return list(self.report.diagnostics)

    @property
    def errors(self) -> list[VerscopeError]:
        """Diagnostics converted to their taxonomy exceptions."""
        return [d.to_exception() for d in self.report.diagnostics]


class InternalInvariantError(RuntimeError):
    """A projection observed a state the freeze pass should have rejected."""
