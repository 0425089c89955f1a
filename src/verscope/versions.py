"""
Version registry with ordinal comparison.

Versions are declared once, in order, and every comparison in the engine is
made on the declaration ordinal.  Labels are display strings only; they are
never compared lexically, so a registry declared as ``["2.0", "10.0"]``
orders "2.0" before "10.0" even though the strings sort the other way.

Usage::

    from verscope.versions import register

    registry = register(["1.0", "2.0", "10.0"])
    v2 = registry.resolve("2.0")
    assert registry.compare("10.0", v2) > 0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Union

from verscope.errors import ConfigError, UnknownVersionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class VersionIdentifier:
    """A registered version: display label plus declaration ordinal.

    Attributes:
        ordinal: 0-based position in the registry (the only ordering key)
        label: Human-readable version label, e.g. ``"2024-01-01"``
    """

    ordinal: int
    label: str = field(compare=False)

    def __str__(self) -> str:
        return self.label


VersionRef = Union[str, VersionIdentifier]


class VersionRegistry:
    """Immutable ordered sequence of ``VersionIdentifier``.

    Built via ``register()``; not meant to be instantiated directly with
    unchecked input.
    """

    __slots__ = ("_versions", "_by_label")

    def __init__(self, versions: Sequence[VersionIdentifier]) -> None:
        self._versions: tuple[VersionIdentifier, ...] = tuple(versions)
        self._by_label: dict[str, VersionIdentifier] = {
            v.label: v for v in self._versions
        }

    # -- lookup ---------------------------------------------------------

    def resolve(self, version: VersionRef) -> VersionIdentifier:
        """Return the registered identifier for a label or identifier.

        Raises:
            UnknownVersionError: If the label was never registered, or the
                identifier belongs to a different registry.
        """
        if isinstance(version, VersionIdentifier):
            found = self._by_label.get(version.label)
            if found is None or found.ordinal != version.ordinal:
                raise UnknownVersionError(version.label)
            return found
        found = self._by_label.get(version)
        if found is None:
            raise UnknownVersionError(str(version))
        return found

    def compare(self, a: VersionRef, b: VersionRef) -> int:
        """Ordinal difference ``a - b`` (negative, zero, or positive)."""
        return self.resolve(a).ordinal - self.resolve(b).ordinal

    def previous(self, version: VersionRef) -> Optional[VersionIdentifier]:
        """The version declared immediately before, or None for the first."""
        v = self.resolve(version)
        if v.ordinal == 0:
            return None
        return self._versions[v.ordinal - 1]

    # -- sequence protocol ---------------------------------------------

    @property
    def versions(self) -> tuple[VersionIdentifier, ...]:
        return self._versions

    @property
    def labels(self) -> list[str]:
        return [v.label for v in self._versions]

    @property
    def first(self) -> VersionIdentifier:
        return self._versions[0]

    @property
    def last(self) -> VersionIdentifier:
        return self._versions[-1]

    def __iter__(self) -> Iterator[VersionIdentifier]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __contains__(self, version: object) -> bool:
        if isinstance(version, VersionIdentifier):
            found = self._by_label.get(version.label)
            return found is not None and found.ordinal == version.ordinal
        return isinstance(version, str) and version in self._by_label

    def __repr__(self) -> str:
        return f"VersionRegistry({self.labels!r})"


def register(ordered_labels: Sequence[str]) -> VersionRegistry:
    """Build an immutable registry from labels in declaration order.

    Args:
        ordered_labels: Version labels, oldest first.

    Returns:
        ``VersionRegistry`` whose ordinals follow list position.

    Raises:
        ConfigError: If the list is empty, holds a non-string or empty
            label, or repeats a label.
    """
    if isinstance(ordered_labels, str):
        raise ConfigError("Version labels must be a sequence, not a single string")
    labels = list(ordered_labels)
    if not labels:
        raise ConfigError("Version registry requires at least one version")

    seen: set[str] = set()
    for label in labels:
        if not isinstance(label, str) or not label:
            raise ConfigError(f"Invalid version label: {label!r}")
        if label in seen:
            raise ConfigError(f"Duplicate version label: '{label}'")
        seen.add(label)

    registry = VersionRegistry(
        [VersionIdentifier(ordinal=i, label=label) for i, label in enumerate(labels)]
    )
    logger.debug("Registered %d version(s): %s", len(registry), registry.labels)
    return registry
