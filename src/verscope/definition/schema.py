"""
Pydantic v2 models for versioned schema definition YAML documents.

A definition document carries the declared versions and the element tree,
with lifecycle annotations inline on each element.  It is the structured
hand-off format between a front-end and the engine.

All models use ``extra="forbid"`` to reject unknown keys at parse time.

Usage::

    from verscope.definition.schema import SchemaDefinition
    import yaml

    with open("petstore.versions.yaml") as fh:
        raw = yaml.safe_load(fh)
    definition = SchemaDefinition.model_validate(raw)
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from verscope.types import ElementKind


def _as_label(v: object) -> object:
    """YAML reads an unquoted ``1.0`` as a float; keep version labels textual."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


# ---------------------------------------------------------------------------
# Element models
# ---------------------------------------------------------------------------


class RenameSpec(BaseModel):
    """Rename applied from ``version`` onward."""

    model_config = ConfigDict(extra="forbid")

    version: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="Name in effect from this version")

    @field_validator("version", mode="before")
    @classmethod
    def _stringify_version(cls, v: object) -> object:
        return _as_label(v)


class ElementSpec(BaseModel):
    """One schema element and its inline lifecycle annotations."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Declared name")
    kind: ElementKind
    id: Optional[str] = Field(
        None, min_length=1, description="Explicit identity (path-derived when omitted)"
    )
    added: Optional[str] = Field(None, min_length=1, description="Version the element appears in")
    removed: Optional[str] = Field(None, min_length=1, description="Version the element disappears in")
    renamed: list[RenameSpec] = Field(default_factory=list)
    references: list[str] = Field(
        default_factory=list,
        description="Referenced elements, by id or dotted declared-name path",
    )
    children: list["ElementSpec"] = Field(default_factory=list)

    @field_validator("added", "removed", mode="before")
    @classmethod
    def _stringify_versions(cls, v: object) -> object:
        return _as_label(v)


# ---------------------------------------------------------------------------
# Top-level document
# ---------------------------------------------------------------------------


class SchemaDefinition(BaseModel):
    """
    Root model for a versioned schema definition YAML file.

    Declares the ordered versions and the element tree rooted at a single
    namespace.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(
        ..., min_length=1, description="Document format version (e.g. 0.1.0)"
    )
    contract_type: Literal["versioned_schema"] = Field(
        "versioned_schema",
        description="Document type discriminator",
    )
    description: Optional[str] = Field(None)
    versions: list[str] = Field(..., min_length=1, description="Version labels, oldest first")
    root: ElementSpec

    @field_validator("versions", mode="before")
    @classmethod
    def _stringify_versions(cls, v: object) -> object:
        if isinstance(v, list):
            return [_as_label(item) for item in v]
        return v

    def count_elements(self) -> int:
        stack = [self.root]
        total = 0
        while stack:
            spec = stack.pop()
            total += 1
            stack.extend(spec.children)
        return total


ElementSpec.model_rebuild()
