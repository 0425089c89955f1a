"""
Pytest configuration and fixtures for verscope tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Generator

import pytest

from verscope.config import reset_config
from verscope.graph.schema import SchemaGraph
from verscope.lifecycle import LifecycleStore
from verscope.types import ElementKind
from verscope.versions import VersionRegistry, register


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config() -> Generator[None, None, None]:
    """Drop VERSCOPE_* variables and the config singleton around each test."""
    original = {k: v for k, v in os.environ.items() if k.startswith("VERSCOPE_")}
    for key in original:
        del os.environ[key]
    reset_config()

    yield

    reset_config()
    for key in [k for k in os.environ if k.startswith("VERSCOPE_")]:
        del os.environ[key]
    os.environ.update(original)


# ============================================================================
# Schema Fixtures
# ============================================================================


@pytest.fixture
def registry() -> VersionRegistry:
    """Two-version registry."""
    return register(["1.0", "2.0"])


@pytest.fixture
def registry3() -> VersionRegistry:
    """Three-version registry whose labels do not sort lexically."""
    return register(["2.0", "9.0", "10.0"])


@dataclass
class PetStore:
    """Handles to the sample pet store schema."""

    graph: SchemaGraph
    lifecycle: LifecycleStore
    registry: VersionRegistry
    ns: str
    pet: str
    pet_name: str
    pet_age: str
    toy: str
    list_toys: str
    list_toys_response: str
    tree: str
    tree_children: str


@pytest.fixture
def pet_store(registry: VersionRegistry) -> PetStore:
    """Valid schema over ["1.0", "2.0"].

    - ``Pet`` has no lifecycle; its property ``years`` becomes ``age`` in 2.0
    - ``Toy`` and ``listToys`` (which references ``Toy``) are added in 2.0
    - ``Tree`` has a property whose value type is ``Tree`` again
    """
    graph = SchemaGraph()
    ns = graph.add_element(None, ElementKind.NAMESPACE, "PetStore")
    pet = graph.add_element(ns, ElementKind.MODEL, "Pet")
    pet_name = graph.add_element(pet, ElementKind.PROPERTY, "name")
    pet_age = graph.add_element(pet, ElementKind.PROPERTY, "years")
    toy = graph.add_element(ns, ElementKind.MODEL, "Toy")
    list_toys = graph.add_element(ns, ElementKind.OPERATION, "listToys")
    response = graph.add_element(list_toys, ElementKind.RESPONSE_VARIANT, "ok")
    tree = graph.add_element(ns, ElementKind.MODEL, "Tree")
    tree_children = graph.add_element(tree, ElementKind.PROPERTY, "children")

    graph.add_reference(list_toys, toy)
    graph.add_reference(response, toy)
    graph.add_reference(tree_children, tree)

    lifecycle = LifecycleStore(graph, registry)
    lifecycle.renamed(pet_age, "2.0", "age")
    lifecycle.added(toy, "2.0")
    lifecycle.added(list_toys, "2.0")

    return PetStore(
        graph=graph,
        lifecycle=lifecycle,
        registry=registry,
        ns=ns,
        pet=pet,
        pet_name=pet_name,
        pet_age=pet_age,
        toy=toy,
        list_toys=list_toys,
        list_toys_response=response,
        tree=tree,
        tree_children=tree_children,
    )
