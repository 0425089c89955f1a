"""Tests for the schema graph arena."""

from __future__ import annotations

import pytest

from verscope.config import get_config
from verscope.errors import FrozenStateError, GraphIntegrityError
from verscope.graph.schema import SchemaGraph
from verscope.types import ElementKind


@pytest.fixture
def graph() -> SchemaGraph:
    g = SchemaGraph()
    g.add_element(None, ElementKind.NAMESPACE, "Root")
    return g


class TestAddElement:
    def test_root(self, graph):
        assert graph.root_id == "Root"
        assert graph.get("Root").parent_id is None

    def test_path_derived_ids(self, graph):
        model = graph.add_element("Root", ElementKind.MODEL, "Pet")
        prop = graph.add_element(model, ElementKind.PROPERTY, "name")
        assert model == "Root/Pet"
        assert prop == "Root/Pet/name"

    def test_same_name_siblings_get_distinct_ids(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "Pet")
        b = graph.add_element("Root", ElementKind.MODEL, "Pet")
        assert a != b
        assert b == "Root/Pet#2"

    def test_explicit_id(self, graph):
        eid = graph.add_element("Root", ElementKind.MODEL, "Pet", element_id="m1")
        assert eid == "m1"
        assert graph.get("m1").name == "Pet"

    def test_explicit_id_taken(self, graph):
        graph.add_element("Root", ElementKind.MODEL, "Pet", element_id="m1")
        with pytest.raises(GraphIntegrityError, match="already exists"):
            graph.add_element("Root", ElementKind.MODEL, "Toy", element_id="m1")

    def test_missing_parent(self, graph):
        with pytest.raises(GraphIntegrityError, match="does not exist"):
            graph.add_element("Nope", ElementKind.MODEL, "Pet")

    def test_second_root(self, graph):
        with pytest.raises(GraphIntegrityError, match="root"):
            graph.add_element(None, ElementKind.NAMESPACE, "Other")

    def test_root_must_be_namespace(self):
        with pytest.raises(GraphIntegrityError, match="namespace"):
            SchemaGraph().add_element(None, ElementKind.MODEL, "Pet")

    def test_kind_rules(self, graph):
        model = graph.add_element("Root", ElementKind.MODEL, "Pet")
        with pytest.raises(GraphIntegrityError, match="cannot be contained"):
            graph.add_element(model, ElementKind.OPERATION, "op")
        with pytest.raises(GraphIntegrityError):
            graph.add_element("Root", ElementKind.PROPERTY, "loose")

    def test_kind_rules_relaxed(self):
        g = SchemaGraph(strict_containment=False)
        root = g.add_element(None, ElementKind.NAMESPACE, "Root")
        assert g.add_element(root, ElementKind.PROPERTY, "loose") == "Root/loose"

    def test_kind_rules_from_config(self):
        get_config(strict_containment=False)
        assert SchemaGraph().strict_containment is False

    def test_kind_accepts_string(self, graph):
        eid = graph.add_element("Root", "model", "Pet")
        assert graph.get(eid).kind is ElementKind.MODEL

    def test_empty_name(self, graph):
        with pytest.raises(GraphIntegrityError):
            graph.add_element("Root", ElementKind.MODEL, "")

    def test_children_keep_declaration_order(self, graph):
        names = ["b", "a", "c"]
        for n in names:
            graph.add_element("Root", ElementKind.MODEL, n)
        assert [graph.get(c).name for c in graph.children_of("Root")] == names


class TestReferences:
    def test_self_reference_allowed(self, graph):
        m = graph.add_element("Root", ElementKind.MODEL, "Node")
        graph.add_reference(m, m)
        assert graph.references_from(m) == [m]

    def test_mutual_recursion_allowed(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        b = graph.add_element("Root", ElementKind.MODEL, "B")
        graph.add_reference(a, b)
        graph.add_reference(b, a)
        assert graph.references_to(a) == [b]

    def test_duplicate_reference_ignored(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        b = graph.add_element("Root", ElementKind.MODEL, "B")
        graph.add_reference(a, b)
        graph.add_reference(a, b)
        assert graph.references_from(a) == [b]
        assert list(graph.iter_edges()) == [(a, b)]

    def test_unknown_endpoints(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        with pytest.raises(GraphIntegrityError):
            graph.add_reference(a, "missing")
        with pytest.raises(GraphIntegrityError):
            graph.add_reference("missing", a)


class TestReparent:
    def test_move(self, graph):
        inner = graph.add_element("Root", ElementKind.NAMESPACE, "Inner")
        m = graph.add_element("Root", ElementKind.MODEL, "Pet")
        graph.reparent(m, inner)
        assert graph.get(m).parent_id == inner
        assert graph.children_of(inner) == [m]
        assert m not in graph.children_of("Root")

    def test_cycle_rejected(self, graph):
        outer = graph.add_element("Root", ElementKind.NAMESPACE, "Outer")
        inner = graph.add_element(outer, ElementKind.NAMESPACE, "Inner")
        with pytest.raises(GraphIntegrityError, match="cycle"):
            graph.reparent(outer, inner)
        with pytest.raises(GraphIntegrityError, match="cycle"):
            graph.reparent(outer, outer)

    def test_root_cannot_move(self, graph):
        inner = graph.add_element("Root", ElementKind.NAMESPACE, "Inner")
        with pytest.raises(GraphIntegrityError):
            graph.reparent("Root", inner)

    def test_kind_rules_apply(self, graph):
        m = graph.add_element("Root", ElementKind.MODEL, "Pet")
        other = graph.add_element("Root", ElementKind.MODEL, "Toy")
        with pytest.raises(GraphIntegrityError):
            graph.reparent(other, m)


class TestQueries:
    def test_preorder(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        graph.add_element(a, ElementKind.PROPERTY, "x")
        graph.add_element("Root", ElementKind.MODEL, "B")
        assert [e.name for e in graph.iter_preorder()] == ["Root", "A", "x", "B"]

    def test_ancestors_and_path(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        x = graph.add_element(a, ElementKind.PROPERTY, "x")
        assert graph.ancestors(x) == [a, "Root"]
        assert graph.path_of(x) == "Root.A.x"

    def test_to_dict(self, graph):
        a = graph.add_element("Root", ElementKind.MODEL, "A")
        graph.add_reference(a, a)
        d = graph.to_dict()
        assert d["elements"][1] == {"id": a, "kind": "model", "name": "A", "parent_id": "Root"}
        assert d["references"] == [{"source_id": a, "target_id": a}]

    def test_unknown_element(self, graph):
        assert graph.get("missing") is None
        with pytest.raises(GraphIntegrityError):
            graph.children_of("missing")


class TestFrozen:
    def test_mutation_after_freeze(self, graph):
        graph._mark_frozen()
        with pytest.raises(FrozenStateError):
            graph.add_element("Root", ElementKind.MODEL, "A")
        with pytest.raises(FrozenStateError):
            graph.add_reference("Root", "Root")
