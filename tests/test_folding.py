"""Tests for evidence folding and subgraph fold/unfold."""

import pytest

from noctua_graph import Graph, Node
from noctua_graph.models import Annotation, Edge

from conftest import GO_NOCTUA_RELATIONS


def _evidence(value):
    return Annotation({"key": "evidence", "value": value, "value-type": "IRI"})


@pytest.fixture
def evidence_graph(basic_graph):
    basic_graph.fold_evidence()
    return basic_graph


class TestFoldEvidence:
    """Evidence individuals become referenced individuals of their users."""

    def test_counts(self, basic_graph):
        assert basic_graph.fold_evidence() == 8
        assert len(basic_graph.all_nodes()) == 14
        assert len(basic_graph.all_edges()) == 14

    def test_edges_carry_evidence(self, evidence_graph, basic_iri):
        edge = evidence_graph.get_edge(basic_iri("mf1"), basic_iri("gp1"), "RO:0002333")

        assert [ind.id for ind in edge.referenced_individuals] == [basic_iri("ev1")]
        assert edge.referenced_individuals[0].type == "referenced"
        assert not evidence_graph.has_node(basic_iri("ev1"))

    def test_nodes_carry_evidence(self, evidence_graph, basic_iri):
        mf4 = evidence_graph.get_node(basic_iri("mf4"))
        cc3 = evidence_graph.get_node(basic_iri("cc3"))

        assert [ind.id for ind in mf4.referenced_individuals] == [basic_iri("ev7")]
        assert [ind.id for ind in cc3.referenced_individuals] == [basic_iri("ev8")]

    def test_basic_evidence(self, evidence_graph, basic_iri):
        mf4 = evidence_graph.get_node(basic_iri("mf4"))

        assert mf4.get_basic_evidence(["source"]) == [
            {"id": basic_iri("ev7"), "cls": "ECO:0000021", "source": "PMID:12048186"}
        ]

    def test_unresolved_reference_is_left_alone(self, evidence_graph, basic_iri):
        edge = evidence_graph.get_edge(basic_iri("cc3"), basic_iri("anat1"), "BFO:0000050")

        assert edge.referenced_individuals == []
        assert edge.get_annotations_by_key("evidence")[0].value == basic_iri("missing")

    def test_folding_twice_is_a_noop(self, evidence_graph):
        assert evidence_graph.fold_evidence() == 0
        assert len(evidence_graph.all_nodes()) == 14

    def test_shared_evidence_is_the_same_object(self):
        graph = Graph()
        for node_id in ("a", "b", "ev"):
            graph.add_node(Node(node_id))
        first = Edge("a", "b", "p")
        second = Edge("b", "a", "q")
        first.add_annotation(_evidence("ev"))
        second.add_annotation(_evidence("ev"))
        graph.add_edge(first)
        graph.add_edge(second)

        assert graph.fold_evidence() == 2
        assert not graph.has_node("ev")
        ref1 = first.referenced_individuals[0]
        ref2 = second.referenced_individuals[0]
        assert ref1.id == "ev"
        assert ref1 is ref2

    def test_singleton_evidence_is_scanned_too(self):
        """Evidence individuals pick up the singletons they cite themselves."""
        graph = Graph()
        for node_id in ("a", "b", "ev1", "ev2"):
            graph.add_node(Node(node_id))
        graph.add_edge(Edge("a", "b", "p"))
        graph.get_node("a").add_annotation(_evidence("ev1"))
        ev1 = graph.get_node("ev1")
        ev1.add_annotation(_evidence("ev2"))

        assert graph.fold_evidence() == 2
        assert not graph.has_node("ev1")
        assert not graph.has_node("ev2")
        assert {n.id for n in graph.all_nodes()} == {"a", "b"}
        assert graph.get_node("a").referenced_individuals == [ev1]
        assert [ind.id for ind in ev1.referenced_individuals] == ["ev2"]

    def test_self_citation_is_ignored(self):
        graph = Graph()
        graph.add_node(Node("ev"))
        graph.get_node("ev").add_annotation(_evidence("ev"))

        assert graph.fold_evidence() == 0
        assert graph.has_node("ev")

    def test_only_iri_evidence_counts(self):
        graph = Graph()
        graph.add_node(Node("a"))
        graph.add_node(Node("ev"))
        graph.get_node("a").add_annotation(Annotation({"key": "evidence", "value": "ev"}))

        assert graph.fold_evidence() == 0
        assert graph.has_node("ev")

    def test_load_data_fold_evidence(self, basic_response):
        graph = Graph()

        assert graph.load_data_fold_evidence(basic_response) == []
        assert len(graph.all_nodes()) == 14


class TestFoldGoNoctua:
    """Single-use parents are folded into subgraphs."""

    def test_basic_counts(self, basic_response):
        graph = Graph()
        graph.load_data_go_noctua(basic_response, GO_NOCTUA_RELATIONS)

        assert len(graph.all_nodes()) == 8
        assert len(graph.all_edges()) == 8

    def test_default_relations(self, evidence_graph):
        assert evidence_graph.fold_go_noctua() == 6

    def test_subgraph_contents(self, evidence_graph, basic_iri):
        evidence_graph.fold_go_noctua(GO_NOCTUA_RELATIONS)
        mf1 = evidence_graph.get_node(basic_iri("mf1"))
        subgraph = mf1.subgraph

        assert subgraph is not None
        assert {n.id for n in subgraph.all_nodes()} == {
            basic_iri("mf1"),
            basic_iri("gp1"),
            basic_iri("cc1"),
        }
        assert len(subgraph.all_edges()) == 2
        hidden = subgraph.get_edge(basic_iri("mf1"), basic_iri("gp1"), "RO:0002333")
        assert [ind.id for ind in hidden.referenced_individuals] == [basic_iri("ev1")]

    def test_non_root_parent_stays(self, evidence_graph, basic_iri):
        evidence_graph.fold_go_noctua(GO_NOCTUA_RELATIONS)

        assert evidence_graph.has_node(basic_iri("cc3"))
        assert evidence_graph.get_node(basic_iri("mf3")).has_subgraph()
        assert not evidence_graph.get_node(basic_iri("bp1")).has_subgraph()

    def test_shared_parent_stays(self, evidence_graph, basic_iri):
        folded = evidence_graph.fold_go_noctua(["BFO:0000050"])

        assert folded == 2
        assert evidence_graph.has_node(basic_iri("bp1"))
        assert not evidence_graph.has_node(basic_iri("bp3"))
        assert not evidence_graph.has_node(basic_iri("anat1"))

    def test_empty_relation_list(self, evidence_graph):
        assert evidence_graph.fold_go_noctua([]) == 0
        assert len(evidence_graph.all_nodes()) == 14

    def test_unfold_restores(self, evidence_graph, basic_iri):
        edge_ids = {e.id for e in evidence_graph.all_edges()}
        node_ids = {n.id for n in evidence_graph.all_nodes()}
        evidence_graph.fold_go_noctua(GO_NOCTUA_RELATIONS)

        assert evidence_graph.unfold() == 6
        assert {n.id for n in evidence_graph.all_nodes()} == node_ids
        assert {e.id for e in evidence_graph.all_edges()} == edge_ids
        assert not any(n.has_subgraph() for n in evidence_graph.all_nodes())
        edge = evidence_graph.get_edge(basic_iri("mf2"), basic_iri("gp2"), "RO:0002333")
        assert [ind.id for ind in edge.referenced_individuals] == [basic_iri("ev4")]

    def test_restored_nodes_get_element_ids(self, evidence_graph):
        evidence_graph.fold_go_noctua(GO_NOCTUA_RELATIONS)
        evidence_graph.unfold()

        for node in evidence_graph.all_nodes():
            assert evidence_graph.get_node_elt_id(node.id) is not None

    def test_double_edge_to_parent(self):
        graph = Graph()
        graph.add_node(Node("a"))
        graph.add_node(Node("p"))
        graph.add_edge(Edge("a", "p", "RO:0002333"))
        graph.add_edge(Edge("a", "p", "BFO:0000066"))

        assert graph.fold_go_noctua(GO_NOCTUA_RELATIONS) == 1
        assert [n.id for n in graph.all_nodes()] == ["a"]
        assert len(graph.get_node("a").subgraph.all_edges()) == 2

        assert graph.unfold() == 1
        assert len(graph.get_edges("a", "p")) == 2


class TestNestedFolding:
    """A parent whose own parent was folded first."""

    def test_nested_structure(self, deep_graph, deep_iri):
        assert deep_graph.fold_go_noctua(GO_NOCTUA_RELATIONS) == 5
        assert {n.id for n in deep_graph.all_nodes()} == {
            deep_iri("mf1"),
            deep_iri("bp1"),
            deep_iri("mf2"),
        }

        outer = deep_graph.get_node(deep_iri("mf1")).subgraph
        assert {n.id for n in outer.all_nodes()} == {
            deep_iri("mf1"),
            deep_iri("gp1"),
            deep_iri("cc1"),
        }
        inner = outer.get_node(deep_iri("cc1")).subgraph
        assert {n.id for n in inner.all_nodes()} == {deep_iri("cc1"), deep_iri("cx1")}

    def test_repeated_fold_unfold_is_stable(self, deep_graph):
        for _ in range(100):
            deep_graph.fold_go_noctua(GO_NOCTUA_RELATIONS)
            assert len(deep_graph.all_nodes()) == 3
            assert len(deep_graph.all_edges()) == 2

            deep_graph.unfold()
            assert len(deep_graph.all_nodes()) == 8
            assert len(deep_graph.all_edges()) == 7
