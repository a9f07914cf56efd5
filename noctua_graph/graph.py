"""
Editable Noctua model graph.

Wraps the generic DirectedGraph engine with the bookkeeping an editor
needs (display element and connector maps, node ordering, non-anonymous
edges) plus the Minerva ingestion and folding algorithms.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from noctua_graph.config import CONFIG
from noctua_graph.engine import DirectedGraph
from noctua_graph.exceptions import EdgeIdentityError, MalformedResponseError
from noctua_graph.models import Annotatable, Annotation, Edge, Node
from noctua_graph.utils import generate_id, is_list, profile_time

logger = logging.getLogger(__name__)


def _list_field(raw: Dict[str, Any], field: str) -> List[Any]:
    value = raw.get(field)
    if value is None:
        return []
    if not is_list(value):
        raise MalformedResponseError(
            f"'{field}' must be a list in the response, got {type(value).__name__}"
        )
    return value


def _diagnose(diagnostics: Optional[List[str]], message: str, *args: Any) -> None:
    text = message % args if args else message
    logger.warning(text)
    if diagnostics is not None:
        diagnostics.append(text)


def _is_evidence_annotation(ann: Annotation) -> bool:
    return ann.key == CONFIG["EVIDENCE_KEY"] and ann.value_type == CONFIG["EVIDENCE_VALUE_TYPE"]


class Graph(Annotatable):
    """
    A Noctua model: individuals (nodes), facts (edges) and model annotations.

    Graph operations are not thread safe on their own; the multi-step
    transforms (folding, merge, update) hold a per-graph lock.
    """

    def __init__(self, id: Optional[str] = None):
        self._id = id
        self._engine = DirectedGraph()
        self._edges: Dict[str, Edge] = {}
        self._node_order: List[str] = []
        self._node_to_element: Dict[str, str] = {}
        self._element_to_node: Dict[str, str] = {}
        self._edge_to_connector: Dict[str, str] = {}
        self._connector_to_edge: Dict[str, str] = {}
        self._annotations: List[Annotation] = []
        self._lock = threading.RLock()

    @property
    def id(self) -> Optional[str]:
        return self._id

    @id.setter
    def id(self, new_id: Optional[str]) -> None:
        if new_id:
            self._id = new_id

    # ------------------------------
    # Engine queries
    # ------------------------------

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._engine.get_node(node_id)

    def has_node(self, node_id: str) -> bool:
        return self._engine.has_node(node_id)

    def all_nodes(self) -> List[Node]:
        return self._engine.all_nodes()

    def get_edge(self, subject_id: str, object_id: str, predicate_id: str) -> Optional[Edge]:
        return self._engine.get_edge(subject_id, object_id, predicate_id)

    def get_edges(self, subject_id: str, object_id: str) -> List[Edge]:
        return self._engine.get_edges(subject_id, object_id)

    def get_edge_by_id(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def all_edges(self) -> List[Edge]:
        return self._engine.all_edges()

    def get_parent_edges(self, node_id: str, predicate_id: Optional[str] = None) -> List[Edge]:
        return self._engine.get_parent_edges(node_id, predicate_id)

    def get_child_edges(self, node_id: str, predicate_id: Optional[str] = None) -> List[Edge]:
        return self._engine.get_child_edges(node_id, predicate_id)

    def get_parent_nodes(self, node_id: str, predicate_id: Optional[str] = None) -> List[Node]:
        return self._engine.get_parent_nodes(node_id, predicate_id)

    def get_child_nodes(self, node_id: str, predicate_id: Optional[str] = None) -> List[Node]:
        return self._engine.get_child_nodes(node_id, predicate_id)

    def is_root_node(self, node_id: str) -> bool:
        return self._engine.is_root_node(node_id)

    def is_leaf_node(self, node_id: str) -> bool:
        return self._engine.is_leaf_node(node_id)

    def get_root_nodes(self) -> List[Node]:
        return self._engine.get_root_nodes()

    def get_leaf_nodes(self) -> List[Node]:
        return self._engine.get_leaf_nodes()

    def get_singleton_nodes(self) -> List[Node]:
        return self._engine.get_singleton_nodes()

    def is_complete(self) -> bool:
        return self._engine.is_complete()

    # ------------------------------
    # Element / connector bookkeeping
    # ------------------------------

    @property
    def node_order(self) -> List[str]:
        return list(self._node_order)

    def get_node_elt_id(self, node_id: str) -> Optional[str]:
        return self._node_to_element.get(node_id)

    def get_node_by_elt_id(self, elt_id: str) -> Optional[Node]:
        node_id = self._element_to_node.get(elt_id)
        if node_id is None:
            return None
        return self.get_node(node_id)

    def create_edge_mapping(self, edge_id: str, connector_id: str) -> bool:
        """Link an edge to a display connector; False if the edge is unknown."""
        if edge_id not in self._edges:
            return False
        old_connector = self._edge_to_connector.get(edge_id)
        if old_connector is not None:
            self._connector_to_edge.pop(old_connector, None)
        old_edge = self._connector_to_edge.get(connector_id)
        if old_edge is not None:
            self._edge_to_connector.pop(old_edge, None)
        self._edge_to_connector[edge_id] = connector_id
        self._connector_to_edge[connector_id] = edge_id
        return True

    def get_connector_id_by_edge_id(self, edge_id: str) -> Optional[str]:
        return self._edge_to_connector.get(edge_id)

    def get_edge_id_by_connector_id(self, connector_id: str) -> Optional[str]:
        return self._connector_to_edge.get(connector_id)

    def get_edge_by_connector_id(self, connector_id: str) -> Optional[Edge]:
        edge_id = self._connector_to_edge.get(connector_id)
        if edge_id is None:
            return None
        return self._edges.get(edge_id)

    def remove_edge_by_connector_id(self, connector_id: str) -> bool:
        edge_id = self._connector_to_edge.get(connector_id)
        if edge_id is None:
            return False
        return self.remove_edge_by_id(edge_id)

    def _forget_edge(self, edge_id: str) -> None:
        self._edges.pop(edge_id, None)
        connector_id = self._edge_to_connector.pop(edge_id, None)
        if connector_id is not None:
            self._connector_to_edge.pop(connector_id, None)

    # ------------------------------
    # Insertion and removal
    # ------------------------------

    def add_node(self, node: Node) -> bool:
        """
        Insert (or replace) a node. Returns True on the first insertion of
        its id, which is when it gets an element id and goes to the front
        of the node order; re-adding keeps both to keep the GUI smooth.
        """
        first_time = node.id not in self._node_to_element
        self._engine.add_node(node)
        if first_time:
            elt_id = generate_id()
            self._node_to_element[node.id] = elt_id
            self._element_to_node[elt_id] = node.id
            self._node_order.insert(0, node.id)
        return first_time

    def remove_node(self, node_id: str, clean_p: bool = False) -> bool:
        """Remove a node; with ``clean_p`` its incident edges are removed too."""
        found = self._engine.has_node(node_id)
        if found and clean_p:
            for edge in self.get_parent_edges(node_id) + self.get_child_edges(node_id):
                self._forget_edge(edge.id)
        if node_id in self._node_order:
            self._node_order.remove(node_id)
        elt_id = self._node_to_element.pop(node_id, None)
        if elt_id is not None:
            self._element_to_node.pop(elt_id, None)
        self._engine.remove_node(node_id, clean=clean_p)
        return found

    def add_edge(self, edge: Edge) -> None:
        if getattr(edge, "id", None) is None:
            raise EdgeIdentityError(f"edges in a Noctua graph must have an id: {edge!r}")
        previous = self._edges.get(edge.id)
        if previous is not None and previous is not edge:
            self._engine.remove_edge(previous.subject_id, previous.object_id, previous.predicate_id)
        displaced = self._engine.get_edge(edge.subject_id, edge.object_id, edge.predicate_id)
        if displaced is not None and displaced.id != edge.id:
            self._forget_edge(displaced.id)
        self._engine.add_edge(edge)
        self._edges[edge.id] = edge

    def remove_edge_by_id(self, edge_id: str) -> bool:
        edge = self._edges.get(edge_id)
        if edge is None:
            return False
        self._engine.remove_edge(edge.subject_id, edge.object_id, edge.predicate_id)
        self._forget_edge(edge_id)
        return True

    def remove_edge(self, subject_id: str, object_id: str, predicate_id: str) -> bool:
        edge = self._engine.get_edge(subject_id, object_id, predicate_id)
        if edge is None:
            return False
        return self.remove_edge_by_id(edge.id)

    # ------------------------------
    # Ingestion
    # ------------------------------

    def add_node_from_individual(
        self, individual: Dict[str, Any], diagnostics: Optional[List[str]] = None
    ) -> Optional[Node]:
        """Build and insert a node from a Minerva individual; None if it has no id."""
        if not isinstance(individual, dict) or not individual.get("id"):
            _diagnose(diagnostics, "skipping individual without id: %r", individual)
            return None
        types = _list_field(individual, "type")
        inferred_types = _list_field(individual, "inferred-type")
        node = Node(individual["id"], types=types, inferred_types=inferred_types)
        for kv_set in _list_field(individual, "annotations"):
            ann = Annotation(kv_set)
            if ann.key is None:
                _diagnose(diagnostics, "malformed annotation on individual %s: %r", node.id, kv_set)
            node.add_annotation(ann)
        self.add_node(node)
        return node

    def add_edge_from_fact(
        self, fact: Dict[str, Any], diagnostics: Optional[List[str]] = None
    ) -> Optional[Edge]:
        """Build and insert an edge from a Minerva fact; None if it is incomplete."""
        if not isinstance(fact, dict) or not all(
            fact.get(field) for field in ("subject", "object", "property")
        ):
            _diagnose(diagnostics, "skipping incomplete fact: %r", fact)
            return None
        annotations = []
        for kv_set in _list_field(fact, "annotations"):
            ann = Annotation(kv_set)
            if ann.key is None:
                _diagnose(
                    diagnostics,
                    "skipping fact %s -[%s]-> %s with malformed annotation: %r",
                    fact["subject"],
                    fact["property"],
                    fact["object"],
                    kv_set,
                )
                return None
            annotations.append(ann)
        edge = Edge(fact["subject"], fact["object"], fact["property"])
        if fact.get("property-label"):
            edge.metadata["property-label"] = fact["property-label"]
        for ann in annotations:
            edge.add_annotation(ann)
        self.add_edge(edge)
        return edge

    @profile_time
    def load_data_base(self, data: Dict[str, Any]) -> List[str]:
        """
        Load a Minerva model response: id, annotations, facts, individuals.

        Facts go in before individuals; edges only record endpoint ids, so
        their nodes may arrive later. Returns the diagnostics for this call.
        """
        diagnostics: List[str] = []
        if data.get("id"):
            self._id = data["id"]
        for kv_set in _list_field(data, "annotations"):
            ann = Annotation(kv_set)
            if ann.key is None:
                _diagnose(diagnostics, "malformed model annotation: %r", kv_set)
            self.add_annotation(ann)
        for fact in _list_field(data, "facts"):
            self.add_edge_from_fact(fact, diagnostics)
        for individual in _list_field(data, "individuals"):
            self.add_node_from_individual(individual, diagnostics)
        logger.info(
            "Loaded model %s: %d node(s), %d edge(s), %d annotation(s)",
            self._id,
            self._engine.node_count(),
            self._engine.edge_count(),
            len(self._annotations),
        )
        return diagnostics

    def load_data_fold_evidence(self, data: Dict[str, Any]) -> List[str]:
        diagnostics = self.load_data_base(data)
        self.fold_evidence()
        return diagnostics

    def load_data_go_noctua(
        self, data: Dict[str, Any], relation_list: Optional[List[str]] = None
    ) -> List[str]:
        diagnostics = self.load_data_fold_evidence(data)
        self.fold_go_noctua(relation_list)
        return diagnostics

    # ------------------------------
    # Folding
    # ------------------------------

    @profile_time
    def fold_evidence(self) -> int:
        """
        Move singleton nodes named by IRI evidence annotations into the
        referencing node or edge as referenced individuals.

        Every node and edge is scanned once, singletons included, against
        the singletons present before the pass. A singleton cited by several
        owners is shared by all of them. Returns the number of references
        resolved.
        """
        with self._lock:
            singletons = {node.id: node for node in self.get_singleton_nodes()}
            owners: List[Any] = self.all_nodes()
            owners.extend(self.all_edges())
            folded = 0
            for owner in owners:
                for ann in owner.get_annotations_by_filter(_is_evidence_annotation):
                    evidence = singletons.get(ann.value)
                    if evidence is None or ann.value == owner.id:
                        continue
                    if self.has_node(evidence.id):
                        self.remove_node(evidence.id)
                    owner.add_referenced_individual(evidence)
                    folded += 1
            logger.info("Folded %d evidence reference(s) in model %s", folded, self._id)
            return folded

    def _is_foldable(self, parent_id: str, anchor_id: str) -> bool:
        if not self.is_root_node(parent_id):
            return False
        child_edges = self.get_child_edges(parent_id)
        return bool(child_edges) and all(edge.subject_id == anchor_id for edge in child_edges)

    def _fold_pass(self, relations: List[str]) -> int:
        folded = 0
        for anchor in self.all_nodes():
            if self.get_node(anchor.id) is not anchor:
                continue
            candidate = anchor.subgraph
            if candidate is None:
                candidate = Graph()
                candidate.add_node(anchor.clone())
            for relation in relations:
                for parent in self.get_parent_nodes(anchor.id, relation):
                    if not self._is_foldable(parent.id, anchor.id):
                        continue
                    candidate.add_node(parent.clone())
                    for edge in self.get_child_edges(parent.id):
                        candidate.add_edge(edge.clone())
                    self.remove_node(parent.id, clean_p=True)
                    folded += 1
            if len(candidate.all_nodes()) > 1:
                anchor.subgraph = candidate
        return folded

    @profile_time
    def fold_go_noctua(self, relation_list: Optional[List[str]] = None) -> int:
        """
        Hide single-use parents under the node that uses them.

        For each node, parents reached through ``relation_list`` that are
        roots with the node as their only child are moved, with their
        edges, into the node's embedded subgraph (seeded with a copy of
        the node). Folding a parent can make its anchor foldable in turn,
        so passes repeat until nothing changes; the result does not depend
        on node order. Returns the number of parents folded.
        """
        relations = CONFIG["FOLD_RELATIONS"] if relation_list is None else relation_list
        with self._lock:
            folded = 0
            while True:
                pass_folded = self._fold_pass(relations)
                if not pass_folded:
                    break
                folded += pass_folded
            logger.info("Folded %d node(s) into subgraphs in model %s", folded, self._id)
            return folded

    @profile_time
    def unfold(self) -> int:
        """Expand every embedded subgraph back into the graph, recursively."""
        with self._lock:
            pending = [node for node in self.all_nodes() if node.has_subgraph()]
            restored = 0
            while pending:
                anchor = pending.pop(0)
                subgraph = anchor.clear_subgraph()
                for node in subgraph.all_nodes():
                    if node.id == anchor.id:
                        continue
                    node_copy = node.clone()
                    self.add_node(node_copy)
                    restored += 1
                    if node_copy.has_subgraph():
                        pending.append(node_copy)
                for edge in subgraph.all_edges():
                    self.add_edge(edge.clone())
            logger.info("Unfolded %d node(s) in model %s", restored, self._id)
            return restored

    # ------------------------------
    # Merge and update
    # ------------------------------

    @profile_time
    def merge_in(self, other: "Graph") -> None:
        """
        Add whatever ``other`` has that this graph lacks. Existing nodes and
        edges are kept as they are; annotations are added unless an
        identical (key, value, value_type) one is already present. The id
        of this graph is never changed.
        """
        with self._lock:
            for node in other.all_nodes():
                if not self.has_node(node.id):
                    self.add_node(node.clone())
            for edge in other.all_edges():
                if edge.id in self._edges or self._engine.has_edge(
                    edge.subject_id, edge.object_id, edge.predicate_id
                ):
                    continue
                self.add_edge(edge.clone())
            for ann in other.annotations:
                if not any(ann.matches(mine) for mine in self._annotations):
                    self.add_annotation(ann.clone())
            logger.info("Merged graph %s into %s", other.id, self._id)

    @profile_time
    def update_with(self, other: "Graph") -> None:
        """
        Make ``other`` authoritative for everything it mentions.

        Model annotations are replaced wholesale, nodes are clobbered by
        id, the outgoing edges of every updated node are dropped and the
        edges of ``other`` are put in. Incoming edges from nodes that
        ``other`` does not mention are left alone.
        """
        with self._lock:
            self._annotations = [ann.clone() for ann in other.annotations]
            updated_ids = []
            for node in other.all_nodes():
                self.add_node(node.clone())
                updated_ids.append(node.id)
            for node_id in updated_ids:
                for edge in self.get_parent_edges(node_id):
                    self.remove_edge_by_id(edge.id)
            for edge in other.all_edges():
                self.remove_edge_by_id(edge.id)
                self.add_edge(edge.clone())
            logger.info(
                "Updated model %s with %d node(s) and %d edge(s)",
                self._id,
                len(updated_ids),
                len(other.all_edges()),
            )

    # ------------------------------
    # Copies and reporting
    # ------------------------------

    def clone(self) -> "Graph":
        """Deep copy, including order and element/connector maps."""
        new_graph = Graph(self._id)
        new_graph._annotations = [ann.clone() for ann in self._annotations]
        for node in self.all_nodes():
            new_graph._engine.add_node(node.clone())
        for edge in self.all_edges():
            edge_copy = edge.clone()
            new_graph._engine.add_edge(edge_copy)
            new_graph._edges[edge_copy.id] = edge_copy
        new_graph._node_order = list(self._node_order)
        new_graph._node_to_element = dict(self._node_to_element)
        new_graph._element_to_node = dict(self._element_to_node)
        new_graph._edge_to_connector = dict(self._edge_to_connector)
        new_graph._connector_to_edge = dict(self._connector_to_edge)
        return new_graph

    def report_state(self) -> str:
        """Plain-text summary of the graph, mostly for debugging."""
        lines = [
            f"graph {self._id}: {self._engine.node_count()} node(s), "
            f"{self._engine.edge_count()} edge(s), {len(self._annotations)} annotation(s)"
        ]
        for node in self.all_nodes():
            types = ", ".join(str(t) for t in node.types) or "-"
            line = (
                f"  node {node.id} [{types}] annotations={len(node.annotations)}"
                f" evidence={len(node.referenced_individuals)}"
            )
            if node.subgraph is not None:
                line += (
                    f" subgraph={len(node.subgraph.all_nodes())}n/"
                    f"{len(node.subgraph.all_edges())}e"
                )
            lines.append(line)
        for edge in self.all_edges():
            lines.append(
                f"  edge {edge.subject_id} -[{edge.predicate_id}]-> {edge.object_id}"
                f" evidence={len(edge.referenced_individuals)}"
            )
        report = "\n".join(lines)
        logger.debug(report)
        return report
