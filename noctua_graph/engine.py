"""Generic directed graph engine backing the Noctua model graph."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import networkx as nx


class DirectedGraph:
    """
    Node/edge storage with parent, child, root, leaf and singleton queries.

    Edges point from subject to object and are keyed by predicate, so
    a (subject, object, predicate) triple is unique. Edge endpoints do not
    have to be loaded as nodes: networkx keeps a bare placeholder vertex
    for them, which is never reported as a node.

    Direction follows bbop-graph: the object of an edge is the *parent*
    of its subject, so a root is a node that is nobody's subject.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Any] = {}
        self._graph = nx.MultiDiGraph()

    # ------------------------------
    # Nodes
    # ------------------------------

    def add_node(self, node: Any) -> None:
        self._nodes[node.id] = node
        self._graph.add_node(node.id)

    def get_node(self, node_id: str) -> Optional[Any]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def all_nodes(self) -> List[Any]:
        return list(self._nodes.values())

    def node_count(self) -> int:
        return len(self._nodes)

    def remove_node(self, node_id: str, clean: bool = False) -> bool:
        """Remove a node; with ``clean`` its incident edges go too."""
        if node_id not in self._nodes:
            return False
        del self._nodes[node_id]
        if clean and self._graph.has_node(node_id):
            incident = set(self._graph.in_edges(node_id, keys=True)) | set(
                self._graph.out_edges(node_id, keys=True)
            )
            for sub, obj, pred in incident:
                self._graph.remove_edge(sub, obj, key=pred)
                self._prune(sub)
                self._prune(obj)
        self._prune(node_id)
        return True

    def _prune(self, node_id: str) -> None:
        if (
            node_id not in self._nodes
            and self._graph.has_node(node_id)
            and self._graph.degree(node_id) == 0
        ):
            self._graph.remove_node(node_id)

    # ------------------------------
    # Edges
    # ------------------------------

    def add_edge(self, edge: Any) -> None:
        self._graph.add_edge(edge.subject_id, edge.object_id, key=edge.predicate_id, edge=edge)

    def get_edge(self, subject_id: str, object_id: str, predicate_id: str) -> Optional[Any]:
        data = self._graph.get_edge_data(subject_id, object_id, key=predicate_id)
        if data is None:
            return None
        return data["edge"]

    def has_edge(self, subject_id: str, object_id: str, predicate_id: str) -> bool:
        return self._graph.has_edge(subject_id, object_id, key=predicate_id)

    def get_edges(self, subject_id: str, object_id: str) -> List[Any]:
        """All edges between subject and object, whatever the predicate."""
        if not self._graph.has_edge(subject_id, object_id):
            return []
        return [data["edge"] for data in self._graph[subject_id][object_id].values()]

    def remove_edge(self, subject_id: str, object_id: str, predicate_id: str) -> bool:
        if not self._graph.has_edge(subject_id, object_id, key=predicate_id):
            return False
        self._graph.remove_edge(subject_id, object_id, key=predicate_id)
        self._prune(subject_id)
        self._prune(object_id)
        return True

    def all_edges(self) -> List[Any]:
        return [data["edge"] for _, _, data in self._graph.edges(data=True)]

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    # ------------------------------
    # Structural queries
    # ------------------------------

    def _iter_edges(self, view: Any, predicate_id: Optional[str]) -> Iterator[Any]:
        for _, _, pred, data in view:
            if predicate_id is None or pred == predicate_id:
                yield data["edge"]

    def get_parent_edges(self, node_id: str, predicate_id: Optional[str] = None) -> List[Any]:
        """Edges that have ``node_id`` as their subject."""
        if not self._graph.has_node(node_id):
            return []
        view = self._graph.out_edges(node_id, keys=True, data=True)
        return list(self._iter_edges(view, predicate_id))

    def get_child_edges(self, node_id: str, predicate_id: Optional[str] = None) -> List[Any]:
        """Edges that have ``node_id`` as their object."""
        if not self._graph.has_node(node_id):
            return []
        view = self._graph.in_edges(node_id, keys=True, data=True)
        return list(self._iter_edges(view, predicate_id))

    def get_parent_nodes(self, node_id: str, predicate_id: Optional[str] = None) -> List[Any]:
        seen: Dict[str, Any] = {}
        for edge in self.get_parent_edges(node_id, predicate_id):
            parent = self._nodes.get(edge.object_id)
            if parent is not None:
                seen.setdefault(parent.id, parent)
        return list(seen.values())

    def get_child_nodes(self, node_id: str, predicate_id: Optional[str] = None) -> List[Any]:
        seen: Dict[str, Any] = {}
        for edge in self.get_child_edges(node_id, predicate_id):
            child = self._nodes.get(edge.subject_id)
            if child is not None:
                seen.setdefault(child.id, child)
        return list(seen.values())

    def is_root_node(self, node_id: str) -> bool:
        return node_id in self._nodes and self._graph.out_degree(node_id) == 0

    def is_leaf_node(self, node_id: str) -> bool:
        return node_id in self._nodes and self._graph.in_degree(node_id) == 0

    def get_root_nodes(self) -> List[Any]:
        return [n for nid, n in self._nodes.items() if self._graph.out_degree(nid) == 0]

    def get_leaf_nodes(self) -> List[Any]:
        return [n for nid, n in self._nodes.items() if self._graph.in_degree(nid) == 0]

    def get_singleton_nodes(self) -> List[Any]:
        return [n for nid, n in self._nodes.items() if self._graph.degree(nid) == 0]

    def is_complete(self) -> bool:
        """True if every edge endpoint is a loaded node."""
        return all(nid in self._nodes for nid in self._graph.nodes)
