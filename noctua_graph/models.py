"""Data models for Noctua graph entities: annotations, individuals and facts."""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from noctua_graph.class_expression import ClassExpression
from noctua_graph.config import CONFIG
from noctua_graph.exceptions import MalformedResponseError
from noctua_graph.utils import clone_data, generate_id, is_list

if TYPE_CHECKING:
    from noctua_graph.graph import Graph

logger = logging.getLogger(__name__)


class Annotation:
    """
    A mutable key/value(/value-type) record with a stable id.

    The wire shape is ``{"key": "contributor", "value": "GOC:kltm"}``,
    optionally with a ``"value-type"`` such as ``"IRI"``. A k/v set
    missing either key or value still builds an (empty) annotation; the
    problem is only logged, so callers should check ``key`` before use.
    """

    def __init__(self, kv_set: Optional[Dict[str, Any]] = None):
        self._id: str = generate_id()
        self._properties: Dict[str, Any] = {}
        if kv_set is not None:
            if isinstance(kv_set, dict) and kv_set.get("key") and kv_set.get("value"):
                self._properties = clone_data(kv_set)
            else:
                logger.warning("bad annotation k/v set: %r", kv_set)

    @property
    def id(self) -> str:
        return self._id

    @property
    def key(self) -> Optional[str]:
        return self._properties.get("key")

    @key.setter
    def key(self, key: Optional[str]) -> None:
        if key:
            self._properties["key"] = key

    @property
    def value(self) -> Optional[str]:
        return self._properties.get("value")

    @value.setter
    def value(self, value: Optional[str]) -> None:
        if value:
            self._properties["value"] = value

    @property
    def value_type(self) -> Optional[str]:
        return self._properties.get("value-type")

    @value_type.setter
    def value_type(self, value_type: Optional[str]) -> None:
        if value_type:
            self._properties["value-type"] = value_type

    @property
    def properties(self) -> Dict[str, Any]:
        return clone_data(self._properties)

    def set(self, key: str, value: str, value_type: Optional[str] = None) -> None:
        """Overwrite the whole triple; an omitted value_type is removed."""
        self._properties["key"] = key
        self._properties["value"] = value
        if value_type:
            self._properties["value-type"] = value_type
        else:
            self._properties.pop("value-type", None)

    def delete(self) -> bool:
        """Clear all properties, keeping the id. True if anything was cleared."""
        had_properties = bool(self._properties)
        self._properties = {}
        return had_properties

    def property_value(self, key: str, value: Any = None) -> Any:
        """Get a raw property by key, setting it first when a value is given."""
        if not key:
            return None
        if value is not None:
            self._properties[key] = value
        return self._properties.get(key)

    def delete_property(self, key: str) -> bool:
        if not key or key not in self._properties:
            return False
        del self._properties[key]
        return True

    def matches(self, other: "Annotation") -> bool:
        """Structural equality on (key, value, value_type); ids are ignored."""
        return (
            self.key == other.key
            and self.value == other.value
            and self.value_type == other.value_type
        )

    def clone(self) -> "Annotation":
        new_ann = Annotation()
        new_ann._id = self._id
        new_ann._properties = clone_data(self._properties)
        return new_ann

    def __repr__(self) -> str:
        return f"Annotation({self.key!r}, {self.value!r}, {self.value_type!r})"


def _filter_strict(items: Iterable[Any], predicate: Callable[[Any], Any]) -> List[Any]:
    # Only a literal True counts; truthy objects or strings do not.
    return [item for item in items if predicate(item) is True]


def _last_by_id(items: Iterable[Any], item_id: str) -> Optional[Any]:
    found = None
    for item in items:
        if item.id == item_id:
            found = item
    return found


class Annotatable:
    """Bulk annotation operations shared by graphs, nodes and edges."""

    _annotations: List[Annotation]

    @property
    def annotations(self) -> List[Annotation]:
        return self._annotations

    @annotations.setter
    def annotations(self, in_anns: List[Annotation]) -> None:
        if is_list(in_anns):
            self._annotations = in_anns

    def add_annotation(self, in_ann: Annotation) -> bool:
        if in_ann is None or is_list(in_ann):
            return False
        self._annotations.append(in_ann)
        return True

    def get_annotations_by_filter(self, predicate: Callable[[Annotation], Any]) -> List[Annotation]:
        return _filter_strict(self._annotations, predicate)

    def get_annotations_by_key(self, key: str) -> List[Annotation]:
        return [ann for ann in self._annotations if ann.key == key]

    def get_annotation_by_id(self, ann_id: str) -> Optional[Annotation]:
        return _last_by_id(self._annotations, ann_id)


class EvidenceBearing:
    """Operations for entities carrying referenced individuals (evidence)."""

    _referenced_individuals: List["Node"]

    @property
    def referenced_individuals(self) -> List["Node"]:
        return self._referenced_individuals

    @referenced_individuals.setter
    def referenced_individuals(self, individuals: List["Node"]) -> None:
        if is_list(individuals):
            for ind in individuals:
                ind.type = CONFIG["REFERENCED_TYPE"]
            self._referenced_individuals = individuals

    def add_referenced_individual(self, individual: "Node") -> bool:
        if individual is None or is_list(individual):
            return False
        individual.type = CONFIG["REFERENCED_TYPE"]
        self._referenced_individuals.append(individual)
        return True

    def get_referenced_individuals_by_filter(self, predicate: Callable[["Node"], Any]) -> List["Node"]:
        return _filter_strict(self._referenced_individuals, predicate)

    def get_referenced_individual_by_id(self, individual_id: str) -> Optional["Node"]:
        return _last_by_id(self._referenced_individuals, individual_id)

    def get_referenced_individual_profiles(self) -> List[Dict[str, Any]]:
        """Flatten each referenced individual to id, class expressions and annotations."""
        return [
            {
                "id": ind.id,
                "class_expressions": list(ind.types),
                "annotations": list(ind.annotations),
            }
            for ind in self._referenced_individuals
        ]

    def get_basic_evidence(self, annotation_keys: List[str]) -> List[Dict[str, Any]]:
        """
        Project profiles as single-class evidence statements.

        Each result is ``{"id", "cls"}`` plus one entry per requested
        annotation key present on the individual. Individuals without
        class expressions are skipped; nested evidence is not represented.
        """
        results = []
        for profile in self.get_referenced_individual_profiles():
            if not profile["id"] or not profile["class_expressions"]:
                continue
            evidence: Dict[str, Any] = {
                "id": profile["id"],
                "cls": profile["class_expressions"][0].to_string(),
            }
            for ann in profile["annotations"]:
                if ann.key in annotation_keys:
                    evidence[ann.key] = ann.value
            results.append(evidence)
        return results


class Node(Annotatable, EvidenceBearing):
    """
    An individual: asserted and inferred types, annotations, evidence,
    an optional embedded subgraph, and layout hints.

    Types from both lists are indexed by expression id; on an id
    collision the inferred entry wins.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        label: Optional[str] = None,
        types: Optional[List[Any]] = None,
        inferred_types: Optional[List[Any]] = None,
    ):
        self._id: str = id or generate_id()
        self._label = label
        self._type: Optional[str] = None
        self._metadata: Dict[str, Any] = {}
        self._types: List[ClassExpression] = []
        self._inferred_types: List[ClassExpression] = []
        self._id_to_type: Dict[str, ClassExpression] = {}
        self._annotations: List[Annotation] = []
        self._referenced_individuals: List[Node] = []
        self._subgraph: Optional["Graph"] = None
        self._x_init: Optional[float] = None
        self._y_init: Optional[float] = None
        if types:
            self.add_types(types)
        if inferred_types:
            self.add_types(inferred_types, inferred=True)

    @property
    def id(self) -> str:
        return self._id

    @property
    def label(self) -> Optional[str]:
        return self._label

    @label.setter
    def label(self, label: Optional[str]) -> None:
        self._label = label

    @property
    def type(self) -> Optional[str]:
        return self._type

    @type.setter
    def type(self, node_type: Optional[str]) -> None:
        if node_type:
            self._type = node_type

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._metadata

    @metadata.setter
    def metadata(self, metadata: Dict[str, Any]) -> None:
        if isinstance(metadata, dict):
            self._metadata = metadata

    # Types

    def _reindex_types(self) -> None:
        self._id_to_type = {}
        for expr in self._types:
            self._id_to_type[expr.id] = expr
        for expr in self._inferred_types:
            self._id_to_type[expr.id] = expr

    @property
    def types(self) -> List[ClassExpression]:
        return self._types

    @types.setter
    def types(self, in_types: List[Any]) -> None:
        if is_list(in_types):
            self._types = []
            self.add_types(in_types)

    @property
    def inferred_types(self) -> List[ClassExpression]:
        return self._inferred_types

    @inferred_types.setter
    def inferred_types(self, in_types: List[Any]) -> None:
        if is_list(in_types):
            self._inferred_types = []
            self.add_types(in_types, inferred=True)

    def add_types(self, in_types: List[Any], inferred: bool = False) -> bool:
        """Parse raw descriptors and append them; True if anything was added."""
        if not is_list(in_types):
            raise MalformedResponseError(f"types must be a list, got {type(in_types).__name__}")
        target = self._inferred_types if inferred else self._types
        parsed = [ClassExpression(raw) for raw in in_types]
        target.extend(parsed)
        self._reindex_types()
        return bool(parsed)

    def get_type_by_id(self, type_id: str) -> Optional[ClassExpression]:
        return self._id_to_type.get(type_id)

    def get_unique_inferred_types(self) -> List[ClassExpression]:
        """Inferred types whose signature matches no asserted type."""
        asserted = {expr.signature() for expr in self._types}
        return [expr for expr in self._inferred_types if expr.signature() not in asserted]

    # Embedded subgraph

    @property
    def subgraph(self) -> Optional["Graph"]:
        return self._subgraph

    @subgraph.setter
    def subgraph(self, graph: "Graph") -> None:
        from noctua_graph.graph import Graph

        if isinstance(graph, Graph):
            self._subgraph = graph
        else:
            logger.debug("refusing to embed %r in node %s", graph, self._id)

    def has_subgraph(self) -> bool:
        return self._subgraph is not None

    def clear_subgraph(self) -> Optional["Graph"]:
        graph = self._subgraph
        self._subgraph = None
        return graph

    # Layout hints; falsy values cannot be assigned.

    @property
    def x_init(self) -> Optional[float]:
        return self._x_init

    @x_init.setter
    def x_init(self, value: Optional[float]) -> None:
        if value:
            self._x_init = value

    @property
    def y_init(self) -> Optional[float]:
        return self._y_init

    @y_init.setter
    def y_init(self, value: Optional[float]) -> None:
        if value:
            self._y_init = value

    def clone(self) -> "Node":
        new_node = Node(self._id, self._label)
        new_node._type = self._type
        new_node._metadata = clone_data(self._metadata)
        new_node._types = [expr.clone() for expr in self._types]
        new_node._inferred_types = [expr.clone() for expr in self._inferred_types]
        new_node._reindex_types()
        new_node._annotations = [ann.clone() for ann in self._annotations]
        new_node._referenced_individuals = [ind.clone() for ind in self._referenced_individuals]
        new_node._subgraph = self._subgraph.clone() if self._subgraph is not None else None
        new_node._x_init = self._x_init
        new_node._y_init = self._y_init
        return new_node

    def __repr__(self) -> str:
        return f"Node({self._id!r}, types={[str(t) for t in self._types]})"


class Edge(Annotatable, EvidenceBearing):
    """
    A fact: subject --predicate--> object, with its own id.

    Unlike plain triples, edges always carry a unique id so display
    connectors can refer to them.
    """

    def __init__(self, subject_id: str, object_id: str, predicate_id: Optional[str] = None):
        if not subject_id or not object_id:
            raise ValueError("an edge needs both a subject and an object id")
        self._id: str = generate_id()
        self._subject_id = subject_id
        self._object_id = object_id
        self._predicate_id = predicate_id or CONFIG["DEFAULT_PREDICATE"]
        self._type: Optional[str] = None
        self._metadata: Dict[str, Any] = {}
        self._annotations: List[Annotation] = []
        self._referenced_individuals: List[Node] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def subject_id(self) -> str:
        return self._subject_id

    @property
    def object_id(self) -> str:
        return self._object_id

    @property
    def predicate_id(self) -> str:
        return self._predicate_id

    @property
    def type(self) -> Optional[str]:
        return self._type

    @type.setter
    def type(self, edge_type: Optional[str]) -> None:
        if edge_type:
            self._type = edge_type

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._metadata

    @metadata.setter
    def metadata(self, metadata: Dict[str, Any]) -> None:
        if isinstance(metadata, dict):
            self._metadata = metadata

    @property
    def source(self) -> str:
        warnings.warn("Edge.source is deprecated; use subject_id", DeprecationWarning, stacklevel=2)
        return self._subject_id

    @property
    def target(self) -> str:
        warnings.warn("Edge.target is deprecated; use object_id", DeprecationWarning, stacklevel=2)
        return self._object_id

    @property
    def relation(self) -> str:
        warnings.warn("Edge.relation is deprecated; use predicate_id", DeprecationWarning, stacklevel=2)
        return self._predicate_id

    def clone(self) -> "Edge":
        """Deep copy that keeps the same id."""
        new_edge = Edge(self._subject_id, self._object_id, self._predicate_id)
        new_edge._id = self._id
        new_edge._type = self._type
        new_edge._metadata = clone_data(self._metadata)
        new_edge._annotations = [ann.clone() for ann in self._annotations]
        new_edge._referenced_individuals = [ind.clone() for ind in self._referenced_individuals]
        return new_edge

    def __repr__(self) -> str:
        return f"Edge({self._subject_id!r} -[{self._predicate_id}]-> {self._object_id!r})"
