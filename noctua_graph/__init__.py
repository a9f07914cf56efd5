"""Editable graph model for Noctua / GO-CAM causal activity models."""

from noctua_graph.class_expression import ClassExpression
from noctua_graph.exceptions import (
    EdgeIdentityError,
    MalformedExpressionError,
    MalformedResponseError,
    NoctuaGraphError,
)
from noctua_graph.graph import Graph
from noctua_graph.models import Annotatable, Annotation, Edge, EvidenceBearing, Node

__version__ = "0.3.0"

__all__ = [
    "Annotatable",
    "Annotation",
    "ClassExpression",
    "Edge",
    "EdgeIdentityError",
    "EvidenceBearing",
    "Graph",
    "MalformedExpressionError",
    "MalformedResponseError",
    "Node",
    "NoctuaGraphError",
]
