"""Export Noctua models to rdflib graphs."""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from rdflib import BNode, Graph as RDFGraph, Literal, URIRef
from rdflib.collection import Collection
from rdflib.namespace import OWL, RDF

from noctua_graph.class_expression import CLASS, COMPLEMENT, SVF, UNION, ClassExpression
from noctua_graph.config import CONFIG, GOMODEL, LEGO, OBO
from noctua_graph.graph import Graph
from noctua_graph.models import Annotatable, Annotation, Node
from noctua_graph.utils import expand_curie, profile_time

logger = logging.getLogger(__name__)

RDFNode = Union[URIRef, BNode]


def _iri(value: str) -> URIRef:
    expanded = expand_curie(value)
    if expanded is None:
        # Bare local ids are minted in the model namespace.
        return URIRef(GOMODEL + value)
    return URIRef(expanded)


def _class_node(rdf: RDFGraph, expr: ClassExpression) -> RDFNode:
    etype = expr.expression_type
    if etype == CLASS:
        return _iri(expr.class_id)
    node = BNode()
    if etype == SVF:
        rdf.add((node, RDF.type, OWL.Restriction))
        rdf.add((node, OWL.onProperty, _iri(expr.property_id)))
        rdf.add((node, OWL.someValuesFrom, _class_node(rdf, expr.filler)))
    elif etype == COMPLEMENT:
        rdf.add((node, RDF.type, OWL.Class))
        rdf.add((node, OWL.complementOf, _class_node(rdf, expr.filler)))
    else:
        rdf.add((node, RDF.type, OWL.Class))
        members = BNode()
        Collection(rdf, members, [_class_node(rdf, e) for e in expr.expressions])
        rdf.add((node, OWL.unionOf if etype == UNION else OWL.intersectionOf, members))
    return node


def _annotation_pair(ann: Annotation) -> Optional[Tuple[URIRef, Union[URIRef, Literal]]]:
    if not ann.key or ann.value is None:
        return None
    predicate = CONFIG["ANNOTATION_PREDICATES"].get(ann.key)
    predicate_iri = URIRef(predicate) if predicate else URIRef(LEGO + ann.key)
    if ann.value_type == CONFIG["EVIDENCE_VALUE_TYPE"]:
        return predicate_iri, _iri(ann.value)
    return predicate_iri, Literal(ann.value)


def _add_annotations(rdf: RDFGraph, subject: RDFNode, entity: Annotatable) -> None:
    for ann in entity.annotations:
        pair = _annotation_pair(ann)
        if pair is not None:
            rdf.add((subject, pair[0], pair[1]))


def _add_individual(rdf: RDFGraph, node: Node) -> None:
    subject = _iri(node.id)
    rdf.add((subject, RDF.type, OWL.NamedIndividual))
    for expr in node.types:
        rdf.add((subject, RDF.type, _class_node(rdf, expr)))
    _add_annotations(rdf, subject, node)
    for individual in node.referenced_individuals:
        _add_individual(rdf, individual)


@profile_time
def graph_to_rdf(graph: Graph) -> RDFGraph:
    """
    Describe ``graph`` as OWL individuals and facts.

    Works on an unfolded copy, so folded subgraphs are written out as
    ordinary individuals; referenced individuals are written alongside
    their owners. Edge annotations are attached through owl:Axiom.
    """
    model = graph.clone()
    model.unfold()

    rdf = RDFGraph()
    rdf.bind("owl", OWL)
    rdf.bind("obo", OBO)
    rdf.bind("gomodel", GOMODEL)
    rdf.bind("lego", LEGO)

    model_node: RDFNode = _iri(model.id) if model.id else BNode()
    rdf.add((model_node, RDF.type, OWL.Ontology))
    _add_annotations(rdf, model_node, model)

    for node in model.all_nodes():
        _add_individual(rdf, node)

    for edge in model.all_edges():
        triple = (_iri(edge.subject_id), _iri(edge.predicate_id), _iri(edge.object_id))
        rdf.add(triple)
        for individual in edge.referenced_individuals:
            _add_individual(rdf, individual)
        if edge.annotations:
            axiom = BNode()
            rdf.add((axiom, RDF.type, OWL.Axiom))
            rdf.add((axiom, OWL.annotatedSource, triple[0]))
            rdf.add((axiom, OWL.annotatedProperty, triple[1]))
            rdf.add((axiom, OWL.annotatedTarget, triple[2]))
            _add_annotations(rdf, axiom, edge)

    logger.info("Exported model %s as %d RDF triple(s)", model.id, len(rdf))
    return rdf
