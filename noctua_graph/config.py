"""Configuration constants for Noctua graph models."""

from typing import Any, Dict

OBO = "http://purl.obolibrary.org/obo/"
LEGO = "http://geneontology.org/lego/"
GOMODEL = "http://model.geneontology.org/"

CONFIG: Dict[str, Any] = {
    # bbop-graph falls back to this when an edge is built without a predicate
    "DEFAULT_PREDICATE": "points_at",
    "REFERENCED_TYPE": "referenced",
    "EVIDENCE_KEY": "evidence",
    "EVIDENCE_VALUE_TYPE": "IRI",
    # Relations whose single-use targets get folded under their anchor node
    "FOLD_RELATIONS": [
        "RO:0002233",  # has input
        "RO:0002234",  # has output
        "RO:0002333",  # enabled by
        "RO:0002488",  # existence starts during
        "BFO:0000066",  # occurs in
        "BFO:0000051",  # has part
        "RO:0000053",  # has characteristic
    ],
    "NAMESPACES": {
        "gomodel": GOMODEL,
        "lego": LEGO,
        "UniProtKB": "http://identifiers.org/uniprot/",
        "MGI": "http://identifiers.org/mgi/",
        "PMID": "http://identifiers.org/pubmed/",
        "dc": "http://purl.org/dc/elements/1.1/",
        "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
        "owl": "http://www.w3.org/2002/07/owl#",
    },
    "ANNOTATION_PREDICATES": {
        "contributor": "http://purl.org/dc/elements/1.1/contributor",
        "date": "http://purl.org/dc/elements/1.1/date",
        "title": "http://purl.org/dc/elements/1.1/title",
        "source": "http://purl.org/dc/elements/1.1/source",
        "comment": "http://www.w3.org/2000/01/rdf-schema#comment",
        "evidence": LEGO + "evidence",
    },
}
