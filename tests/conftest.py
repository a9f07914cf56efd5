"""Shared fixtures for noctua_graph tests."""

import json
from pathlib import Path

import pytest

from noctua_graph import Graph

FIXTURES = Path(__file__).parent / "fixtures"

BASIC_MODEL = "gomodel:5f2b0d5e00000001"
DEEP_MODEL = "gomodel:5fce9b7300001215"

# Relation list used by noctua-obo when folding.
GO_NOCTUA_RELATIONS = [
    "RO:0002233",
    "RO:0002234",
    "RO:0002333",
    "RO:0002488",
    "BFO:0000066",
    "BFO:0000051",
    "RO:0000053",
]


def load_fixture(name: str) -> dict:
    with open(FIXTURES / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def basic_response():
    """22 individuals (8 of them evidence), 14 facts, 4 model annotations."""
    return load_fixture("minerva-basic.json")["data"]


@pytest.fixture
def deep_response():
    """8 individuals and 7 facts with a two-level foldable chain."""
    return load_fixture("minerva-09.json")["data"]


@pytest.fixture
def basic_iri():
    return lambda local: f"{BASIC_MODEL}/{local}"


@pytest.fixture
def deep_iri():
    return lambda local: f"{DEEP_MODEL}/{local}"


@pytest.fixture
def basic_graph(basic_response):
    graph = Graph()
    graph.load_data_base(basic_response)
    return graph


@pytest.fixture
def deep_graph(deep_response):
    graph = Graph()
    graph.load_data_base(deep_response)
    return graph
