from typing import Dict, Tuple

import pytest

from primgraph.graph import Graph, Vertex


@pytest.fixture
def graph() -> Graph:
    return Graph()


@pytest.fixture
def square() -> Tuple[Graph, Dict[str, Vertex]]:
    """Four-vertex cycle A-B(1), B-C(2), C-D(3), D-A(4)."""
    G = Graph()
    v = {name: G.insert_vertex(name) for name in "ABCD"}
    G.insert_edge(v["A"], v["B"], 1)
    G.insert_edge(v["B"], v["C"], 2)
    G.insert_edge(v["C"], v["D"], 3)
    G.insert_edge(v["D"], v["A"], 4)
    return G, v
