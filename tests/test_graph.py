import numpy as np
import pytest

from primgraph.exceptions import DuplicateEdgeError, InvalidArgumentError, SelfLoopError
from primgraph.graph import Edge, Graph, Vertex
from primgraph.traversal import INFINITY


def test_insert_vertex_appends_in_order(graph: Graph) -> None:
    a = graph.insert_vertex("a")
    b = graph.insert_vertex({"any": "payload"})

    assert graph.num_vertices == 2
    assert len(graph) == 2
    assert graph.vertices() == (a, b)
    assert (a.index, b.index) == (0, 1)
    assert b.payload == {"any": "payload"}
    assert a.degree == 0


def test_vertices_is_a_restartable_snapshot(graph: Graph) -> None:
    a = graph.insert_vertex("a")
    snapshot = graph.vertices()
    graph.insert_vertex("b")

    assert list(snapshot) == [a]
    assert list(snapshot) == [a]
    assert len(graph.vertices()) == 2


def test_insert_edge_makes_both_endpoints_adjacent(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")

    edge = graph.insert_edge(u, v, 7)

    assert graph.are_adjacent(u, v)
    assert graph.are_adjacent(v, u)
    assert graph.find_edge(u, v) is edge
    assert graph.find_edge(v, u) is edge
    assert edge.weight == 7
    assert set(edge.endpoints) == {u.index, v.index}
    assert graph.num_edges == 1
    assert list(u.incident_edges()) == [edge]
    assert list(v.incident_edges()) == [edge]


def test_find_edge_returns_none_for_unconnected_vertices(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    w = graph.insert_vertex("w")
    graph.insert_edge(u, v, 1)

    assert graph.find_edge(u, w) is None
    assert not graph.are_adjacent(u, w)
    assert not graph.are_adjacent(w, v)


def test_queries_are_idempotent(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    graph.insert_edge(u, v, 3)

    assert graph.find_edge(u, v) is graph.find_edge(u, v)
    assert graph.are_adjacent(u, v) == graph.are_adjacent(u, v)


def test_insert_edge_accepts_numpy_integers(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")

    edge = graph.insert_edge(u, v, np.int32(5))

    assert edge.weight == 5
    assert type(edge.weight) is int


@pytest.mark.parametrize("payload", ["x", 0, None])
def test_self_loop_is_rejected(graph: Graph, payload) -> None:
    u = graph.insert_vertex(payload)

    with pytest.raises(SelfLoopError):
        graph.insert_edge(u, u, 1)
    assert graph.num_edges == 0
    assert u.degree == 0


def test_self_loop_is_an_invalid_argument(graph: Graph) -> None:
    u = graph.insert_vertex("u")

    with pytest.raises(InvalidArgumentError):
        graph.insert_edge(u, u, 1)


def test_duplicate_edge_is_rejected_in_either_direction(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    graph.insert_edge(u, v, 1)

    with pytest.raises(DuplicateEdgeError):
        graph.insert_edge(u, v, 2)
    with pytest.raises(DuplicateEdgeError):
        graph.insert_edge(v, u, 3)

    # Rejected insertions leave the counter alone
    assert graph.num_edges == 1
    assert u.degree == 1
    assert v.degree == 1


@pytest.mark.parametrize("weight", [1.5, "3", True, INFINITY, INFINITY + 1])
def test_invalid_weight_is_rejected(graph: Graph, weight) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")

    with pytest.raises(InvalidArgumentError):
        graph.insert_edge(u, v, weight)
    assert graph.num_edges == 0


def test_largest_weight_below_infinity_is_accepted(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")

    assert graph.insert_edge(u, v, INFINITY - 1).weight == INFINITY - 1


def test_absent_vertices_are_rejected(graph: Graph) -> None:
    u = graph.insert_vertex("u")

    with pytest.raises(InvalidArgumentError):
        graph.find_edge(u, None)
    with pytest.raises(InvalidArgumentError):
        graph.find_edge(None, u)
    with pytest.raises(InvalidArgumentError):
        graph.are_adjacent(None, u)
    with pytest.raises(InvalidArgumentError):
        graph.insert_edge(u, None, 1)


def test_vertex_of_another_graph_is_rejected(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    other = Graph()
    other.insert_vertex("x")
    foreign = other.insert_vertex("y")
    graph.insert_vertex("v")

    with pytest.raises(InvalidArgumentError):
        graph.are_adjacent(u, foreign)
    with pytest.raises(InvalidArgumentError):
        graph.insert_edge(u, foreign, 1)


def test_delete_edge_removes_it_from_both_endpoints(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    w = graph.insert_vertex("w")
    graph.insert_edge(u, v, 1)
    kept = graph.insert_edge(v, w, 2)

    graph.delete_edge(graph.find_edge(v, u))

    assert not graph.are_adjacent(u, v)
    assert not graph.are_adjacent(v, u)
    assert graph.num_edges == 1
    assert list(v.incident_edges()) == [kept]
    assert u.degree == 0


def test_delete_edge_then_reinsert(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    graph.delete_edge(graph.insert_edge(u, v, 1))

    edge = graph.insert_edge(v, u, 9)

    assert graph.find_edge(u, v) is edge
    assert graph.num_edges == 1


def test_delete_absent_or_stale_edge_is_rejected(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    edge = graph.insert_edge(u, v, 1)
    graph.delete_edge(edge)

    with pytest.raises(InvalidArgumentError):
        graph.delete_edge(None)
    with pytest.raises(InvalidArgumentError):
        graph.delete_edge(edge)
    with pytest.raises(InvalidArgumentError):
        graph.delete_edge(Edge(0, 5, 1))
    assert graph.num_edges == 0


def test_give_opposite(graph: Graph) -> None:
    u = graph.insert_vertex("u")
    v = graph.insert_vertex("v")
    edge = graph.insert_edge(u, v, 1)

    assert graph.give_opposite(u, edge) is v
    assert graph.give_opposite(v, edge) is u


def test_edges_yields_each_edge_once(square) -> None:
    G, v = square

    edges = list(G.edges())

    assert len(edges) == G.num_edges == 4
    assert len({id(edge) for edge in edges}) == 4


def test_vertex_add_adjacent_guards_duplicates() -> None:
    vertex = Vertex(0, "a")
    vertex.add_adjacent(Edge(0, 1, 5))

    with pytest.raises(DuplicateEdgeError):
        vertex.add_adjacent(Edge(1, 0, 6))
    with pytest.raises(InvalidArgumentError):
        vertex.add_adjacent(Edge(2, 3, 1))
    vertex.add_adjacent(Edge(0, 2, 1))
    assert vertex.degree == 2


def test_vertex_remove_adjacent_clears_list(square) -> None:
    G, v = square

    v["A"].remove_adjacent()

    assert v["A"].degree == 0
    assert not v["A"].is_adjacent(v["B"])
    # The other endpoints keep their references
    assert v["B"].is_adjacent(v["A"])


def test_delete_edge_after_one_endpoint_cleared(square) -> None:
    G, v = square
    v["A"].remove_adjacent()

    # Still reachable through B and D
    assert len(list(G.edges())) == G.num_edges == 4

    edge = G.find_edge(v["A"], v["B"])
    G.delete_edge(edge)

    assert G.num_edges == 3
    assert not v["B"].is_adjacent(v["A"])
    assert G.find_edge(v["A"], v["B"]) is None
    assert len(list(G.edges())) == 3
    assert G.get_networkx_graph().number_of_edges() == 3
    with pytest.raises(InvalidArgumentError):
        G.delete_edge(edge)


@pytest.mark.parametrize("not_an_edge", [Vertex(0, "a"), (0, 1), 3])
def test_delete_edge_rejects_non_edges(square, not_an_edge) -> None:
    G, v = square

    with pytest.raises(InvalidArgumentError):
        G.delete_edge(not_an_edge)
    assert G.num_edges == 4


def test_clear_edges(square) -> None:
    G, v = square

    G.clear_edges()

    assert G.num_edges == 0
    assert G.num_vertices == 4
    assert all(vertex.degree == 0 for vertex in G.vertices())


def test_vertex_lookup_by_index(square) -> None:
    G, v = square

    assert G.vertex(2) is v["C"]
    with pytest.raises(InvalidArgumentError):
        G.vertex(4)


def test_get_networkx_graph(square) -> None:
    G, v = square

    nx_graph = G.get_networkx_graph()

    assert nx_graph.number_of_nodes() == 4
    assert nx_graph.number_of_edges() == 4
    assert nx_graph[0][1]["weight"] == 1
    assert nx_graph[3][0]["weight"] == 4
    assert nx_graph.nodes[2]["payload"] == "C"


def test_create_from_points() -> None:
    points = np.array([[0.0, 0.0], [3.0, 4.0], [0.0, 1.0]])

    G = Graph.create_from_points(points, scale=10)

    assert G.num_vertices == 3
    assert G.num_edges == 3
    assert G.find_edge(G.V[0], G.V[1]).weight == 50
    assert G.find_edge(G.V[0], G.V[2]).weight == 10
    assert G.get_node_pos_as_dict() == {0: (0.0, 0.0), 1: (3.0, 4.0), 2: (0.0, 1.0)}


def test_create_from_points_with_threshold() -> None:
    points = [[0.0, 0.0], [1.0, 0.0], [10.0, 0.0]]

    G = Graph.create_from_points(points, threshold=2.0)

    assert G.num_edges == 1
    assert G.are_adjacent(G.V[0], G.V[1])
    assert G.V[2].degree == 0


def test_create_from_no_points() -> None:
    G = Graph.create_from_points([])

    assert G.num_vertices == 0
    assert G.num_edges == 0
