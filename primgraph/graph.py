import logging
from numbers import Integral
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

import networkx as nx
import numpy as np
import scipy.spatial

from primgraph.exceptions import DuplicateEdgeError, InvalidArgumentError, SelfLoopError
from primgraph.priority_queue import HeapPriorityQueue
from primgraph.traversal import INFINITY, TraversalState

logger = logging.getLogger(__name__)

O = TypeVar("O")

# Room reserved in the priority queue, as a multiple of the vertex count
HEAP_CAPACITY_FACTOR = 2


class Edge:
    """
    A weighted, undirected edge between two vertices.

    One `Edge` exists per connection; both endpoints hold the same object in
    their adjacency lists. Endpoints are stored as vertex indices.
    """

    __slots__ = ("u", "v", "weight")

    def __init__(self, u: int, v: int, weight: int) -> None:
        self.u: int = u
        self.v: int = v
        self.weight: int = weight

    @property
    def endpoints(self) -> Tuple[int, int]:
        return (self.u, self.v)

    def touches(self, index: int) -> bool:
        return self.u == index or self.v == index

    def opposite(self, index: int) -> int:
        return self.v if self.u == index else self.u

    def same_pair(self, other: 'Edge') -> bool:
        return (self.u == other.u and self.v == other.v) or (self.u == other.v and self.v == other.u)

    def __repr__(self) -> str:
        return f"Edge({self.u}, {self.v}, weight={self.weight})"


class Vertex(Generic[O]):
    """
    A vertex in a graph.
    """

    def __init__(self, index: int, payload: O) -> None:
        """
        Creates a `Vertex`.

        Parameters
        ----------

        index : The index of the vertex in the graph.

        payload : The value stored at the vertex, opaque to the graph.
        """

        self.index: int = index
        self.payload: O = payload
        self.adjacency: List[Edge] = []

    @property
    def degree(self) -> int:
        return len(self.adjacency)

    def incident_edges(self) -> Iterator[Edge]:
        return iter(self.adjacency)

    def is_adjacent(self, other: 'Vertex') -> bool:
        return any(edge.touches(other.index) for edge in self.adjacency)

    def add_adjacent(self, edge: Edge) -> None:
        """
        Appends `edge` to the adjacency list.

        Raises `DuplicateEdgeError` if an edge between the same pair of
        vertices is already in the list.
        """

        if not edge.touches(self.index):
            raise InvalidArgumentError(f"{edge!r} is not incident to vertex {self.index}.")
        for existing in self.adjacency:
            if existing.same_pair(edge):
                raise DuplicateEdgeError(f"Vertex {self.index} already has an edge {edge.u}-{edge.v}.")
        self.adjacency.append(edge)

    def remove_adjacent(self) -> None:
        """
        Clears the whole adjacency list.
        """
        self.adjacency.clear()

    def __repr__(self) -> str:
        return f"Vertex({self.index}, {self.payload!r})"


class Graph(Generic[O]):
    """
    A weighted, undirected graph without self loops or parallel edges.
    """

    def __init__(self) -> None:
        self.V: List[Vertex[O]] = []
        self._num_edges: int = 0

    @property
    def num_vertices(self) -> int:
        return len(self.V)

    @property
    def num_edges(self) -> int:
        return self._num_edges

    def __len__(self) -> int:
        return len(self.V)

    def insert_vertex(self, payload: O) -> Vertex[O]:
        vertex = Vertex(len(self.V), payload)
        self.V.append(vertex)
        return vertex

    def vertex(self, index: int) -> Vertex[O]:
        if not 0 <= index < len(self.V):
            raise InvalidArgumentError(f"No vertex with index {index}.")
        return self.V[index]

    def vertices(self) -> Tuple[Vertex[O], ...]:
        """
        Returns the vertices in insertion order.

        The result is a snapshot and can be iterated any number of times.
        """
        return tuple(self.V)

    def edges(self) -> Iterator[Edge]:
        """
        Iterates over every edge once, grouped by the vertex it was first inserted from.
        """
        for vertex in self.V:
            for edge in vertex.adjacency:
                # An edge is reported from its first endpoint, or from the second
                # once the first endpoint has dropped it
                if edge.u == vertex.index or edge not in self.V[edge.u].adjacency:
                    yield edge

    def _check_vertex(self, vertex: Optional[Vertex[O]]) -> Vertex[O]:
        if vertex is None:
            raise InvalidArgumentError("The vertex is None.")
        if not isinstance(vertex, Vertex) or not 0 <= vertex.index < len(self.V) or self.V[vertex.index] is not vertex:
            raise InvalidArgumentError(f"{vertex!r} does not belong to this graph.")
        return vertex

    def find_edge(self, u: Vertex[O], v: Vertex[O]) -> Optional[Edge]:
        """
        Looks up the edge between `u` and `v`.

        Returns
        -------

        The `Edge`, or `None` if the vertices are not connected.
        """

        self._check_vertex(u)
        self._check_vertex(v)

        for edge in u.adjacency:
            if edge.touches(v.index):
                return edge
        for edge in v.adjacency:
            if edge.touches(u.index):
                return edge
        return None

    def are_adjacent(self, u: Vertex[O], v: Vertex[O]) -> bool:
        self._check_vertex(u)
        self._check_vertex(v)
        return u.is_adjacent(v)

    def insert_edge(self, u: Vertex[O], v: Vertex[O], weight: int) -> Edge:
        """
        Connects `u` and `v` with an edge of the given weight.

        Parameters
        ----------

        u : The first endpoint.

        v : The second endpoint.

        weight : An integer weight below `INFINITY`.

        Returns
        -------

        The created edge.
        """

        self._check_vertex(u)
        self._check_vertex(v)
        if u is v:
            raise SelfLoopError(f"Cannot connect vertex {u.index} to itself.")
        if isinstance(weight, bool) or not isinstance(weight, Integral):
            raise InvalidArgumentError(f"Edge weight must be an integer, got {weight!r}.")
        if weight >= INFINITY:
            raise InvalidArgumentError(f"Edge weight {weight} is not below {INFINITY}.")
        if self.find_edge(u, v) is not None:
            raise DuplicateEdgeError(f"An edge between {u.index} and {v.index} already exists.")

        edge = Edge(u.index, v.index, int(weight))
        u.add_adjacent(edge)
        v.add_adjacent(edge)
        self._num_edges += 1
        logger.debug("Inserted %r", edge)
        return edge

    def delete_edge(self, edge: Optional[Edge]) -> None:
        """
        Removes `edge` from the adjacency lists of the endpoints that still hold it.
        """

        if edge is None:
            raise InvalidArgumentError("The edge is None.")
        if not isinstance(edge, Edge):
            raise InvalidArgumentError(f"{edge!r} is not an edge.")
        if not self._is_live(edge):
            raise InvalidArgumentError(f"{edge!r} is not in this graph.")

        # An endpoint may already have cleared its list with remove_adjacent
        for index in edge.endpoints:
            if edge in self.V[index].adjacency:
                self.V[index].adjacency.remove(edge)
        self._num_edges -= 1
        logger.debug("Deleted %r", edge)

    def _is_live(self, edge: Edge) -> bool:
        n = len(self.V)
        if not (0 <= edge.u < n and 0 <= edge.v < n):
            return False
        # Edges compare by identity
        return edge in self.V[edge.u].adjacency or edge in self.V[edge.v].adjacency

    def clear_edges(self) -> None:
        """
        Drops every edge of the graph, keeping the vertices.
        """
        for vertex in self.V:
            vertex.remove_adjacent()
        self._num_edges = 0

    def give_opposite(self, v: Vertex[O], edge: Edge) -> Vertex[O]:
        """
        Returns the endpoint of `edge` that is not `v`. `v` must be an endpoint of `edge`.
        """
        return self.V[edge.opposite(v.index)]

    def connected_components(self) -> List[List[Vertex[O]]]:
        """
        Partitions the vertices into connected components.

        Returns
        -------

        One list of vertices per component. Components are ordered by their
        first vertex in insertion order; each component starts with that vertex.
        """

        state = TraversalState(len(self.V))
        components: List[List[Vertex[O]]] = []
        for vertex in self.V:
            if not state.visited[vertex.index]:
                components.append(self._collect_component(vertex, state))

        logger.debug("Found %d connected components over %d vertices", len(components), len(self.V))
        return components

    def _collect_component(self, start: Vertex[O], state: TraversalState) -> List[Vertex[O]]:
        component = [start]
        stack = [start]
        state.visited[start.index] = True

        while stack:
            current = stack.pop()
            for edge in current.adjacency:
                opposite = self.give_opposite(current, edge)
                if not state.visited[opposite.index]:
                    state.visited[opposite.index] = True
                    stack.append(opposite)
                    component.append(opposite)

        return component

    def prim(self, start: Optional[Vertex[O]] = None) -> TraversalState:
        """
        Runs Prim's algorithm over every component of the graph.

        Parameters
        ----------

        start : The root of the first tree. Defaults to the first vertex.

        Returns
        -------

        The final `TraversalState`: `parent` holds the tree edge of every
        reached vertex, `distance` the weight of that edge. Vertices that
        start a new tree keep no parent.
        """

        n = len(self.V)
        state = TraversalState(n)
        if n == 0:
            return state

        root = self.V[0] if start is None else self._check_vertex(start)
        state.distance[root.index] = 0

        queue: HeapPriorityQueue[int, Vertex[O]] = HeapPriorityQueue(capacity=HEAP_CAPACITY_FACTOR * n)
        state.positions[root.index] = queue.insert(0, root)
        for vertex in self.V:
            if vertex is not root:
                state.positions[vertex.index] = queue.insert(INFINITY, vertex)

        while not queue.is_empty():
            vertex = queue.remove_min()
            state.visited[vertex.index] = True

            for edge in vertex.adjacency:
                s = edge.opposite(vertex.index)
                if state.visited[s]:
                    continue
                if edge.weight < state.distance[s]:
                    state.distance[s] = edge.weight
                    state.parent[s] = vertex.index
                    queue.decrease_key(state.positions[s], edge.weight)

        return state

    def mst(self) -> List[Edge]:
        """
        Computes a minimum spanning forest with Prim's algorithm.

        Returns
        -------

        The tree edges, one per vertex that has a parent, in vertex order.
        """

        state = self.prim()
        tree: List[Edge] = []
        for vertex in self.V:
            parent = state.get_parent(vertex.index)
            if parent is not None:
                tree.append(self.find_edge(vertex, self.V[parent]))

        logger.debug("Spanning forest has %d edges and %d trees", len(tree), len(state.roots()))
        return tree

    def get_networkx_graph(self) -> nx.Graph:
        """
        Creates a `networkx.Graph` from this graph.

        Nodes are vertex indices with the payload stored as the `payload`
        attribute; edges carry their `weight`.
        """

        G = nx.Graph()
        G.add_nodes_from((vertex.index, {"payload": vertex.payload}) for vertex in self.V)
        G.add_weighted_edges_from((edge.u, edge.v, edge.weight) for edge in self.edges())
        return G

    def get_node_pos_as_dict(self) -> Dict[int, Tuple[float, float]]:
        """
        Returns the positions of the vertices in a dictionary, for payloads that are (x, y) pairs.
        """
        return {vertex.index: (vertex.payload[0], vertex.payload[1]) for vertex in self.V}

    @staticmethod
    def create_from_points(points: Iterable, threshold: float = float("inf"), scale: float = 1000) -> 'Graph[Tuple[float, float]]':
        """
        Builds a graph from a set of 2D points.

        Parameters
        ----------

        points : The points, one (x, y) row per vertex.

        threshold : The maximum distance between vertices that should have an edge.

        scale : Distances are multiplied by `scale` and rounded to get integer weights.

        Returns
        -------

        The graph for the points.
        """

        points = np.asarray(points, dtype=float)
        graph: Graph[Tuple[float, float]] = Graph()
        if len(points) == 0:
            return graph

        for point in points:
            graph.insert_vertex((float(point[0]), float(point[1])))

        # Compute the distance matrix for the point set
        distances = scipy.spatial.distance_matrix(points, points)

        n = len(points)
        for i in range(n):
            for j in range(i + 1, n):
                # Don't add edge if it exceeds the threshold
                if distances[i][j] > threshold:
                    continue
                weight = int(round(distances[i][j] * scale))
                if weight >= INFINITY:
                    raise InvalidArgumentError(f"Distance {distances[i][j]} overflows at scale {scale}.")
                # Pairs are unique by construction, so the duplicate scans are skipped
                edge = Edge(i, j, weight)
                graph.V[i].adjacency.append(edge)
                graph.V[j].adjacency.append(edge)
                graph._num_edges += 1

        logger.debug("Built graph from %d points with %d edges", n, graph.num_edges)
        return graph


def total_weight(edges: Iterable[Edge]) -> int:
    return sum(edge.weight for edge in edges)
