from typing import List, Optional

import numpy as np

from primgraph.priority_queue import Position

# Largest signed 32-bit integer, used as the "unreached" distance
INFINITY = 2 ** 31 - 1

NO_PARENT = -1


class TraversalState:
    """
    Scratch state of one traversal, indexed by vertex index.

    A fresh `TraversalState` is built for every traversal, so no run sees the
    marks left by a previous one.
    """

    def __init__(self, n: int) -> None:
        self.visited: np.ndarray = np.zeros(n, dtype=bool)
        self.distance: np.ndarray = np.full(n, INFINITY, dtype=np.int64)
        self.parent: np.ndarray = np.full(n, NO_PARENT, dtype=np.int64)
        self.positions: List[Optional[Position]] = [None] * n

    def __len__(self) -> int:
        return len(self.visited)

    def get_parent(self, index: int) -> Optional[int]:
        parent = int(self.parent[index])
        return None if parent == NO_PARENT else parent

    def get_distance(self, index: int) -> int:
        return int(self.distance[index])

    def roots(self) -> List[int]:
        """
        Indices of the vertices without a parent, i.e. one per tree of a spanning forest.
        """
        return np.flatnonzero(self.parent == NO_PARENT).tolist()
