import heapq
import itertools
from typing import Generic, List, Optional, TypeVar

from primgraph.exceptions import EmptyQueueError, InvalidArgumentError, QueueFullError

K = TypeVar("K")
V = TypeVar("V")


class Position(Generic[K, V]):
    """
    Handle to a live entry of a `HeapPriorityQueue`, used for `decrease_key`.
    """

    __slots__ = ("key", "value", "_queue", "_entry")

    def __init__(self, queue: 'HeapPriorityQueue[K, V]', key: K, value: V) -> None:
        self.key: K = key
        self.value: V = value
        self._queue = queue
        self._entry: Optional[list] = None

    @property
    def alive(self) -> bool:
        return self._entry is not None

    def __repr__(self) -> str:
        return f"Position(key={self.key!r}, value={self.value!r}, alive={self.alive})"


class HeapPriorityQueue(Generic[K, V]):
    """
    A min-priority queue on top of `heapq` with decrease-key.

    Decreasing a key invalidates the old heap entry in place and pushes a new
    one; stale entries are skipped by `remove_min`. Equal keys come out in
    insertion order of their current entries.
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        """
        Creates a `HeapPriorityQueue`.

        Parameters
        ----------

        capacity : The maximum number of live entries, or `None` for no bound.
        """

        self.capacity = capacity
        self._heap: List[list] = []
        self._counter = itertools.count()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def insert(self, key: K, value: V) -> Position[K, V]:
        """
        Inserts `value` with priority `key`.

        Returns
        -------

        The `Position` handle of the new entry.
        """

        if self.capacity is not None and self._size >= self.capacity:
            raise QueueFullError(f"Priority queue is full (capacity {self.capacity}).")

        position = Position(self, key, value)
        self._push(position)
        self._size += 1
        return position

    def min(self) -> V:
        self._drop_stale()
        if not self._heap:
            raise EmptyQueueError("The priority queue is empty.")
        return self._heap[0][-1].value

    def remove_min(self) -> V:
        self._drop_stale()
        if not self._heap:
            raise EmptyQueueError("The priority queue is empty.")

        position: Position[K, V] = heapq.heappop(self._heap)[-1]
        position._entry = None
        self._size -= 1
        return position.value

    def decrease_key(self, position: Position[K, V], key: K) -> None:
        """
        Lowers the priority of a live entry to `key`.

        Parameters
        ----------

        position : The handle returned by `insert`.

        key : The new priority, not greater than the current one.
        """

        if position is None or position._queue is not self or not position.alive:
            raise InvalidArgumentError("The position is not a live entry of this queue.")
        if position.key < key:
            raise InvalidArgumentError(f"New key {key!r} is greater than current key {position.key!r}.")

        # Stale entries keep their slot until they surface
        position._entry[-1] = None
        position.key = key
        self._push(position)

    def _push(self, position: Position[K, V]) -> None:
        # [key, sequence, position]; the sequence keeps positions from being compared
        entry = [position.key, next(self._counter), position]
        position._entry = entry
        heapq.heappush(self._heap, entry)

    def _drop_stale(self) -> None:
        while self._heap and self._heap[0][-1] is None:
            heapq.heappop(self._heap)
