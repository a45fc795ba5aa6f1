class GraphError(Exception):
    """Base exception for graph errors."""

    pass


class InvalidArgumentError(GraphError, ValueError):
    """Raised when an absent or foreign vertex/edge, or a bad weight, is passed."""

    pass


class SelfLoopError(InvalidArgumentError):
    """Raised when an edge would connect a vertex to itself."""

    pass


class DuplicateEdgeError(GraphError):
    """Raised when an edge already exists between the same pair of vertices."""

    pass


class EmptyQueueError(GraphError, IndexError):
    """Raised when removing from an empty priority queue."""

    pass


class QueueFullError(GraphError):
    """Raised when a bounded priority queue has no room left."""

    pass
