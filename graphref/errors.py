"""Exceptions raised by graphref.

Every error is fatal for the current run: nothing is retried and no partial
result map is returned.
"""


class GraphrefError(Exception):
    """Base class for all graphref errors."""


class VertexNotFound(GraphrefError, KeyError):
    """A lookup referenced a vertex id that is not in the graph."""

    def __init__(self, vertex_id):
        self.vertex_id = vertex_id
        super().__init__(f"Vertex {vertex_id} not found in graph")

    def __str__(self):
        # KeyError quotes its argument otherwise
        return self.args[0]


class InvalidParameter(GraphrefError, ValueError):
    """An algorithm parameter is outside its valid domain."""


class InvalidGraph(GraphrefError, ValueError):
    """The graph violates a structural precondition of the loader or an algorithm."""


class UnsupportedAlgorithm(GraphrefError, ValueError):
    """The requested algorithm has no engine."""
