"""Breadth-first search: hop distance from a single source vertex."""

import logging

import numpy as np

from graphref.config import UNREACHABLE_DISTANCE
from graphref.errors import InvalidParameter
from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def breadth_first_search(graph: PropertyGraph, source_vertex) -> dict:
    """Return ``{vertex_id: depth}`` for a level-synchronous BFS.

    Follows out-edges (both directions for undirected graphs). The source
    has depth 0; vertices the source cannot reach get
    ``UNREACHABLE_DISTANCE``.
    """
    if source_vertex is None or not graph.has_vertex(source_vertex):
        raise InvalidParameter(f"BFS source vertex {source_vertex} is not in the graph")

    logger.debug("Starting breadth-first search from %s", source_vertex)

    offsets = graph.fwd_offsets
    targets = graph.fwd_targets

    depth = np.full(graph.num_vertices, UNREACHABLE_DISTANCE, dtype=np.int64)
    source = graph.index_of(source_vertex)
    depth[source] = 0

    frontier = [source]
    level = 0
    while frontier:
        level += 1
        next_frontier = []
        for node in frontier:
            for neighbor in targets[offsets[node]:offsets[node + 1]].tolist():
                if depth[neighbor] == UNREACHABLE_DISTANCE:
                    depth[neighbor] = level
                    next_frontier.append(neighbor)
        logger.debug("- Level %d: discovered %d vertices", level, len(next_frontier))
        frontier = next_frontier

    logger.debug("Finished breadth-first search")
    return graph.to_result_map(depth)
