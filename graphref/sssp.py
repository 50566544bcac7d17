"""Single-source shortest paths by repeated edge relaxation."""

import logging

import numpy as np

from graphref.config import INFINITE_DISTANCE
from graphref.errors import InvalidGraph, InvalidParameter
from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def _check_weights(graph: PropertyGraph):
    weights = graph.fwd_properties
    if weights is None:
        if len(graph.fwd_targets) > 0:
            raise InvalidGraph("SSSP requires a weight property on every edge")
        return np.empty(0, dtype=np.float64)

    invalid = np.isnan(weights) | (weights < 0)
    if invalid.any():
        pos = int(np.argmax(invalid))
        src = int(graph.vertex_ids[graph.fwd_sources[pos]])
        dst = int(graph.vertex_ids[graph.fwd_targets[pos]])
        raise InvalidGraph(
            f"Edge ({src}, {dst}) has invalid weight {float(weights[pos])}; "
            "weights must be non-negative"
        )
    return weights


def single_source_shortest_paths(graph: PropertyGraph, source_vertex) -> dict:
    """Return ``{vertex_id: distance}`` from ``source_vertex``.

    Bellman-Ford style: every round relaxes all edges against the previous
    round's distances and stops once a round changes nothing. Edge weights
    come from the edge property and must be non-negative. Unreachable
    vertices keep ``INFINITE_DISTANCE``.
    """
    if source_vertex is None or not graph.has_vertex(source_vertex):
        raise InvalidParameter(f"SSSP source vertex {source_vertex} is not in the graph")

    weights = _check_weights(graph)
    sources = graph.fwd_sources
    targets = graph.fwd_targets

    distance = np.full(graph.num_vertices, INFINITE_DISTANCE, dtype=np.float64)
    distance[graph.index_of(source_vertex)] = 0.0

    logger.debug("Starting single-source shortest paths from %s", source_vertex)
    iteration = 0
    while True:
        iteration += 1
        new_distance = distance.copy()
        np.minimum.at(new_distance, targets, distance[sources] + weights)

        changed = int(np.count_nonzero(new_distance < distance))
        logger.debug("- Iteration %d: %d distances improved", iteration, changed)

        distance = new_distance
        if changed == 0:
            break

    logger.debug("Finished single-source shortest paths")
    return graph.to_result_map(distance)
