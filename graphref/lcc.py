"""Local clustering coefficient."""

import logging

import numpy as np

from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def local_clustering_coefficient(graph: PropertyGraph) -> dict:
    """Return ``{vertex_id: coefficient}`` computed on the undirected view.

    For vertex *v* with *k* distinct neighbors, of which *T* pairs are
    connected: ``2T / (k * (k - 1))`` if ``k >= 2``, else ``0``.
    """
    undirected = graph.to_undirected()
    offsets = undirected.fwd_offsets
    targets = undirected.fwd_targets
    n = undirected.num_vertices

    logger.debug("Starting local clustering coefficient")

    neighbor_sets = [
        frozenset(targets[offsets[v]:offsets[v + 1]].tolist()) for v in range(n)
    ]

    coefficients = np.zeros(n, dtype=np.float64)
    for v in range(n):
        neighbors = neighbor_sets[v]
        k = len(neighbors)
        if k < 2:
            continue
        # Each connected pair {a, b} is seen once from a and once from b
        links = sum(len(neighbor_sets[u] & neighbors) for u in neighbors)
        coefficients[v] = links / (k * (k - 1))

    logger.debug("Finished local clustering coefficient")
    return graph.to_result_map(coefficients)
