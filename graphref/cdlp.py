"""Community detection by synchronous label propagation."""

import logging
import numbers
from collections import Counter

import numpy as np

from graphref.config import DEFAULT_CDLP_ITERATIONS
from graphref.errors import InvalidParameter
from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def _most_frequent_label(neighbor_labels):
    """Most frequent label; ties go to the numerically smallest label."""
    histogram = Counter(neighbor_labels)
    best_label = None
    best_count = 0
    for label, count in histogram.items():
        if count > best_count or (count == best_count and label < best_label):
            best_label = label
            best_count = count
    return best_label


def community_detection_lp(
    graph: PropertyGraph, max_iterations: int = DEFAULT_CDLP_ITERATIONS
) -> dict:
    """Return ``{vertex_id: community_label}``.

    Works on the undirected view. Every vertex starts with its own id as
    label. In each round every vertex adopts the most frequent label among
    its neighbors as of the previous round (smallest label on ties); a vertex
    without neighbors keeps its label. Stops after a round without changes
    or after ``max_iterations`` rounds.
    """
    if (
        isinstance(max_iterations, bool)
        or not isinstance(max_iterations, numbers.Integral)
        or max_iterations < 0
    ):
        raise InvalidParameter(
            f"Maximum iterations must be a non-negative integer, got {max_iterations!r}"
        )

    undirected = graph.to_undirected()
    offsets = undirected.fwd_offsets
    targets = undirected.fwd_targets
    n = undirected.num_vertices

    labels = np.array(undirected.vertex_ids, dtype=np.int64)
    new_labels = np.empty_like(labels)

    logger.debug("Starting community detection (max %d iterations)", max_iterations)
    for iteration in range(max_iterations):
        for v in range(n):
            neighbors = targets[offsets[v]:offsets[v + 1]]
            if len(neighbors) == 0:
                new_labels[v] = labels[v]
            else:
                new_labels[v] = _most_frequent_label(labels[neighbors].tolist())

        changed = int(np.count_nonzero(new_labels != labels))
        logger.debug("- Iteration %d: %d labels changed", iteration, changed)

        labels, new_labels = new_labels, labels
        if changed == 0:
            break

    logger.debug("Finished community detection")
    return graph.to_result_map(labels)
