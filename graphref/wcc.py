"""Weakly connected components via synchronous min-label propagation."""

import logging

import numpy as np

from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def weakly_connected_components(graph: PropertyGraph) -> dict:
    """Return ``{vertex_id: component_id}``.

    Works on the undirected view. Every vertex starts with its own id and
    repeatedly takes the minimum of its label and its neighbors' labels from
    the previous round, so each component converges to its smallest id.
    """
    undirected = graph.to_undirected()
    sources = undirected.fwd_sources
    targets = undirected.fwd_targets

    labels = np.array(undirected.vertex_ids, dtype=np.int64)
    new_labels = np.empty_like(labels)

    logger.debug("Starting weakly connected components")
    iteration = 0
    while True:
        iteration += 1
        new_labels[:] = labels
        np.minimum.at(new_labels, sources, labels[targets])

        changed = int(np.count_nonzero(new_labels != labels))
        logger.debug("- Iteration %d: %d labels changed", iteration, changed)

        labels, new_labels = new_labels, labels
        if changed == 0:
            break

    logger.debug("Finished weakly connected components")
    return graph.to_result_map(labels)
