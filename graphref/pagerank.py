"""PageRank with dangling-vertex redistribution."""

import logging
import numbers

import numpy as np

from graphref.config import DEFAULT_PAGERANK_DAMPING, DEFAULT_PAGERANK_ITERATIONS
from graphref.errors import InvalidParameter
from graphref.graph import PropertyGraph

logger = logging.getLogger(__name__)


def pagerank(
    graph: PropertyGraph,
    damping_factor: float = DEFAULT_PAGERANK_DAMPING,
    num_iterations: int = DEFAULT_PAGERANK_ITERATIONS,
) -> dict:
    """Return ``{vertex_id: rank}`` after exactly ``num_iterations`` rounds.

    Each round computes, from the previous round's ranks::

        rank'(v) = (1 - d) / |V| + d * (sum(rank(u) / out(u) for u -> v)
                                        + dangling / |V|)

    where ``dangling`` is the total rank of vertices without out-edges.
    Undirected graphs count every edge as an out-link of both endpoints.
    """
    if isinstance(damping_factor, bool) or not isinstance(damping_factor, numbers.Real):
        raise InvalidParameter(f"Damping factor must be a number, got {damping_factor!r}")
    if not 0.0 < damping_factor < 1.0:
        raise InvalidParameter(f"Damping factor must be in (0, 1), got {damping_factor}")
    if (
        isinstance(num_iterations, bool)
        or not isinstance(num_iterations, numbers.Integral)
        or num_iterations < 0
    ):
        raise InvalidParameter(
            f"Number of iterations must be a non-negative integer, got {num_iterations!r}"
        )

    n = graph.num_vertices
    if n == 0:
        return {}

    sources = graph.fwd_sources
    targets = graph.fwd_targets
    out_degree = graph.out_degrees()
    dangling = out_degree == 0
    # Avoid dividing by zero; dangling vertices send nothing along edges
    safe_degree = np.where(dangling, 1, out_degree)

    rank = np.full(n, 1.0 / n, dtype=np.float64)

    logger.debug("Starting PageRank (d=%s, iterations=%d)", damping_factor, num_iterations)
    for iteration in range(num_iterations):
        dangling_sum = rank[dangling].sum()
        contribution = rank / safe_degree
        incoming = np.bincount(targets, weights=contribution[sources], minlength=n)
        new_rank = (1.0 - damping_factor) / n + damping_factor * (
            incoming + dangling_sum / n
        )
        logger.debug(
            "- Iteration %d: delta %.3e", iteration, float(np.abs(new_rank - rank).sum())
        )
        rank = new_rank

    logger.debug("Finished PageRank")
    return graph.to_result_map(rank)
