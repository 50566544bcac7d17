"""Algorithm selection and parameter handling.

Each algorithm has exactly one parameter payload class; ``run_algorithm``
checks that the payload matches the algorithm and calls its engine.
"""

import enum
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Union

from graphref.bfs import breadth_first_search
from graphref.cdlp import community_detection_lp
from graphref.config import (
    DEFAULT_CDLP_ITERATIONS,
    DEFAULT_PAGERANK_DAMPING,
    DEFAULT_PAGERANK_ITERATIONS,
)
from graphref.errors import InvalidParameter, UnsupportedAlgorithm
from graphref.graph import PropertyGraph
from graphref.lcc import local_clustering_coefficient
from graphref.pagerank import pagerank
from graphref.sssp import single_source_shortest_paths
from graphref.wcc import weakly_connected_components

logger = logging.getLogger(__name__)


class Algorithm(enum.Enum):
    BFS = "bfs"
    WCC = "wcc"
    PR = "pr"
    LCC = "lcc"
    SSSP = "sssp"
    CDLP = "cdlp"

    @classmethod
    def from_name(cls, name):
        """Resolve an acronym or long name, case-insensitively."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "-")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedAlgorithm(f"Unsupported algorithm: {name}") from None

    @property
    def integer_result(self):
        """Whether this algorithm produces integer values (vs. reals)."""
        return self in (Algorithm.BFS, Algorithm.WCC, Algorithm.CDLP)


_ALIASES = {
    "breadth-first-search": "bfs",
    "weakly-connected-components": "wcc",
    "conn": "wcc",
    "pagerank": "pr",
    "page-rank": "pr",
    "local-clustering-coefficient": "lcc",
    "stats": "lcc",
    "single-source-shortest-paths": "sssp",
    "community-detection-lp": "cdlp",
    "cd": "cdlp",
}


@dataclass(frozen=True)
class BfsParameters:
    source_vertex: int


@dataclass(frozen=True)
class WccParameters:
    pass


@dataclass(frozen=True)
class PageRankParameters:
    damping_factor: float = DEFAULT_PAGERANK_DAMPING
    num_iterations: int = DEFAULT_PAGERANK_ITERATIONS


@dataclass(frozen=True)
class LccParameters:
    pass


@dataclass(frozen=True)
class SsspParameters:
    source_vertex: int


@dataclass(frozen=True)
class CdlpParameters:
    max_iterations: int = DEFAULT_CDLP_ITERATIONS


AlgorithmParameters = Union[
    BfsParameters,
    WccParameters,
    PageRankParameters,
    LccParameters,
    SsspParameters,
    CdlpParameters,
]

PARAMETER_TYPES = {
    Algorithm.BFS: BfsParameters,
    Algorithm.WCC: WccParameters,
    Algorithm.PR: PageRankParameters,
    Algorithm.LCC: LccParameters,
    Algorithm.SSSP: SsspParameters,
    Algorithm.CDLP: CdlpParameters,
}


def _as_int(value, name):
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidParameter(f"{name} must be an integer, got {value!r}") from None


def _as_float(value, name):
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None


def parameters_from_dict(algorithm, values: Optional[dict] = None) -> AlgorithmParameters:
    """Build the parameter payload for ``algorithm`` from a plain mapping.

    Accepts the keys ``source_vertex``, ``damping_factor``,
    ``num_iterations`` and ``max_iterations`` (``iterations`` is accepted for
    PR and CDLP). Values may be strings, as read from a properties file or a
    command line. Optional values fall back to the configured defaults.
    """
    algorithm = Algorithm.from_name(algorithm)
    if values is None:
        values = {}
    if not isinstance(values, Mapping):
        raise InvalidParameter(
            f"Parameters must be a mapping, got {type(values).__name__}"
        )
    values = {
        str(k).replace("-", "_"): v for k, v in values.items() if v is not None
    }

    if algorithm in (Algorithm.BFS, Algorithm.SSSP):
        if "source_vertex" not in values:
            raise InvalidParameter(
                f"{algorithm.name} requires a source_vertex parameter"
            )
        source = _as_int(values["source_vertex"], "source_vertex")
        return PARAMETER_TYPES[algorithm](source_vertex=source)

    if algorithm is Algorithm.PR:
        iterations = values.get("num_iterations", values.get("iterations"))
        return PageRankParameters(
            damping_factor=_as_float(
                values.get("damping_factor", DEFAULT_PAGERANK_DAMPING), "damping_factor"
            ),
            num_iterations=_as_int(
                DEFAULT_PAGERANK_ITERATIONS if iterations is None else iterations,
                "num_iterations",
            ),
        )

    if algorithm is Algorithm.CDLP:
        iterations = values.get("max_iterations", values.get("iterations"))
        return CdlpParameters(
            max_iterations=_as_int(
                DEFAULT_CDLP_ITERATIONS if iterations is None else iterations,
                "max_iterations",
            )
        )

    return PARAMETER_TYPES[algorithm]()


def run_algorithm(
    graph: PropertyGraph,
    algorithm,
    parameters: Optional[AlgorithmParameters] = None,
) -> dict:
    """Run one algorithm on ``graph`` and return its ``{vertex_id: value}`` map.

    Args:
        graph: The graph to analyze (read only)
        algorithm: ``Algorithm`` member or name
        parameters: Payload matching the algorithm. May be omitted for
                    algorithms whose parameters all have defaults.
    """
    algorithm = Algorithm.from_name(algorithm)
    expected_type = PARAMETER_TYPES[algorithm]
    if parameters is None:
        parameters = parameters_from_dict(algorithm)
    if not isinstance(parameters, expected_type):
        raise InvalidParameter(
            f"{algorithm.name} expects {expected_type.__name__}, "
            f"got {type(parameters).__name__}"
        )

    logger.info("Running %s on %r", algorithm.name, graph)
    logger.info("Processing starts at: %d", int(time.time() * 1000))

    if algorithm is Algorithm.BFS:
        output = breadth_first_search(graph, parameters.source_vertex)
    elif algorithm is Algorithm.WCC:
        output = weakly_connected_components(graph)
    elif algorithm is Algorithm.PR:
        output = pagerank(graph, parameters.damping_factor, parameters.num_iterations)
    elif algorithm is Algorithm.LCC:
        output = local_clustering_coefficient(graph)
    elif algorithm is Algorithm.SSSP:
        output = single_source_shortest_paths(graph, parameters.source_vertex)
    elif algorithm is Algorithm.CDLP:
        output = community_detection_lp(graph, parameters.max_iterations)
    else:
        raise UnsupportedAlgorithm(f"Unsupported algorithm: {algorithm}")

    logger.info("Processing ends at: %d", int(time.time() * 1000))
    return output
