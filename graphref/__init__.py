"""
graphref - Reference implementations of the Graphalytics algorithms
"""

__version__ = "0.1.0"

from graphref.bfs import breadth_first_search
from graphref.cdlp import community_detection_lp
from graphref.diagnostics import graph_summary, print_graph_summary
from graphref.dispatch import (
    Algorithm,
    BfsParameters,
    CdlpParameters,
    LccParameters,
    PageRankParameters,
    SsspParameters,
    WccParameters,
    parameters_from_dict,
    run_algorithm,
)
from graphref.errors import (
    GraphrefError,
    InvalidGraph,
    InvalidParameter,
    UnsupportedAlgorithm,
    VertexNotFound,
)
from graphref.graph import PropertyGraph
from graphref.lcc import local_clustering_coefficient
from graphref.loader import LdbcDataset, load_dataset, load_reference
from graphref.output import format_value, write_output
from graphref.pagerank import pagerank
from graphref.sssp import single_source_shortest_paths
from graphref.validation import ValidationError, ValidationResult, validate_output
from graphref.wcc import weakly_connected_components

__all__ = [
    # Core classes
    "PropertyGraph",
    # Loading
    "LdbcDataset",
    "load_dataset",
    "load_reference",
    # Algorithms
    "breadth_first_search",
    "weakly_connected_components",
    "pagerank",
    "local_clustering_coefficient",
    "single_source_shortest_paths",
    "community_detection_lp",
    # Dispatch
    "Algorithm",
    "BfsParameters",
    "WccParameters",
    "PageRankParameters",
    "LccParameters",
    "SsspParameters",
    "CdlpParameters",
    "parameters_from_dict",
    "run_algorithm",
    # Output and validation
    "format_value",
    "write_output",
    "ValidationError",
    "ValidationResult",
    "validate_output",
    # Diagnostics
    "graph_summary",
    "print_graph_summary",
    # Errors
    "GraphrefError",
    "VertexNotFound",
    "InvalidParameter",
    "InvalidGraph",
    "UnsupportedAlgorithm",
]
