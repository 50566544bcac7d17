"""Summary statistics for a loaded graph."""

import numpy as np

from graphref.graph import PropertyGraph


def graph_summary(graph: PropertyGraph) -> dict:
    """Counts and degree statistics of ``graph``.

    Degrees are taken from the undirected view, which is what WCC, LCC and
    CDLP operate on.
    """
    undirected = graph.to_undirected()
    degrees = np.diff(undirected.fwd_offsets)
    self_loops = int(np.count_nonzero(graph.fwd_sources == graph.fwd_targets))

    summary = {
        "directed": graph.directed,
        "vertices": graph.num_vertices,
        "edges": graph.num_edges,
        "undirected_edges": undirected.num_edges,
        "self_loops": self_loops,
        "vertex_properties": graph.has_vertex_properties(),
        "edge_properties": graph.has_edge_properties(),
        "isolated_vertices": int(np.count_nonzero(degrees == 0)),
        "min_degree": int(degrees.min()) if len(degrees) else 0,
        "max_degree": int(degrees.max()) if len(degrees) else 0,
        "mean_degree": float(degrees.mean()) if len(degrees) else 0.0,
    }
    return summary


def print_graph_summary(graph: PropertyGraph):
    """Print ``graph_summary`` in a readable layout."""
    summary = graph_summary(graph)
    print("Graph statistics:")
    print(f"  Directed: {summary['directed']}")
    print(f"  Vertices: {summary['vertices']:,}")
    print(f"  Edges: {summary['edges']:,}")
    print(f"  Undirected edges (deduplicated): {summary['undirected_edges']:,}")
    print(f"  Self-loops: {summary['self_loops']:,}")
    print(f"  Isolated vertices: {summary['isolated_vertices']:,}")
    print(
        f"  Degree min/mean/max: {summary['min_degree']} / "
        f"{summary['mean_degree']:.1f} / {summary['max_degree']}"
    )
    print(f"  Vertex properties: {summary['vertex_properties']}")
    print(f"  Edge properties: {summary['edge_properties']}")
