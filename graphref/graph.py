"""Immutable CSR property graph used by every algorithm engine."""

import pickle
import time
from pathlib import Path
from typing import Optional, Union

import numpy as np

from graphref.errors import InvalidGraph, VertexNotFound


def _freeze(*arrays):
    """Mark numpy arrays read-only so no engine can mutate the graph."""
    for array in arrays:
        if array is not None and array.flags.writeable:
            array.flags.writeable = False


class PropertyGraph:
    """
    Compressed Sparse Row graph over 64-bit vertex ids.

    Vertices are kept sorted by id; internally every vertex is addressed by
    its position in ``vertex_ids`` (its *index*). Two CSR structures are
    maintained:
    - Forward: vertex -> outgoing edges (``fwd_offsets``, ``fwd_targets``)
    - Reverse: vertex -> incoming edges (``rev_offsets``, ``rev_sources``)

    Undirected graphs are symmetrized on construction: every edge that is
    not a self-loop is stored once in each direction, so forward and reverse
    adjacency coincide. ``num_edges`` always counts the edges as given.

    Optional vertex and edge properties are real numbers. Edge properties
    are stored in ``fwd_properties``, parallel to ``fwd_targets``.
    """

    def __init__(
        self,
        vertices,
        edges,
        directed=True,
        vertex_properties=None,
        edge_properties=None,
    ):
        """
        Args:
            vertices: Iterable of integer vertex ids
            edges: Iterable of (src_id, dst_id) pairs
            directed: Whether edges are one-way
            vertex_properties: Optional floats parallel to ``vertices``
            edge_properties: Optional floats parallel to ``edges``
        """
        try:
            vertex_ids = np.asarray(list(vertices), dtype=np.int64)
            edge_ids = np.asarray(list(edges), dtype=np.int64).reshape(-1, 2)
        except (ValueError, OverflowError) as e:
            raise InvalidGraph(f"Vertex ids must be 64-bit integers: {e}") from e

        self._init_from_ids(
            vertex_ids,
            edge_ids[:, 0],
            edge_ids[:, 1],
            directed,
            vertex_properties,
            edge_properties,
        )

    @classmethod
    def from_arrays(
        cls,
        vertex_ids,
        src_ids,
        dst_ids,
        directed=True,
        vertex_properties=None,
        edge_properties=None,
    ):
        """Build a graph from parallel numpy arrays (used by the loader)."""
        graph = cls.__new__(cls)
        graph._init_from_ids(
            np.asarray(vertex_ids, dtype=np.int64),
            np.asarray(src_ids, dtype=np.int64),
            np.asarray(dst_ids, dtype=np.int64),
            directed,
            vertex_properties,
            edge_properties,
        )
        return graph

    def _init_from_ids(
        self, vertex_ids, src_ids, dst_ids, directed, vertex_properties, edge_properties
    ):
        """Validate raw ids, translate them to indices and build the CSR arrays."""
        if vertex_properties is not None:
            vertex_properties = np.asarray(vertex_properties, dtype=np.float64)
            if len(vertex_properties) != len(vertex_ids):
                raise InvalidGraph(
                    f"Got {len(vertex_properties)} vertex properties for "
                    f"{len(vertex_ids)} vertices"
                )
        if edge_properties is not None:
            edge_properties = np.asarray(edge_properties, dtype=np.float64)
            if len(edge_properties) != len(src_ids):
                raise InvalidGraph(
                    f"Got {len(edge_properties)} edge properties for "
                    f"{len(src_ids)} edges"
                )

        # Sort vertices by id so ids can be resolved with binary search
        order = np.argsort(vertex_ids, kind="stable")
        vertex_ids = vertex_ids[order]
        if vertex_properties is not None:
            vertex_properties = vertex_properties[order]

        duplicates = vertex_ids[1:][vertex_ids[1:] == vertex_ids[:-1]]
        if len(duplicates) > 0:
            raise InvalidGraph(f"Duplicate vertex id {int(duplicates[0])}")

        src_idx = self._resolve_endpoints(vertex_ids, src_ids)
        dst_idx = self._resolve_endpoints(vertex_ids, dst_ids)

        self._build(
            vertex_ids, src_idx, dst_idx, directed, vertex_properties, edge_properties
        )

    @staticmethod
    def _resolve_endpoints(vertex_ids, endpoint_ids):
        """Map edge endpoint ids to vertex indices, rejecting unknown ids."""
        if len(endpoint_ids) == 0:
            return np.empty(0, dtype=np.int32)

        positions = np.searchsorted(vertex_ids, endpoint_ids)
        clipped = np.minimum(positions, max(len(vertex_ids) - 1, 0))
        if len(vertex_ids) == 0:
            missing = np.ones(len(endpoint_ids), dtype=bool)
        else:
            missing = vertex_ids[clipped] != endpoint_ids
        if missing.any():
            bad = int(endpoint_ids[np.argmax(missing)])
            raise InvalidGraph(f"Edge endpoint {bad} is not a vertex of the graph")

        return positions.astype(np.int32)

    def _build(
        self, vertex_ids, src_idx, dst_idx, directed, vertex_properties, edge_properties
    ):
        """Build forward and reverse CSR structures from index arrays."""
        num_vertices = len(vertex_ids)

        self.directed = bool(directed)
        self.num_edges = len(src_idx)
        self.vertex_ids = vertex_ids
        self.vertex_properties = vertex_properties
        self.id_to_idx = {vid: idx for idx, vid in enumerate(vertex_ids.tolist())}
        self._undirected_views = {}

        if not self.directed:
            # Store the reverse direction of every non-loop edge as well
            mask = src_idx != dst_idx
            src_idx, dst_idx = (
                np.concatenate((src_idx, dst_idx[mask])),
                np.concatenate((dst_idx, src_idx[mask])),
            )
            if edge_properties is not None:
                edge_properties = np.concatenate(
                    (edge_properties, edge_properties[mask])
                )

        # Forward CSR: sort by (src, dst) using lexsort (last key is primary)
        fwd_order = np.lexsort((dst_idx, src_idx))
        self.fwd_sources = src_idx[fwd_order].astype(np.int32)
        self.fwd_targets = dst_idx[fwd_order].astype(np.int32)
        self.fwd_properties = (
            edge_properties[fwd_order] if edge_properties is not None else None
        )
        self.fwd_offsets = np.searchsorted(
            self.fwd_sources, np.arange(num_vertices + 1)
        ).astype(np.int64)

        # Reverse CSR: forward positions sorted by (dst, src)
        rev_order = np.lexsort((self.fwd_sources, self.fwd_targets))
        self.rev_to_fwd = rev_order.astype(np.int64)
        self.rev_sources = self.fwd_sources[rev_order]
        self.rev_offsets = np.searchsorted(
            self.fwd_targets[rev_order], np.arange(num_vertices + 1)
        ).astype(np.int64)

        _freeze(
            self.vertex_ids,
            self.vertex_properties,
            self.fwd_sources,
            self.fwd_targets,
            self.fwd_properties,
            self.fwd_offsets,
            self.rev_to_fwd,
            self.rev_sources,
            self.rev_offsets,
        )

    # ------------------------------------------------------------------
    # Vertex queries
    # ------------------------------------------------------------------

    @property
    def num_vertices(self):
        return len(self.vertex_ids)

    def vertices(self):
        """All vertex ids, ascending."""
        return self.vertex_ids.tolist()

    def has_vertex(self, vertex_id):
        return vertex_id in self.id_to_idx

    def index_of(self, vertex_id):
        """Convert a vertex id to its internal index."""
        try:
            return self.id_to_idx[vertex_id]
        except KeyError:
            raise VertexNotFound(vertex_id) from None

    def vertex_property(self, vertex_id, default=None):
        """Get the property of a vertex, or ``default`` if the graph has none."""
        idx = self.index_of(vertex_id)
        if self.vertex_properties is None:
            return default
        return float(self.vertex_properties[idx])

    def has_vertex_properties(self):
        return self.vertex_properties is not None

    def has_edge_properties(self):
        return self.fwd_properties is not None

    # ------------------------------------------------------------------
    # Neighbor queries
    # ------------------------------------------------------------------

    def out_neighbors(self, vertex_id):
        """Ids of the vertices this vertex points TO (with multiplicity)."""
        idx = self.index_of(vertex_id)
        start = self.fwd_offsets[idx]
        end = self.fwd_offsets[idx + 1]
        return self.vertex_ids[self.fwd_targets[start:end]]

    def in_neighbors(self, vertex_id):
        """Ids of the vertices that point TO this vertex (with multiplicity)."""
        idx = self.index_of(vertex_id)
        start = self.rev_offsets[idx]
        end = self.rev_offsets[idx + 1]
        return self.vertex_ids[self.rev_sources[start:end]]

    def neighbors(self, vertex_id):
        """
        Neighbors ignoring direction.

        Returns the neighbors in the undirected view for every graph: the
        deduplicated union of out- and in-neighbors without self-loops.
        ``out_neighbors`` keeps parallel edges and self-loops.
        """
        return self.to_undirected().out_neighbors(vertex_id)

    def out_degree(self, vertex_id):
        idx = self.index_of(vertex_id)
        return int(self.fwd_offsets[idx + 1] - self.fwd_offsets[idx])

    def in_degree(self, vertex_id):
        idx = self.index_of(vertex_id)
        return int(self.rev_offsets[idx + 1] - self.rev_offsets[idx])

    def out_degrees(self):
        """Out-degree of every vertex, by index."""
        return np.diff(self.fwd_offsets)

    # ------------------------------------------------------------------
    # Edge queries
    # ------------------------------------------------------------------

    def _find_edge_index(self, src_idx, dst_idx):
        """Find the forward CSR position of the first edge src -> dst.

        Targets within a row are sorted, so this is a binary search over the
        source vertex's edge range. Returns None if there is no such edge.
        """
        start = int(self.fwd_offsets[src_idx])
        end = int(self.fwd_offsets[src_idx + 1])
        if start == end:
            return None

        pos = int(np.searchsorted(self.fwd_targets[start:end], dst_idx, side="left"))
        if pos < end - start and self.fwd_targets[start + pos] == dst_idx:
            return start + pos
        return None

    def has_edge(self, src_id, dst_id):
        src_idx = self.index_of(src_id)
        dst_idx = self.index_of(dst_id)
        return self._find_edge_index(src_idx, dst_idx) is not None

    def edge_property(self, src_id, dst_id, default=None):
        """Get the property of the edge src -> dst.

        Returns ``default`` if the edge does not exist or the graph carries no
        edge properties. With parallel edges the first stored one wins.
        """
        src_idx = self.index_of(src_id)
        dst_idx = self.index_of(dst_id)
        if self.fwd_properties is None:
            return default

        pos = self._find_edge_index(src_idx, dst_idx)
        if pos is None:
            return default
        return float(self.fwd_properties[pos])

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def to_undirected(self, keep_self_loops=False):
        """Return the undirected view of this graph.

        Every pair of adjacent vertices becomes a single undirected edge no
        matter how many edges (in either direction) connect them. Self-loops
        are dropped unless ``keep_self_loops`` is set. Edge properties are not
        carried over. The view is built once and cached.
        """
        cached = self._undirected_views.get(keep_self_loops)
        if cached is not None:
            return cached

        low = np.minimum(self.fwd_sources, self.fwd_targets)
        high = np.maximum(self.fwd_sources, self.fwd_targets)
        if not keep_self_loops:
            mask = low != high
            low, high = low[mask], high[mask]

        if len(low) > 0:
            pairs = np.unique(np.stack((low, high), axis=1), axis=0)
            low, high = pairs[:, 0], pairs[:, 1]

        view = PropertyGraph.__new__(PropertyGraph)
        view._build(
            self.vertex_ids,
            low.astype(np.int32),
            high.astype(np.int32),
            False,
            self.vertex_properties,
            None,
        )
        self._undirected_views[keep_self_loops] = view
        return view

    def to_result_map(self, values):
        """Pair per-index values with vertex ids as a plain ``{id: value}`` dict."""
        return dict(zip(self.vertex_ids.tolist(), np.asarray(values).tolist()))

    def __repr__(self):
        kind = "directed" if self.directed else "undirected"
        return (
            f"PropertyGraph({kind}, {self.num_vertices:,} vertices, "
            f"{self.num_edges:,} edges)"
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    _ARRAYS = (
        "vertex_ids",
        "fwd_sources",
        "fwd_targets",
        "fwd_offsets",
        "rev_to_fwd",
        "rev_sources",
        "rev_offsets",
    )

    def save_mmap(self, directory: Union[str, Path]):
        """Save graph in memory-mappable format for fast loading.

        Creates a directory with:
        - NumPy arrays as .npy files (can be memory-mapped)
        - Optional property arrays (vertex_properties.npy, fwd_properties.npy)
        - Small metadata dict as pickle
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        print(f"Saving graph to {directory} (mmap format)...")
        t0 = time.perf_counter()

        for name in self._ARRAYS:
            np.save(directory / f"{name}.npy", getattr(self, name))
        if self.vertex_properties is not None:
            np.save(directory / "vertex_properties.npy", self.vertex_properties)
        if self.fwd_properties is not None:
            np.save(directory / "fwd_properties.npy", self.fwd_properties)

        metadata = {
            "directed": self.directed,
            "num_edges": self.num_edges,
            "has_vertex_properties": self.vertex_properties is not None,
            "has_edge_properties": self.fwd_properties is not None,
        }
        with open(directory / "metadata.pkl", "wb") as f:
            pickle.dump(metadata, f, protocol=pickle.HIGHEST_PROTOCOL)

        t1 = time.perf_counter()
        print(f"Graph saved in {t1 - t0:.2f}s")

        total_size = 0
        for f in sorted(directory.iterdir()):
            if f.is_file():
                size = f.stat().st_size
                total_size += size
                print(f"  {f.name}: {size / 1024 / 1024:.1f} MB")
        print(f"  Total: {total_size / 1024 / 1024:.1f} MB")

    @staticmethod
    def load_mmap(directory: Union[str, Path], mmap_mode: Optional[str] = "r"):
        """Load graph from memory-mapped format."""
        directory = Path(directory)
        if not (directory / "metadata.pkl").exists():
            raise FileNotFoundError(f"No graph metadata found in {directory}")

        print(f"Loading graph from {directory} (mmap_mode={mmap_mode})...")
        t0 = time.perf_counter()

        with open(directory / "metadata.pkl", "rb") as f:
            metadata = pickle.load(f)

        graph = PropertyGraph.__new__(PropertyGraph)
        for name in PropertyGraph._ARRAYS:
            setattr(graph, name, np.load(directory / f"{name}.npy", mmap_mode=mmap_mode))

        graph.vertex_properties = None
        if metadata["has_vertex_properties"]:
            graph.vertex_properties = np.load(
                directory / "vertex_properties.npy", mmap_mode=mmap_mode
            )
        graph.fwd_properties = None
        if metadata["has_edge_properties"]:
            graph.fwd_properties = np.load(
                directory / "fwd_properties.npy", mmap_mode=mmap_mode
            )

        graph.directed = metadata["directed"]
        graph.num_edges = metadata["num_edges"]
        graph.id_to_idx = {vid: idx for idx, vid in enumerate(graph.vertex_ids.tolist())}
        graph._undirected_views = {}

        t1 = time.perf_counter()
        print(f"Graph loaded in {t1 - t0:.2f}s")
        print(f"  {graph.num_vertices:,} vertices, {graph.num_edges:,} edges")

        return graph
