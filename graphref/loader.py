"""Load LDBC Graphalytics datasets into a PropertyGraph.

A dataset directory ``<name>/`` holds:
- ``<name>.v``          -- ``<id> [<property>]`` per line
- ``<name>.e``          -- ``<src> <dst> [<property>]`` per line
- ``<name>.properties`` -- optional Java properties file with directedness,
                           property schema, expected counts and per-algorithm
                           parameters (keys prefixed with ``graph.<name>.``)

Vertex and edge files are read in two passes: pass 1 counts records so
pass 2 can fill pre-allocated numpy arrays without intermediate lists.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np

from graphref.errors import InvalidGraph
from graphref.graph import PropertyGraph


# Property types the reference platform can parse.
_SUPPORTED_PROPERTY_TYPES = {"real"}


def load_properties(path: Union[str, Path]) -> dict:
    """Parse a ``.properties`` file (Java properties: key = value).

    Lines starting with ``#`` or ``!`` are comments and are skipped.
    """
    props = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line[0] in "#!":
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                props[key.strip()] = value.strip()
    return props


def _get(properties, name, key, default=None):
    """Look up ``graph.<name>.<key>``, falling back to ``graph.<key>``."""
    for full_key in (f"graph.{name}.{key}", f"graph.{key}"):
        if full_key in properties:
            return properties[full_key]
    return default


def _split_list(value):
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DatasetSchema:
    """Directedness and property layout of a dataset."""

    directed: bool = True
    vertex_property: Optional[str] = None
    edge_property: Optional[str] = None


def dataset_schema(properties: dict, name: str) -> DatasetSchema:
    """Derive the dataset schema from its properties.

    At most one property per vertex and per edge is supported and it must be
    real-valued. Anything else is a configuration error.
    """
    schema = DatasetSchema()
    directed = _get(properties, name, "directed")
    if directed is not None:
        schema.directed = directed.lower() == "true"

    for kind in ("vertex", "edge"):
        names = _split_list(_get(properties, name, f"{kind}-properties.names"))
        types = _split_list(_get(properties, name, f"{kind}-properties.types"))
        if not names:
            continue
        if len(names) != 1 or len(types) != 1:
            raise InvalidGraph(
                f"Unsupported {kind} properties {names}: "
                "at most one property is supported"
            )
        if types[0].lower() not in _SUPPORTED_PROPERTY_TYPES:
            raise InvalidGraph(
                f"Unsupported {kind} property type '{types[0]}' for '{names[0]}': "
                "only real properties are supported"
            )
        setattr(schema, f"{kind}_property", names[0])

    return schema


def _count_records(path):
    count = 0
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                count += 1
    return count


def load_vertex_file(path: Union[str, Path], has_property: bool = False):
    """Parse a ``.v`` file.

    Returns ``(vertex_ids, properties)`` where ``properties`` is None unless
    ``has_property`` is set.
    """
    num_vertices = _count_records(path)
    vertex_ids = np.empty(num_vertices, dtype=np.int64)
    properties = np.empty(num_vertices, dtype=np.float64) if has_property else None
    expected_fields = 2 if has_property else 1

    i = 0
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            parts = line.split()
            if not parts:
                continue
            if len(parts) != expected_fields:
                raise InvalidGraph(
                    f"{path}:{line_no}: expected {expected_fields} field(s), "
                    f"got '{line.strip()}'"
                )
            try:
                vertex_ids[i] = int(parts[0])
                if has_property:
                    properties[i] = float(parts[1])
            except (ValueError, OverflowError) as e:
                raise InvalidGraph(f"{path}:{line_no}: {e}") from e
            i += 1

    return vertex_ids, properties


def load_edge_file(path: Union[str, Path], has_property: bool = False):
    """Parse a ``.e`` file.

    Returns ``(src_ids, dst_ids, properties)`` where ``properties`` is None
    unless ``has_property`` is set.
    """
    num_edges = _count_records(path)
    src_ids = np.empty(num_edges, dtype=np.int64)
    dst_ids = np.empty(num_edges, dtype=np.int64)
    properties = np.empty(num_edges, dtype=np.float64) if has_property else None
    expected_fields = 3 if has_property else 2

    i = 0
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            parts = line.split()
            if not parts:
                continue
            if len(parts) != expected_fields:
                raise InvalidGraph(
                    f"{path}:{line_no}: expected {expected_fields} fields, "
                    f"got '{line.strip()}'"
                )
            try:
                src_ids[i] = int(parts[0])
                dst_ids[i] = int(parts[1])
                if has_property:
                    properties[i] = float(parts[2])
            except (ValueError, OverflowError) as e:
                raise InvalidGraph(f"{path}:{line_no}: {e}") from e
            i += 1

            if i % 1_000_000 == 0:
                print(f"  {i:,}/{num_edges:,} edges read...")

    return src_ids, dst_ids, properties


def load_reference(path: Union[str, Path]) -> dict:
    """Parse a reference output file -- ``vertex_id value`` per line.

    Values are kept as raw strings so the caller can parse them according to
    the algorithm's result type.
    """
    reference = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            parts = line.split()
            if not parts:
                continue
            if len(parts) != 2:
                raise InvalidGraph(
                    f"{path}:{line_no}: expected 2 fields, got '{line.strip()}'"
                )
            try:
                reference[int(parts[0])] = parts[1]
            except ValueError as e:
                raise InvalidGraph(f"{path}:{line_no}: {e}") from e
    return reference


@dataclass
class LdbcDataset:
    """An LDBC Graphalytics dataset: the graph plus its metadata."""

    name: str
    graph: PropertyGraph
    schema: DatasetSchema
    properties: dict = field(default_factory=dict)
    data_dir: Optional[Path] = None

    def algorithm_parameters(self, algorithm: str) -> dict:
        """Parameters the properties file declares for ``algorithm``.

        ``algorithm`` is the short LDBC name (bfs, pr, cdlp, sssp, ...).
        Returns a dict with keys understood by
        ``graphref.dispatch.parameters_from_dict``.
        """
        algorithm = algorithm.lower()
        keys = {
            "bfs": {"source-vertex": "source_vertex"},
            "sssp": {"source-vertex": "source_vertex"},
            "pr": {
                "damping-factor": "damping_factor",
                "num-iterations": "num_iterations",
            },
            "cdlp": {"max-iterations": "max_iterations"},
        }.get(algorithm, {})

        params = {}
        for ldbc_key, param in keys.items():
            value = _get(self.properties, self.name, f"{algorithm}.{ldbc_key}")
            if value is not None:
                params[param] = value
        return params


def load_dataset(data_dir: Union[str, Path], directed: Optional[bool] = None) -> LdbcDataset:
    """Load all files from an LDBC dataset directory and validate counts.

    Args:
        data_dir: Directory named after the dataset
        directed: Override the directedness from the properties file. Graphs
                  without a properties file default to directed.
    """
    data_dir = Path(data_dir)
    name = data_dir.name

    v_path = data_dir / f"{name}.v"
    e_path = data_dir / f"{name}.e"
    props_path = data_dir / f"{name}.properties"

    for path in (v_path, e_path):
        if not path.exists():
            raise FileNotFoundError(f"Dataset file not found: {path}")

    properties = load_properties(props_path) if props_path.exists() else {}
    schema = dataset_schema(properties, name)
    if directed is not None:
        schema.directed = directed

    print(f"Loading vertices from {v_path}...")
    vertex_ids, vertex_props = load_vertex_file(
        v_path, has_property=schema.vertex_property is not None
    )
    print(f"Loading edges from {e_path}...")
    src_ids, dst_ids, edge_props = load_edge_file(
        e_path, has_property=schema.edge_property is not None
    )

    expected_v = _get(properties, name, "meta.vertices")
    if expected_v is not None and len(vertex_ids) != int(expected_v):
        raise InvalidGraph(
            f"vertex count mismatch: file has {len(vertex_ids)}, "
            f"properties says {expected_v}"
        )
    expected_e = _get(properties, name, "meta.edges")
    if expected_e is not None and len(src_ids) != int(expected_e):
        raise InvalidGraph(
            f"edge count mismatch: file has {len(src_ids)}, "
            f"properties says {expected_e}"
        )

    graph = PropertyGraph.from_arrays(
        vertex_ids,
        src_ids,
        dst_ids,
        directed=schema.directed,
        vertex_properties=vertex_props,
        edge_properties=edge_props,
    )
    print(f"  Loaded {graph!r}")

    return LdbcDataset(
        name=name,
        graph=graph,
        schema=schema,
        properties=properties,
        data_dir=data_dir,
    )
