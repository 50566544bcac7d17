"""Unit tests for graphref.loader module."""

import os

import pytest

from graphref.errors import InvalidGraph
from graphref.graph import PropertyGraph
from graphref.loader import (
    dataset_schema,
    load_dataset,
    load_edge_file,
    load_properties,
    load_reference,
    load_vertex_file,
)


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
DIRECTED_DIR = os.path.join(FIXTURES_DIR, "example-directed")


def _write_dataset(root, name, vertices, edges, properties=""):
    """Write a throwaway dataset directory and return its path."""
    data_dir = root / name
    data_dir.mkdir()
    (data_dir / f"{name}.v").write_text(vertices)
    (data_dir / f"{name}.e").write_text(edges)
    if properties:
        (data_dir / f"{name}.properties").write_text(properties)
    return data_dir


class TestLoadDataset:
    """Tests for load_dataset."""

    def test_returns_property_graph(self, directed_dataset):
        assert isinstance(directed_dataset.graph, PropertyGraph)
        assert directed_dataset.name == "example-directed"

    def test_counts(self, directed_graph):
        assert directed_graph.num_vertices == 7
        assert directed_graph.num_edges == 7

    def test_directedness_from_properties(self, directed_graph, undirected_graph):
        assert directed_graph.directed
        assert not undirected_graph.directed

    def test_directed_override(self):
        dataset = load_dataset(DIRECTED_DIR, directed=False)
        assert not dataset.graph.directed
        assert sorted(dataset.graph.out_neighbors(2).tolist()) == [1, 3]

    def test_edge_weights_loaded(self, directed_dataset):
        assert directed_dataset.schema.edge_property == "weight"
        assert directed_dataset.graph.edge_property(5, 6) == pytest.approx(2.5)

    def test_unweighted_dataset(self, undirected_graph):
        assert not undirected_graph.has_edge_properties()

    def test_algorithm_parameters(self, directed_dataset):
        """Per-algorithm parameters come from the properties file."""
        assert directed_dataset.algorithm_parameters("bfs") == {"source_vertex": "1"}
        assert directed_dataset.algorithm_parameters("PR") == {
            "damping_factor": "0.85",
            "num_iterations": "2",
        }
        assert directed_dataset.algorithm_parameters("cdlp") == {"max_iterations": "2"}
        assert directed_dataset.algorithm_parameters("wcc") == {}

    def test_missing_files(self, tmp_path):
        (tmp_path / "empty").mkdir()
        with pytest.raises(FileNotFoundError):
            load_dataset(tmp_path / "empty")

    def test_no_properties_defaults_to_directed(self, tmp_path):
        data_dir = _write_dataset(tmp_path, "plain", "1\n2\n", "1 2\n")
        graph = load_dataset(data_dir).graph
        assert graph.directed
        assert graph.out_neighbors(2).tolist() == []

    def test_vertex_count_mismatch(self, tmp_path):
        data_dir = _write_dataset(
            tmp_path, "bad", "1\n2\n", "1 2\n", "graph.bad.meta.vertices = 3\n"
        )
        with pytest.raises(InvalidGraph, match="vertex count"):
            load_dataset(data_dir)

    def test_edge_count_mismatch(self, tmp_path):
        data_dir = _write_dataset(
            tmp_path, "bad", "1\n2\n", "1 2\n", "graph.bad.meta.edges = 2\n"
        )
        with pytest.raises(InvalidGraph, match="edge count"):
            load_dataset(data_dir)

    def test_unknown_endpoint(self, tmp_path):
        data_dir = _write_dataset(tmp_path, "bad", "1\n2\n", "1 3\n")
        with pytest.raises(InvalidGraph):
            load_dataset(data_dir)

    def test_vertex_id_out_of_range(self, tmp_path):
        """Ids past the signed 64-bit range are malformed records."""
        data_dir = _write_dataset(tmp_path, "big", "1\n9223372036854775808\n", "")
        with pytest.raises(InvalidGraph, match="big.v:2"):
            load_dataset(data_dir)

    def test_edge_endpoint_out_of_range(self, tmp_path):
        data_dir = _write_dataset(tmp_path, "big", "1\n", "1 9223372036854775808\n")
        with pytest.raises(InvalidGraph, match="big.e:1"):
            load_dataset(data_dir)


class TestSchema:
    """Tests for property schema validation."""

    def test_void_schema(self):
        schema = dataset_schema({"graph.g.directed": "false"}, "g")
        assert not schema.directed
        assert schema.vertex_property is None
        assert schema.edge_property is None

    def test_single_real_property(self):
        schema = dataset_schema(
            {
                "graph.g.vertex-properties.names": "score",
                "graph.g.vertex-properties.types": "real",
            },
            "g",
        )
        assert schema.vertex_property == "score"

    def test_two_properties_rejected(self):
        with pytest.raises(InvalidGraph):
            dataset_schema(
                {
                    "graph.g.edge-properties.names": "weight, length",
                    "graph.g.edge-properties.types": "real, real",
                },
                "g",
            )

    def test_non_real_property_rejected(self):
        with pytest.raises(InvalidGraph, match="integer"):
            dataset_schema(
                {
                    "graph.g.edge-properties.names": "weight",
                    "graph.g.edge-properties.types": "integer",
                },
                "g",
            )


class TestFileParsers:
    """Tests for the individual file parsers."""

    def test_properties_comments(self, tmp_path):
        path = tmp_path / "g.properties"
        path.write_text("# comment\n! also comment\n\na = 1\nb=two words\n")
        assert load_properties(path) == {"a": "1", "b": "two words"}

    def test_vertex_file_with_property(self, tmp_path):
        path = tmp_path / "g.v"
        path.write_text("5 0.5\n\n3 1.25\n")
        ids, props = load_vertex_file(path, has_property=True)
        assert ids.tolist() == [5, 3]
        assert props.tolist() == [0.5, 1.25]

    def test_vertex_file_extra_field(self, tmp_path):
        path = tmp_path / "g.v"
        path.write_text("5 0.5\n")
        with pytest.raises(InvalidGraph):
            load_vertex_file(path, has_property=False)

    def test_edge_file_missing_weight(self, tmp_path):
        path = tmp_path / "g.e"
        path.write_text("1 2 0.5\n2 3\n")
        with pytest.raises(InvalidGraph, match=":2"):
            load_edge_file(path, has_property=True)

    def test_edge_file_bad_number(self, tmp_path):
        path = tmp_path / "g.e"
        path.write_text("1 x\n")
        with pytest.raises(InvalidGraph):
            load_edge_file(path)

    def test_reference(self):
        ref = load_reference(os.path.join(DIRECTED_DIR, "example-directed-SSSP"))
        assert ref[2] == "0.5"
        assert ref[7] == "infinity"
        assert len(ref) == 7

    def test_reference_bad_vertex_id(self, tmp_path):
        path = tmp_path / "ref"
        path.write_text("1 0\nx 1\n")
        with pytest.raises(InvalidGraph, match=":2"):
            load_reference(path)

    def test_reference_wrong_field_count(self, tmp_path):
        path = tmp_path / "ref"
        path.write_text("1 0 extra\n")
        with pytest.raises(InvalidGraph):
            load_reference(path)
