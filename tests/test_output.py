"""Unit tests for graphref.output module."""

import math
import os

import pytest

from graphref.bfs import breadth_first_search
from graphref.config import UNREACHABLE_DISTANCE
from graphref.output import format_value, write_output
from graphref.sssp import single_source_shortest_paths


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
DIRECTED_DIR = os.path.join(FIXTURES_DIR, "example-directed")


class TestFormatValue:
    """Tests for format_value."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (3, "3"),
            (UNREACHABLE_DISTANCE, "9223372036854775807"),
            (0.5, "0.5"),
            (3.0, "3.0"),
            (1 / 3, "0.3333333333333333"),
            (math.inf, "infinity"),
            (-math.inf, "-infinity"),
            (math.nan, "nan"),
        ],
    )
    def test_values(self, value, expected):
        assert format_value(value) == expected


class TestWriteOutput:
    """Tests for write_output."""

    def test_sorted_by_vertex_id(self, tmp_path):
        path = tmp_path / "out.txt"
        count = write_output(path, {10: 1, 2: 5, 7: 3})
        assert count == 3
        assert path.read_text() == "2 5\n7 3\n10 1\n"

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "out.txt"
        write_output(path, {1: 0.25})
        assert path.read_text() == "1 0.25\n"

    def test_empty_result(self, tmp_path):
        path = tmp_path / "out.txt"
        assert write_output(path, {}) == 0
        assert path.read_text() == ""

    @pytest.mark.parametrize(
        "name, engine",
        [("BFS", breadth_first_search), ("SSSP", single_source_shortest_paths)],
    )
    def test_matches_reference_files(self, tmp_path, directed_graph, name, engine):
        """Output is byte-identical to the reference files in the fixtures."""
        path = tmp_path / name
        write_output(path, engine(directed_graph, 1))
        with open(f"{DIRECTED_DIR}/example-directed-{name}", encoding="utf-8") as f:
            assert path.read_text() == f.read()
