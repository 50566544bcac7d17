"""Pytest fixtures shared across all test modules."""

import os

import pytest

from graphref.graph import PropertyGraph
from graphref.loader import load_dataset


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
DIRECTED_DIR = os.path.join(FIXTURES_DIR, "example-directed")
UNDIRECTED_DIR = os.path.join(FIXTURES_DIR, "example-undirected")


@pytest.fixture
def directed_dataset():
    """Weighted directed dataset: 1->2->3->4->1 cycle with a 1->3 shortcut,
    a 5<->6 pair and the isolated vertex 7."""
    return load_dataset(DIRECTED_DIR)


@pytest.fixture
def directed_graph(directed_dataset):
    return directed_dataset.graph


@pytest.fixture
def undirected_dataset():
    """Unweighted undirected dataset: triangle {1,2,3} with tail 3-4, and edge 5-6."""
    return load_dataset(UNDIRECTED_DIR)


@pytest.fixture
def undirected_graph(undirected_dataset):
    return undirected_dataset.graph


@pytest.fixture
def path_graph():
    """Directed path 1 -> 2 -> 3 -> 4."""
    return PropertyGraph([1, 2, 3, 4], [(1, 2), (2, 3), (3, 4)], directed=True)


@pytest.fixture
def two_triangles():
    """Two disjoint undirected triangles {1,2,3} and {10,11,12}."""
    return PropertyGraph(
        [1, 2, 3, 10, 11, 12],
        [(1, 2), (2, 3), (3, 1), (10, 11), (11, 12), (12, 10)],
        directed=False,
    )


@pytest.fixture
def star_graph():
    """Undirected star: center 1 with leaves 2, 3 and 4."""
    return PropertyGraph([1, 2, 3, 4], [(1, 2), (1, 3), (1, 4)], directed=False)


@pytest.fixture
def isolated_vertex():
    """A single vertex with no edges (and no edge properties)."""
    return PropertyGraph([7], [], directed=True)
