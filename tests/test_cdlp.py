"""Unit tests for graphref.cdlp module."""

import pytest

from graphref.cdlp import community_detection_lp
from graphref.errors import InvalidParameter
from graphref.graph import PropertyGraph


class TestCommunityDetectionLP:
    """Tests for community_detection_lp."""

    def test_star_first_round(self, star_graph):
        """Leaves adopt the center's label; the center picks the smallest leaf."""
        assert community_detection_lp(star_graph, 1) == {1: 2, 2: 1, 3: 1, 4: 1}

    def test_star_second_round(self, star_graph):
        """Labels swap between center and leaves on the next round."""
        assert community_detection_lp(star_graph, 2) == {1: 1, 2: 2, 3: 2, 4: 2}

    def test_triangle_converges(self, two_triangles):
        expected = {1: 1, 2: 1, 3: 1, 10: 10, 11: 10, 12: 10}
        assert community_detection_lp(two_triangles, 10) == expected

    def test_fixed_point_is_stable(self, two_triangles):
        """Extra rounds after convergence change nothing."""
        assert community_detection_lp(two_triangles, 3) == community_detection_lp(
            two_triangles, 50
        )

    def test_directed_dataset(self, directed_graph):
        assert community_detection_lp(directed_graph, 2) == {
            1: 1, 2: 1, 3: 1, 4: 1, 5: 5, 6: 6, 7: 7,
        }

    def test_tie_goes_to_smallest_label(self):
        graph = PropertyGraph([3, 7, 100], [(100, 7), (100, 3)], directed=False)
        assert community_detection_lp(graph, 1)[100] == 3

    def test_frequency_beats_smaller_label(self):
        """After round 1 vertex 100 sees labels 70, 70 and 1."""
        graph = PropertyGraph(
            [1, 5, 50, 60, 70, 100],
            [(100, 50), (100, 60), (100, 5), (50, 70), (60, 70), (5, 1)],
            directed=False,
        )
        assert community_detection_lp(graph, 1)[100] == 5
        assert community_detection_lp(graph, 2)[100] == 70

    def test_bidirectional_pair_counted_once(self):
        """1<->3 counts once, so 2 and 3 tie for vertex 1."""
        graph = PropertyGraph([1, 2, 3], [(1, 3), (3, 1), (1, 2)])
        assert community_detection_lp(graph, 1)[1] == 2

    def test_isolated_vertex_keeps_label(self, isolated_vertex):
        assert community_detection_lp(isolated_vertex, 5) == {7: 7}

    def test_zero_iterations(self, star_graph):
        assert community_detection_lp(star_graph, 0) == {1: 1, 2: 2, 3: 3, 4: 4}

    @pytest.mark.parametrize("iterations", [-1, 1.5, "3"])
    def test_invalid_iterations(self, star_graph, iterations):
        with pytest.raises(InvalidParameter):
            community_detection_lp(star_graph, iterations)
