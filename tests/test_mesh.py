"""Tests for 1D mesh generation, numbering and boundary tags."""

import numpy as np
import pytest

from fem1d import Mesh


class TestUniformMesh:
    """Test node coordinates and connectivity of uniform meshes."""

    def test_linear_two_elements(self):
        mesh = Mesh(0.0, 0.1, 2, order=1)
        assert mesh.num_nodes == 3
        assert np.allclose(mesh.coordinates, [0.0, 0.05, 0.1])
        assert mesh.connectivity.tolist() == [[0, 1], [1, 2]]

    def test_quadratic_numbering(self):
        """Endpoints first, interior nodes after."""
        mesh = Mesh(0.0, 0.1, 2, order=2)
        assert mesh.num_nodes == 5
        assert np.allclose(mesh.coordinates, [0.0, 0.025, 0.05, 0.075, 0.1])
        assert mesh.connectivity.tolist() == [[0, 2, 1], [2, 4, 3]]

    def test_cubic_single_element(self):
        mesh = Mesh(0.0, 0.1, 1, order=3)
        assert np.allclose(mesh.coordinates, [0.0, 0.1 / 3, 0.2 / 3, 0.1])
        assert mesh.connectivity.tolist() == [[0, 3, 1, 2]]

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_coordinates_non_decreasing(self, order):
        mesh = Mesh(0.0, 0.1, 7, order=order)
        assert mesh.num_nodes == 7 * order + 1
        assert np.all(np.diff(mesh.coordinates) > 0)

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_element_coordinates_match_reference_layout(self, order):
        """Local slot k >= 2 sits at xi = -1 + 2(k-1)/p."""
        mesh = Mesh(0.0, 1.0, 3, order=order)
        for e in range(mesh.num_elements):
            node_x = mesh.get_element_coordinates(e)
            left, right = node_x[0], node_x[1]
            for k in range(2, order + 1):
                xi = -1.0 + 2.0 * (k - 1) / order
                assert np.isclose(node_x[k], left + (xi + 1) / 2 * (right - left))

    def test_boundary_tags(self):
        mesh = Mesh(0.0, 0.1, 4, order=2)
        assert mesh.left_nodes == [0]
        assert mesh.right_nodes == [mesh.num_nodes - 1]
        assert mesh.boundary_nodes == [0, mesh.num_nodes - 1]

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            Mesh(0.0, 0.1, 0)
        with pytest.raises(ValueError):
            Mesh(0.1, 0.0, 2)


class TestNonUniformMesh:
    """Test meshes built from explicit vertices."""

    def test_from_vertices(self):
        mesh = Mesh.from_vertices([0.0, 0.01, 0.04, 0.1], order=2)
        assert mesh.num_elements == 3
        assert np.isclose(mesh.dx, 0.06)
        assert np.allclose(mesh.get_element_coordinates(1), [0.01, 0.04, 0.025])

    def test_perturbed_endpoint_still_tagged(self):
        """Boundary detection tolerates round-off in the end coordinate."""
        vertices = np.cumsum([0.0] + [0.1 / 3] * 3)
        mesh = Mesh.from_vertices(vertices, order=1)
        assert mesh.right_nodes == [3]

    def test_tag_with_tolerance(self):
        mesh = Mesh(0.0, 0.1, 2)
        mesh.coordinates[-1] = 0.1 + 1e-16
        assert mesh._find_nodes_at(0.1) == [2]

    def test_rejects_unsorted_vertices(self):
        with pytest.raises(ValueError):
            Mesh.from_vertices([0.0, 0.05, 0.03, 0.1])

    def test_sorted_segments(self):
        mesh = Mesh(0.0, 0.1, 2, order=2)
        points, segments = mesh.sorted_segments()
        assert points.shape == (5, 3)
        assert segments.tolist() == [[0, 1], [1, 2], [2, 3], [3, 4]]

    def test_rejects_endpoint_outside_tag_tolerance(self):
        """Every accepted mesh has its end vertices tagged as boundary nodes."""
        with pytest.raises(ValueError):
            Mesh(0.0, 0.1, 2, order=1, vertices=[5e-9, 0.05, 0.1])
        with pytest.raises(ValueError):
            Mesh(0.0, 0.1, 2, order=1, vertices=[0.0, 0.05, 0.1 - 5e-9])

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_accepted_vertices_tagged(self, order):
        mesh = Mesh(0.0, 0.1, 2, order=order, vertices=[1e-15, 0.05, 0.1 - 1e-15])
        assert mesh.left_nodes == [0]
        assert mesh.right_nodes == [mesh.num_nodes - 1]
