"""Tests for element stiffness matrices and load vectors."""

import numpy as np
import pytest

from fem1d import Element, LagrangeBasis, ProblemConfig, QuadratureRule, make_variant


def make_element(order, num_points=3):
    return Element(LagrangeBasis(order), QuadratureRule(num_points))


def element_nodes(left, right, order):
    """Element node coordinates in local order (endpoints, then interior)."""
    interior = [left + k * (right - left) / order for k in range(1, order)]
    return np.array([left, right] + interior)


class TestStiffness:
    """Test element stiffness matrices."""

    def test_linear(self):
        """K = 1/h [[1, -1], [-1, 1]]."""
        h = 0.05
        K = make_element(1).stiffness_matrix(element_nodes(0.0, h, 1))
        assert np.allclose(K, 1.0 / h * np.array([[1, -1], [-1, 1]]))

    def test_quadratic(self):
        """Standard quadratic stiffness in (left, right, middle) ordering."""
        h = 0.2
        K = make_element(2).stiffness_matrix(element_nodes(0.3, 0.3 + h, 2))
        expected = 1.0 / (3.0 * h) * np.array([[7, 1, -8], [1, 7, -8], [-8, -8, 16]])
        assert np.allclose(K, expected)

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_symmetric_with_zero_row_sums(self, order):
        """Symmetric, and constants are in the kernel."""
        K = make_element(order).stiffness_matrix(element_nodes(0.1, 0.4, order))
        assert np.allclose(K, K.T)
        assert np.allclose(K.sum(axis=1), 0.0, atol=1e-10)

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_scales_with_inverse_length(self, order):
        element = make_element(order)
        K1 = element.stiffness_matrix(element_nodes(0.0, 1.0, order))
        K2 = element.stiffness_matrix(element_nodes(0.0, 0.5, order))
        assert np.allclose(K2, 2.0 * K1)

    def test_rule_size_agnostic(self):
        """More Gauss points give the same (exactly integrated) matrix."""
        node_x = element_nodes(0.0, 0.1, 3)
        assert np.allclose(
            make_element(3, 3).stiffness_matrix(node_x),
            make_element(3, 5).stiffness_matrix(node_x),
        )

    def test_length_from_endpoints(self):
        """Interior nodes do not enter the element length."""
        element = make_element(3)
        assert element.element_length(np.array([0.0, 0.3, 0.1, 0.2])) == pytest.approx(0.3)

    def test_degenerate_element(self):
        with pytest.raises(ValueError):
            make_element(1).stiffness_matrix(np.array([0.1, 0.0]))


class TestLoadVector:
    """Test element load vectors."""

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_constant_source_total(self, order):
        """Entries of a unit-source load vector sum to the element length."""
        f = make_element(order).load_vector(element_nodes(0.2, 0.5, order), lambda x: 1.0)
        assert np.isclose(f.sum(), 0.3)

    def test_linear_source_linear_element(self):
        """For s(x) = x on [0, h]: F = [h^2/6, h^2/3]."""
        h = 0.05
        f = make_element(1).load_vector(element_nodes(0.0, h, 1), lambda x: x)
        assert np.allclose(f, [h**2 / 6, h**2 / 3])

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_linear_source_total(self, order):
        """Sum of entries is the integral of s over the element."""
        f = make_element(order).load_vector(element_nodes(0.02, 0.07, order), lambda x: x)
        assert np.isclose(f.sum(), (0.07**2 - 0.02**2) / 2)


class TestLocalSystem:
    """Test variant-specific element contributions."""

    def test_flux_added_at_far_boundary(self, flux_config):
        element = make_element(2)
        variant = make_variant(flux_config)
        node_x = element_nodes(0.05, 0.1, 2)
        k_inner, f_inner = element.local_system(node_x, variant, on_far_boundary=False)
        k_end, f_end = element.local_system(node_x, variant, on_far_boundary=True)
        assert np.allclose(k_inner, k_end)
        assert np.allclose(f_end - f_inner, [0.0, flux_config.flux, 0.0])

    def test_no_flux_for_dirichlet_variant(self, dirichlet_config):
        element = make_element(1)
        variant = make_variant(dirichlet_config)
        node_x = element_nodes(0.05, 0.1, 1)
        _, f_inner = element.local_system(node_x, variant, on_far_boundary=False)
        _, f_end = element.local_system(node_x, variant, on_far_boundary=True)
        assert np.allclose(f_inner, f_end)

    def test_uses_variant_forcing(self):
        config = ProblemConfig(body_force=3e11)
        element = make_element(1)
        _, f = element.local_system(element_nodes(0.0, 0.05, 1), make_variant(config))
        assert np.allclose(f, 3.0 * np.array([0.05**2 / 6, 0.05**2 / 3]))
