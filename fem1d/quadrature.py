"""
Quadrature rules for numerical integration in FEM.
"""

import numpy as np
import numpy.typing as npt
from scipy import integrate


class QuadratureRule:
    """
    Gauss-Legendre quadrature rule on the reference interval [-1, 1].

    An n-point rule integrates polynomials up to degree 2n - 1 exactly.
    """

    # The 3-point rule used for every element order up to cubic
    THREE_POINT = (
        np.array([-0.7745966692414834, 0.0, 0.7745966692414834]),
        np.array([0.5555555555555556, 0.8888888888888888, 0.5555555555555556]),
    )

    def __init__(self, num_points: int = 3):
        """
        Initialize quadrature rule with the given number of points.

        Args:
            num_points: Number of Gauss points (default 3)
        """
        if int(num_points) != num_points or num_points < 1:
            raise ValueError(f"Number of quadrature points must be a positive integer, got {num_points!r}")

        self.num_points = int(num_points)

        if self.num_points == 3:
            self.points, self.weights = (arr.copy() for arr in self.THREE_POINT)
        else:
            self.points, self.weights = np.polynomial.legendre.leggauss(self.num_points)

    @property
    def degree_of_exactness(self) -> int:
        """Highest polynomial degree integrated exactly."""
        return 2 * self.num_points - 1

    def get_points(self) -> npt.NDArray[np.float64]:
        """
        Get quadrature points.

        Returns:
            Array of quadrature points in [-1,1]
        """
        return self.points

    def get_weights(self) -> npt.NDArray[np.float64]:
        """
        Get quadrature weights.

        Returns:
            Array of quadrature weights
        """
        return self.weights

    def __iter__(self):
        return iter(zip(self.points, self.weights))

    def __len__(self) -> int:
        return self.num_points

    def integrate_1d(self, f, a: float = -1.0, b: float = 1.0) -> float:
        """
        Integrate 1D function over [a,b] using this quadrature rule.

        Args:
            f: Function to integrate (vectorised over numpy arrays)
            a: Lower integration bound
            b: Upper integration bound

        Returns:
            Approximated integral value
        """
        # Transform quadrature points from [-1,1] to [a,b]
        transformed_points = 0.5 * (b - a) * self.points + 0.5 * (a + b)

        # Scale weights
        scaled_weights = 0.5 * (b - a) * self.weights

        return float(np.sum(f(transformed_points) * scaled_weights))

    @staticmethod
    def integrate_with_scipy(f, a: float = -1.0, b: float = 1.0, **kwargs) -> float:
        """
        Integrate 1D function using scipy's adaptive quadrature.

        Args:
            f: Function to integrate
            a: Lower integration bound
            b: Upper integration bound
            **kwargs: Additional arguments to pass to scipy.integrate.quad

        Returns:
            Approximated integral value
        """
        result, _ = integrate.quad(f, a, b, **kwargs)
        return result

    def __repr__(self) -> str:
        return f"QuadratureRule(num_points={self.num_points})"
