"""
Finite Element Method (FEM) package for the 1D axial bar problem with Lagrange elements of order 1-3.
"""

from .exceptions import FEMError, InvalidNodeIndex, InvalidProblemVariant
from .shape_functions import LagrangeBasis
from .quadrature import QuadratureRule
from .problem import EndCondition, ProblemConfig, ProblemVariant, make_variant, exact_solution
from .mesh import Mesh
from .element import Element
from .assembly import GlobalSystem, assemble_system
from .boundary import apply_boundary_values, define_boundary_conditions
from .fem_solver import FEMSolver, l2_error
from .utils import convergence_study
