"""
Problem definitions for the axial bar E u'' + f x = 0 on (0, L).

Two variants are supported:

1. u(0) = g1, u(L) = g2 (Dirichlet at both ends)
2. u(0) = g1, u'(L) = h  (Dirichlet at the left end, flux at the right end)

The weak form is divided through by the modulus E, so the stiffness integral
carries no material constant and the source term is (f / E) x.
The flux h is added to the load unscaled, so the variant 2 reference solution
u = -(f / E) x^3 / 6 + (h + (f / E) L^2 / 2) x + g1 is the exact solution of
this normalised weak form.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

from .exceptions import InvalidProblemVariant


class EndCondition(str, Enum):
    """Kind of condition imposed at the right end of the bar."""

    DIRICHLET = "dirichlet"
    NEUMANN = "neumann"


@dataclass(frozen=True)
class ProblemConfig:
    """
    Physical and boundary data of a run.

    Attributes:
        length: Length L of the bar
        modulus: Young's modulus E
        body_force: Coefficient f of the linear body force f x
        flux: Prescribed flux h = u'(L) (variant 2)
        g1: Prescribed displacement at x = 0
        g2: Prescribed displacement at x = L (variant 1)
        problem: Problem variant, 1 or 2
    """

    length: float = 0.1
    modulus: float = 1e11
    body_force: float = 1e11
    flux: float = 1e10
    g1: float = 0.0
    g2: float = 0.001
    problem: int = 1

    def __post_init__(self):
        if self.problem not in VARIANTS:
            raise InvalidProblemVariant(self.problem)
        if not self.length > 0:
            raise ValueError(f"Bar length must be positive, got {self.length}")
        if not self.modulus > 0:
            raise ValueError(f"Modulus must be positive, got {self.modulus}")

    @property
    def forcing_ratio(self) -> float:
        """Body-force coefficient normalised by the modulus, f / E."""
        return self.body_force / self.modulus

    def with_overrides(self, **kwargs) -> "ProblemConfig":
        """Return a copy with the given fields replaced; ``None`` values are ignored."""
        changes = {key: value for key, value in kwargs.items() if value is not None}
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ProblemVariant:
    """
    Everything the assembler and boundary applier need to know about a variant.

    Attributes:
        number: Variant number (1 or 2)
        left_value: Prescribed displacement at x = 0
        right_end: Kind of condition at x = L
        right_value: Displacement (Dirichlet) or flux (Neumann) at x = L
        forcing: Source term s(x) of the normalised weak form
        exact: Closed-form solution u(x)
    """

    number: int
    left_value: float
    right_end: EndCondition
    right_value: float
    forcing: Callable
    exact: Callable

    @property
    def has_flux_end(self) -> bool:
        return self.right_end is EndCondition.NEUMANN

    @property
    def description(self) -> str:
        if self.has_flux_end:
            return f"u(0) = {self.left_value:g}, u'(L) = {self.right_value:g}"
        return f"u(0) = {self.left_value:g}, u(L) = {self.right_value:g}"


def _linear_forcing(config: ProblemConfig) -> Callable:
    ratio = config.forcing_ratio

    def forcing(x):
        return ratio * x

    return forcing


def _dirichlet_variant(config: ProblemConfig) -> ProblemVariant:
    L, E, f = config.length, config.modulus, config.body_force
    g1, g2 = config.g1, config.g2

    def exact(x):
        return -x**3 * f / (6.0 * E) + (g2 - g1 + L**3 * f / (6.0 * E)) / L * x + g1

    return ProblemVariant(
        number=1,
        left_value=g1,
        right_end=EndCondition.DIRICHLET,
        right_value=g2,
        forcing=_linear_forcing(config),
        exact=exact,
    )


def _flux_variant(config: ProblemConfig) -> ProblemVariant:
    L, h, g1 = config.length, config.flux, config.g1
    ratio = config.forcing_ratio

    def exact(x):
        return -ratio * x**3 / 6.0 + (h + 0.5 * ratio * L**2) * x + g1

    return ProblemVariant(
        number=2,
        left_value=g1,
        right_end=EndCondition.NEUMANN,
        right_value=h,
        forcing=_linear_forcing(config),
        exact=exact,
    )


VARIANTS: Dict[int, Callable[[ProblemConfig], ProblemVariant]] = {
    1: _dirichlet_variant,
    2: _flux_variant,
}


def make_variant(config: ProblemConfig) -> ProblemVariant:
    """
    Build the variant descriptor selected by ``config.problem``.

    Raises:
        InvalidProblemVariant: if the variant is not 1 or 2
    """
    try:
        builder = VARIANTS[config.problem]
    except (KeyError, TypeError):
        raise InvalidProblemVariant(config.problem) from None
    return builder(config)


def exact_solution(config: ProblemConfig) -> Callable:
    """Closed-form displacement of the selected variant, vectorised over numpy arrays."""
    return make_variant(config).exact
