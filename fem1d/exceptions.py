"""
Exceptions raised by the 1D FEM package.
"""


class FEMError(ValueError):
    """Base class for configuration and indexing errors in the FEM package."""


class InvalidProblemVariant(FEMError):
    """Raised when a problem variant other than 1 or 2 is requested."""

    def __init__(self, problem):
        self.problem = problem
        super().__init__(f"Error: problem number should be 1 or 2, got {problem!r}")


class InvalidNodeIndex(FEMError):
    """Raised when a basis function is requested for a node the element does not have."""

    def __init__(self, node, order):
        self.node = node
        self.order = order
        super().__init__(
            f"Error: you input node number {node} but there are only "
            f"{order + 1} nodes in an element."
        )
