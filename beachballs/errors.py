"""
Exception types raised by the beachball geometry engine.

Each error also derives from the builtin exception that callers would
expect for the situation (``ValueError`` for bad input, ``RuntimeError``
for a numerical failure), so existing ``except ValueError`` handlers keep
working.
"""

from __future__ import annotations

from typing import Optional


class BeachBallError(Exception):
    """Base class for all engine errors."""


class ShapeError(BeachBallError, ValueError):
    """Vector length or matrix dimension mismatch."""


class DegenerateVectorError(BeachBallError, ValueError):
    """A zero vector was given where a direction is required."""


class TensorInputError(BeachBallError, ValueError):
    """Malformed moment tensor components or product properties."""


class ConvergenceError(BeachBallError, RuntimeError):
    """
    The Jacobi eigensolver did not converge within its rotation budget.

    Attributes
    ----------
    rotations : int
        Number of rotations performed before giving up.
    max_rotations : int
        The rotation budget that was exceeded.
    """

    def __init__(self, message: str, rotations: Optional[int] = None,
                 max_rotations: Optional[int] = None):
        super().__init__(message)
        self.rotations = rotations
        self.max_rotations = max_rotations
