"""
beachballs package: moment tensor geometry for earthquake beachballs.

This package exposes:

- Vector algebra:
    - Vector
- Matrices and the Jacobi eigensolver:
    - Matrix
    - Eigenvector
    - jacobi
- Moment tensor decomposition:
    - MomentTensor
    - PrincipalAxis
    - NodalPlane
    - Tensor
    - decompose
- Product parsing:
    - moment_tensor_from_product
    - tensor_from_product
    - product_title
- Errors:
    - BeachBallError
    - ShapeError
    - DegenerateVectorError
    - ConvergenceError
    - TensorInputError
"""

from .errors import (
    BeachBallError,
    ConvergenceError,
    DegenerateVectorError,
    ShapeError,
    TensorInputError,
)
from .vector import Vector
from .matrix import Eigenvector, Matrix, jacobi
from .tensor import MomentTensor, NodalPlane, PrincipalAxis, Tensor, decompose
from .product import moment_tensor_from_product, product_title, tensor_from_product

__all__ = [
    # Geometry
    "Vector",
    "Matrix",
    "Eigenvector",
    "jacobi",
    # Decomposition
    "MomentTensor",
    "PrincipalAxis",
    "NodalPlane",
    "Tensor",
    "decompose",
    # Products
    "moment_tensor_from_product",
    "tensor_from_product",
    "product_title",
    # Errors
    "BeachBallError",
    "ShapeError",
    "DegenerateVectorError",
    "ConvergenceError",
    "TensorInputError",
]
