"""Vector and complex value types used by the gate parameterization.

All values are immutable; conjugation and normalisation return new objects.
Components are numpy float64 scalars so that degenerate input (a zero-length
axis) propagates NaN/inf instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Complex:
    real: float
    imag: float

    @classmethod
    def from_complex(cls, z: complex) -> "Complex":
        return cls(float(z.real), float(z.imag))

    def to_complex(self) -> complex:
        return complex(self.real, self.imag)


@dataclass(frozen=True)
class Vector:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class ComplexMatrix2:
    """2x2 complex matrix, row-major entries."""
    r0c0: Complex
    r0c1: Complex
    r1c0: Complex
    r1c1: Complex

    @classmethod
    def from_array(cls, U) -> "ComplexMatrix2":
        U = np.asarray(U, dtype=np.complex128)
        if U.shape != (2, 2):
            raise ValueError(f"expected a 2x2 matrix, got shape {U.shape}")
        return cls(
            Complex.from_complex(U[0, 0]), Complex.from_complex(U[0, 1]),
            Complex.from_complex(U[1, 0]), Complex.from_complex(U[1, 1]),
        )

    def to_array(self) -> np.ndarray:
        return np.array(
            [[self.r0c0.to_complex(), self.r0c1.to_complex()],
             [self.r1c0.to_complex(), self.r1c1.to_complex()]],
            dtype=np.complex128,
        )


def magnitude(vec: Vector) -> np.float64:
    x, y, z = np.float64(vec.x), np.float64(vec.y), np.float64(vec.z)
    return np.sqrt(x * x + y * y + z * z)


def unit_vector(vec: Vector) -> Vector:
    """Scale ``vec`` to unit length.  A zero vector gives non-finite components."""
    mag = magnitude(vec)
    with np.errstate(divide="ignore", invalid="ignore"):
        return Vector(
            np.float64(vec.x) / mag,
            np.float64(vec.y) / mag,
            np.float64(vec.z) / mag,
        )


def conjugate(scalar: Complex) -> Complex:
    return Complex(scalar.real, -scalar.imag)


def conjugate_matrix(matrix: ComplexMatrix2) -> ComplexMatrix2:
    return ComplexMatrix2(
        conjugate(matrix.r0c0),
        conjugate(matrix.r0c1),
        conjugate(matrix.r1c0),
        conjugate(matrix.r1c1),
    )
