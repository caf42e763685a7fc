"""Gate parameterization: rotations → (alpha, beta), phase gates → term.

Convention:
  A compact unitary is the SU(2) element

      [ alpha   -conj(beta) ]
      [ beta     conj(alpha) ]

  acting on the amplitude pair (target bit 0, target bit 1).
  A phase gate multiplies every amplitude whose target bit is 1 by a
  unit-modulus complex ``term``.
"""
from __future__ import annotations

import numpy as np

from quest_engine.kernel.algebra import Complex, ComplexMatrix2, Vector, unit_vector

_S2 = 1.0 / np.sqrt(2.0)

X_AXIS = Vector(1, 0, 0)
Y_AXIS = Vector(0, 1, 0)
Z_AXIS = Vector(0, 0, 1)


# ── rotations ───────────────────────────────────────────────────────
def get_alpha_beta_from_rotation(angle: float, axis: Vector) -> tuple[Complex, Complex]:
    """Return (alpha, beta) for a rotation of ``angle`` radians about ``axis``.

    The axis is normalised first.  A zero-length axis is not rejected here:
    the resulting NaNs propagate to the caller.
    """
    n = unit_vector(axis)
    c = np.cos(angle / 2.0)
    s = np.sin(angle / 2.0)
    alpha = Complex(c, -s * n.z)
    beta = Complex(s * n.y, -s * n.x)
    return alpha, beta


def conjugate_alpha_beta(alpha: Complex, beta: Complex) -> tuple[Complex, Complex]:
    """Parameters for the ``*_conj`` gate variants: negate both imaginary parts.

    Applied after the forward derivation; the resulting matrix is the
    element-wise complex conjugate of the forward one.
    """
    return Complex(alpha.real, -alpha.imag), Complex(beta.real, -beta.imag)


def is_compact_unitary(alpha: Complex, beta: Complex, eps: float = 1e-10) -> bool:
    norm = (alpha.real * alpha.real + alpha.imag * alpha.imag
            + beta.real * beta.real + beta.imag * beta.imag)
    return abs(norm - 1.0) < eps


# ── phase gates ─────────────────────────────────────────────────────
def phase_shift_term(angle: float) -> Complex:
    return Complex(np.cos(angle), np.sin(angle))


PHASE_TERMS: dict[str, Complex] = {
    "Z":   Complex(-1.0, 0.0),
    "S":   Complex(0.0, 1.0),
    "T":   Complex(_S2, _S2),
    "SDG": Complex(0.0, -1.0),
    "TDG": Complex(_S2, -_S2),
}


# ── dense matrices (reference / oracle use) ─────────────────────────
def compact_unitary_matrix(alpha: Complex, beta: Complex) -> np.ndarray:
    a = alpha.to_complex()
    b = beta.to_complex()
    return np.array([[a, -b.conjugate()], [b, a.conjugate()]], dtype=np.complex128)


def phase_matrix(term: Complex) -> np.ndarray:
    return np.array([[1, 0], [0, term.to_complex()]], dtype=np.complex128)


def is_unitary_matrix(matrix: ComplexMatrix2, eps: float = 1e-10) -> bool:
    U = matrix.to_array()
    return bool(np.allclose(U @ U.conj().T, np.eye(2), atol=eps, rtol=0))


def matrix2(U) -> ComplexMatrix2:
    """Accept a ComplexMatrix2 or anything array-like of shape (2, 2)."""
    if isinstance(U, ComplexMatrix2):
        return U
    return ComplexMatrix2.from_array(U)
