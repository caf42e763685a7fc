"""CPU scalar kernel: vectorised numpy updates on one register chunk.

Operates in-place on ``qureg.real`` / ``qureg.imag``.
Target qubits must be chunk-local (qubit q ↔ bit q of the local index).
Control and phase qubits may be non-local: their bit is fixed for the
whole chunk and read from the chunk id.
"""
from __future__ import annotations

import math

import numpy as np

from quest_engine.kernel.algebra import Complex, ComplexMatrix2


def check_local(qubit: int, chunk_len: int) -> None:
    k = int(math.log2(chunk_len))
    if qubit >= k:
        raise NotImplementedError(
            f"qubit {qubit} >= log2(chunk_size)={k}: non-local gate requires an exchange"
        )


def compact_entries(alpha: Complex, beta: Complex) -> tuple[complex, complex, complex, complex]:
    """Row-major entries of [[alpha, -conj(beta)], [beta, conj(alpha)]]."""
    a = alpha.to_complex()
    b = beta.to_complex()
    return a, -b.conjugate(), b, a.conjugate()


def matrix_entries(m: ComplexMatrix2) -> tuple[complex, complex, complex, complex]:
    return (m.r0c0.to_complex(), m.r0c1.to_complex(),
            m.r1c0.to_complex(), m.r1c1.to_complex())


def pair_indices(N: int, qubit: int) -> tuple[np.ndarray, np.ndarray]:
    """Local indices with bit ``qubit`` = 0, and their partners with the bit set."""
    step = 1 << qubit
    block = step << 1
    base = np.arange(0, N, block)
    off = np.arange(step)
    idx0 = (base[:, None] + off[None, :]).ravel()
    return idx0, idx0 + step


def apply_2x2(qureg, target: int, entries, control: int | None = None) -> None:
    """Apply a 2x2 matrix to every local amplitude pair of ``target``.

    With ``control`` set, only pairs whose control bit is 1 are touched.
    """
    N = len(qureg.real)
    check_local(target, N)
    idx0, idx1 = pair_indices(N, target)
    if control is not None:
        if qureg.is_local(control):
            keep = ((idx0 >> control) & 1) == 1
            idx0, idx1 = idx0[keep], idx1[keep]
        elif not qureg.chunk_bit(control):
            return
    u00, u01, u10, u11 = entries
    a = qureg.real[idx0] + 1j * qureg.imag[idx0]
    b = qureg.real[idx1] + 1j * qureg.imag[idx1]
    r0 = u00 * a + u01 * b
    r1 = u10 * a + u11 * b
    qureg.real[idx0], qureg.imag[idx0] = r0.real, r0.imag
    qureg.real[idx1], qureg.imag[idx1] = r1.real, r1.imag


def phase_shift_by_term(qureg, target: int, term: Complex) -> None:
    """Multiply every amplitude whose ``target`` bit is 1 by ``term``."""
    if qureg.is_local(target):
        idx = np.nonzero((np.arange(len(qureg.real)) >> target) & 1)[0]
    elif qureg.chunk_bit(target):
        idx = slice(None)
    else:
        return
    amp = qureg.real[idx] + 1j * qureg.imag[idx]
    amp = amp * term.to_complex()
    qureg.real[idx], qureg.imag[idx] = amp.real, amp.imag
