"""In-memory reference simulator (practical up to n ≈ 20, oracle for correctness).

Builds every gate as a dense 2x2 matrix from textbook formulas, independently
of the (alpha, beta) parameterization, and applies it to a single complex128
vector.  Endianness: little-endian (qubit 0 = bit 0 = LSB).

Rotations use  R_n(θ) = cos(θ/2)·I − i·sin(θ/2)·(n·σ).
The *_CONJ variants apply the element-wise complex conjugate of the matrix.
"""
from __future__ import annotations

import numpy as np

from quest_engine.circuit.io import validate_circuit_dict

I2 = np.eye(2, dtype=np.complex128)
PAULI_X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
PAULI_Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
PAULI_Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)

_AXES = {"X": (1.0, 0.0, 0.0), "Y": (0.0, 1.0, 0.0), "Z": (0.0, 0.0, 1.0)}


def rotation_matrix(theta: float, axis) -> np.ndarray:
    n = np.asarray(axis, dtype=np.float64)
    n = n / np.linalg.norm(n)
    n_sigma = n[0] * PAULI_X + n[1] * PAULI_Y + n[2] * PAULI_Z
    return np.cos(theta / 2) * I2 - 1j * np.sin(theta / 2) * n_sigma


def phase_matrix(phi: float) -> np.ndarray:
    return np.array([[1, 0], [0, np.exp(1j * phi)]], dtype=np.complex128)


_FIXED_PHASE = {
    "Z":   PAULI_Z,
    "S":   phase_matrix(np.pi / 2),
    "T":   phase_matrix(np.pi / 4),
    "SDG": phase_matrix(-np.pi / 2),
    "TDG": phase_matrix(-np.pi / 4),
}


def gate_matrix(name: str, params: dict) -> np.ndarray:
    """2x2 matrix acting on the target qubit of a (validated) gate entry."""
    if name in _FIXED_PHASE:
        return _FIXED_PHASE[name]
    if name == "P":
        return phase_matrix(params["angle"])
    base = name[1:] if name.startswith("C") and name != "CU" else name
    if base in ("RX", "RY", "RZ"):
        return rotation_matrix(params["angle"], _AXES[base[1]])
    if base in ("ROT", "ROT_CONJ"):
        ax = params["axis"]
        U = rotation_matrix(params["angle"], (ax.x, ax.y, ax.z))
        return U.conj() if base == "ROT_CONJ" else U
    if name in ("U", "CU"):
        a = params["alpha"].to_complex()
        b = params["beta"].to_complex()
        return np.array([[a, -np.conj(b)], [b, np.conj(a)]], dtype=np.complex128)
    if name in ("MAT", "MAT_CONJ"):
        U = params["matrix"].to_array()
        return U.conj() if name == "MAT_CONJ" else U
    raise ValueError(f"unknown gate {name}")


def _apply_1q(psi: np.ndarray, q: int, U: np.ndarray, control: int | None = None) -> None:
    N = len(psi)
    step = 1 << q
    block = step << 1
    base = np.arange(0, N, block)
    off = np.arange(step)
    idx0 = (base[:, None] + off[None, :]).ravel()
    if control is not None:
        idx0 = idx0[((idx0 >> control) & 1) == 1]
    idx1 = idx0 + step
    a, b = psi[idx0].copy(), psi[idx1].copy()
    psi[idx0] = U[0, 0] * a + U[0, 1] * b
    psi[idx1] = U[1, 0] * a + U[1, 1] * b


def simulate(circuit_dict: dict, initial: np.ndarray | None = None) -> np.ndarray:
    """Run circuit, return final state vector (complex128).  Starts in |0…0⟩."""
    cd = validate_circuit_dict(circuit_dict)
    n = cd["number_of_qubits"]
    if initial is None:
        psi = np.zeros(1 << n, dtype=np.complex128)
        psi[0] = 1.0
    else:
        psi = np.array(initial, dtype=np.complex128)
    for g in cd["gates"]:
        U = gate_matrix(g["gate"], g["params"])
        qubits = g["qubits"]
        if len(qubits) == 1:
            _apply_1q(psi, qubits[0], U)
        else:
            _apply_1q(psi, qubits[1], U, control=qubits[0])
    return psi
