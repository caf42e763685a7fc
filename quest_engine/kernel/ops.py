"""Named gates.

Each gate is a free function that combines a fixed constant (an axis or a
phase term) with the parameterization in ``gates`` and makes one call into
the kernel entry points in ``statevec``.  Nothing here reads or writes
amplitudes.
"""
from __future__ import annotations

from quest_engine.kernel import statevec
from quest_engine.kernel.algebra import Complex, Vector, conjugate_matrix
from quest_engine.kernel.gates import (
    PHASE_TERMS, X_AXIS, Y_AXIS, Z_AXIS,
    conjugate_alpha_beta, get_alpha_beta_from_rotation, is_compact_unitary,
    is_unitary_matrix, matrix2, phase_shift_term,
)


# ── rotations about an arbitrary axis ───────────────────────────────
def rotate_around_axis(qureg, qubit: int, angle: float, axis: Vector) -> None:
    alpha, beta = get_alpha_beta_from_rotation(angle, axis)
    statevec.compact_unitary(qureg, qubit, alpha, beta)


def rotate_around_axis_conj(qureg, qubit: int, angle: float, axis: Vector) -> None:
    alpha, beta = get_alpha_beta_from_rotation(angle, axis)
    alpha, beta = conjugate_alpha_beta(alpha, beta)
    statevec.compact_unitary(qureg, qubit, alpha, beta)


def controlled_rotate_around_axis(qureg, control: int, target: int,
                                  angle: float, axis: Vector) -> None:
    alpha, beta = get_alpha_beta_from_rotation(angle, axis)
    statevec.controlled_compact_unitary(qureg, control, target, alpha, beta)


def controlled_rotate_around_axis_conj(qureg, control: int, target: int,
                                       angle: float, axis: Vector) -> None:
    alpha, beta = get_alpha_beta_from_rotation(angle, axis)
    alpha, beta = conjugate_alpha_beta(alpha, beta)
    statevec.controlled_compact_unitary(qureg, control, target, alpha, beta)


# ── fixed-axis rotations ────────────────────────────────────────────
def rotate_x(qureg, qubit: int, angle: float) -> None:
    rotate_around_axis(qureg, qubit, angle, X_AXIS)


def rotate_y(qureg, qubit: int, angle: float) -> None:
    rotate_around_axis(qureg, qubit, angle, Y_AXIS)


def rotate_z(qureg, qubit: int, angle: float) -> None:
    rotate_around_axis(qureg, qubit, angle, Z_AXIS)


def controlled_rotate_x(qureg, control: int, target: int, angle: float) -> None:
    controlled_rotate_around_axis(qureg, control, target, angle, X_AXIS)


def controlled_rotate_y(qureg, control: int, target: int, angle: float) -> None:
    controlled_rotate_around_axis(qureg, control, target, angle, Y_AXIS)


def controlled_rotate_z(qureg, control: int, target: int, angle: float) -> None:
    controlled_rotate_around_axis(qureg, control, target, angle, Z_AXIS)


# ── phase gates ─────────────────────────────────────────────────────
def phase_shift(qureg, qubit: int, angle: float) -> None:
    statevec.phase_shift_by_term(qureg, qubit, phase_shift_term(angle))


def sigma_z(qureg, qubit: int) -> None:
    statevec.phase_shift_by_term(qureg, qubit, PHASE_TERMS["Z"])


def s_gate(qureg, qubit: int) -> None:
    statevec.phase_shift_by_term(qureg, qubit, PHASE_TERMS["S"])


def t_gate(qureg, qubit: int) -> None:
    statevec.phase_shift_by_term(qureg, qubit, PHASE_TERMS["T"])


def s_gate_conj(qureg, qubit: int) -> None:
    statevec.phase_shift_by_term(qureg, qubit, PHASE_TERMS["SDG"])


def t_gate_conj(qureg, qubit: int) -> None:
    statevec.phase_shift_by_term(qureg, qubit, PHASE_TERMS["TDG"])


# ── explicit unitaries (validated) ──────────────────────────────────
def compact_unitary(qureg, qubit: int, alpha: Complex, beta: Complex) -> None:
    if not is_compact_unitary(alpha, beta):
        raise ValueError("|alpha|^2 + |beta|^2 must be 1")
    statevec.compact_unitary(qureg, qubit, alpha, beta)


def controlled_compact_unitary(qureg, control: int, target: int,
                               alpha: Complex, beta: Complex) -> None:
    if not is_compact_unitary(alpha, beta):
        raise ValueError("|alpha|^2 + |beta|^2 must be 1")
    if control == target:
        raise ValueError("control and target qubits must differ")
    statevec.controlled_compact_unitary(qureg, control, target, alpha, beta)


def unitary(qureg, qubit: int, matrix) -> None:
    m = matrix2(matrix)
    if not is_unitary_matrix(m):
        raise ValueError("matrix is not unitary")
    statevec.unitary(qureg, qubit, m)


def unitary_conj(qureg, qubit: int, matrix) -> None:
    m = matrix2(matrix)
    if not is_unitary_matrix(m):
        raise ValueError("matrix is not unitary")
    statevec.unitary(qureg, qubit, conjugate_matrix(m))


# ── circuit-entry dispatcher ────────────────────────────────────────
_PHASE = {"Z": sigma_z, "S": s_gate, "T": t_gate, "SDG": s_gate_conj, "TDG": t_gate_conj}
_ROT_1Q = {"RX": rotate_x, "RY": rotate_y, "RZ": rotate_z}
_ROT_2Q = {"CRX": controlled_rotate_x, "CRY": controlled_rotate_y, "CRZ": controlled_rotate_z}
_AXIS_1Q = {"ROT": rotate_around_axis, "ROT_CONJ": rotate_around_axis_conj}
_AXIS_2Q = {"CROT": controlled_rotate_around_axis, "CROT_CONJ": controlled_rotate_around_axis_conj}


def apply_gate(qureg, gate: dict) -> None:
    """Apply one validated circuit entry (see ``circuit.io``) to a register chunk."""
    name, qs, p = gate["gate"], gate["qubits"], gate["params"]
    if name in _PHASE:
        _PHASE[name](qureg, qs[0])
    elif name == "P":
        phase_shift(qureg, qs[0], p["angle"])
    elif name in _ROT_1Q:
        _ROT_1Q[name](qureg, qs[0], p["angle"])
    elif name in _ROT_2Q:
        _ROT_2Q[name](qureg, qs[0], qs[1], p["angle"])
    elif name in _AXIS_1Q:
        _AXIS_1Q[name](qureg, qs[0], p["angle"], p["axis"])
    elif name in _AXIS_2Q:
        _AXIS_2Q[name](qureg, qs[0], qs[1], p["angle"], p["axis"])
    elif name == "U":
        compact_unitary(qureg, qs[0], p["alpha"], p["beta"])
    elif name == "CU":
        controlled_compact_unitary(qureg, qs[0], qs[1], p["alpha"], p["beta"])
    elif name == "MAT":
        unitary(qureg, qs[0], p["matrix"])
    elif name == "MAT_CONJ":
        unitary_conj(qureg, qs[0], p["matrix"])
    else:
        raise ValueError(f"unknown gate {name}")
