"""Kernel entry points: route each update to the local or distributed kernel.

These are the only functions the gate dispatch layer calls.  A gate whose
target qubit is local runs entirely in ``cpu_scalar``; otherwise the chunk
is exchanged with its partner through ``qureg.env`` and ``cpu_nonlocal``
updates this chunk's half of each pair.
"""
from __future__ import annotations

from quest_engine.kernel import cpu_nonlocal, cpu_scalar
from quest_engine.kernel.algebra import Complex, ComplexMatrix2


def _exchange(qureg, target: int) -> None:
    k = qureg.num_local_qubits
    if qureg.env is None:
        raise NotImplementedError(
            f"qubit {target} >= log2(chunk_size)={k}: non-local gate requires an exchange env"
        )
    pair_rank = qureg.chunk_id ^ (1 << (target - k))
    qureg.env.exchange(qureg, pair_rank)


def _apply(qureg, target: int, entries, control: int | None = None) -> None:
    if control == target:
        raise ValueError("control and target qubits must differ")
    if qureg.is_local(target):
        cpu_scalar.apply_2x2(qureg, target, entries, control=control)
        return
    if control is not None and not qureg.is_local(control):
        # partner chunk shares the control bit, so both sides skip together
        if not qureg.chunk_bit(control):
            return
        control = None
    _exchange(qureg, target)
    upper = qureg.chunk_bit(target) == 0
    cpu_nonlocal.apply_2x2_half(qureg, entries, upper, control=control)


def compact_unitary(qureg, target: int, alpha: Complex, beta: Complex) -> None:
    _apply(qureg, target, cpu_scalar.compact_entries(alpha, beta))


def controlled_compact_unitary(qureg, control: int, target: int,
                               alpha: Complex, beta: Complex) -> None:
    _apply(qureg, target, cpu_scalar.compact_entries(alpha, beta), control=control)


def unitary(qureg, target: int, matrix: ComplexMatrix2) -> None:
    _apply(qureg, target, cpu_scalar.matrix_entries(matrix))


def phase_shift_by_term(qureg, target: int, term: Complex) -> None:
    # never needs an exchange: the target bit is either local or fixed per chunk
    cpu_scalar.phase_shift_by_term(qureg, target, term)
